"""
unihook CLI - entry point for the unihook command

Inspect bindings in the interpreter namespace and run scripts with call
tracing hooks installed.
"""

import asyncio
import importlib
import json
import runpy
import sys
from typing import Any, Tuple

import click

from . import __version__
from .config import HookConfig
from .core.environment import UNRESOLVED, Environment, split_path
from .core.function_wrapper import Behavior, Metadata, unwrap_chain
from .core.hook_manager import UniversalHook
from .core.resolver import DEFAULT_TIMEOUT_MS, POLL_INTERVAL_MS, Resolver
from .exceptions import ResolutionTimeout


def import_target(environment: Environment, path: str) -> Any:
    """Resolve ``path``, importing its longest importable module prefix first."""
    parts = split_path(path)
    for end in range(len(parts), 0, -1):
        try:
            importlib.import_module(".".join(parts[:end]))
            break
        except ImportError:
            continue
    return environment.get(path)


def _short_repr(value: Any, limit: int = 200) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def tracing_behavior(path: str) -> Behavior:
    """Behavior that echoes each call and its outcome to stderr."""

    def before_call(args, original, context):
        click.echo(f"→ {path}{_short_repr(args)}", err=True)

    def after_call(result, args, original, context):
        click.echo(f"← {path} = {_short_repr(result)}", err=True)

    return Behavior(before_call=before_call, after_call=after_call)


@click.group()
@click.version_option(version=__version__, prog_name="unihook")
def cli():
    """unihook - intercept calls in a Python namespace without touching call sites"""
    pass


@cli.command()
@click.argument("path")
def inspect(path: str):
    """Show the reflective metadata of the binding at PATH."""
    environment = Environment()
    value = import_target(environment, path)
    if value is UNRESOLVED:
        click.echo(f"❌ {path} is not bound", err=True)
        sys.exit(1)

    info = Metadata.capture(value).to_dict()
    info["path"] = path
    info["callable"] = callable(value)
    info["wrapped_layers"] = len(unwrap_chain(value)) - 1
    click.echo(json.dumps(info, indent=2, default=str))


@cli.command()
@click.argument("path")
@click.option("--timeout-ms", default=DEFAULT_TIMEOUT_MS, show_default=True, type=int)
@click.option("--interval-ms", default=POLL_INTERVAL_MS, show_default=True, type=int)
def wait(path: str, timeout_ms: int, interval_ms: int):
    """Wait until PATH is bound, then print its repr."""
    environment = Environment()
    import_target(environment, path)
    resolver = Resolver(environment, interval_ms=interval_ms)
    try:
        value = asyncio.run(resolver.resolve(path, timeout_ms))
    except ResolutionTimeout as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(f"✅ {path} = {_short_repr(value)}")


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.argument("script_args", nargs=-1, type=click.UNPROCESSED)
@click.option("--trace", "-t", "traces", multiple=True, help="Dotted path of a callable to trace")
@click.option("--method", "-m", "methods", multiple=True, help="OBJECT_PATH:METHOD to trace")
@click.option("--debug", is_flag=True, help="Log hook installation and restoration")
def run(script: str, script_args: Tuple[str, ...], traces, methods, debug: bool):
    """Run SCRIPT with call tracing hooks installed, then restore them."""
    hooks = UniversalHook(config=HookConfig(debug=debug))

    with hooks:
        _install_traces(hooks, traces, methods)

        saved_argv = sys.argv
        sys.argv = [script, *script_args]
        try:
            runpy.run_path(script, run_name="__main__")
        finally:
            sys.argv = saved_argv


def _install_traces(hooks: UniversalHook, traces, methods) -> None:
    for path in traces:
        if import_target(hooks.environment, path) is UNRESOLVED:
            raise click.BadParameter(f"{path} is not bound", param_hint="--trace")
        if hooks.hook_function_advanced(path, tracing_behavior(path)) is not True:
            raise click.BadParameter(f"{path} could not be hooked", param_hint="--trace")

    for method_spec in methods:
        obj_path, _, method_name = method_spec.rpartition(":")
        if not obj_path or not method_name:
            raise click.BadParameter(
                f"expected OBJECT_PATH:METHOD, got {method_spec}", param_hint="--method"
            )
        if import_target(hooks.environment, obj_path) is UNRESOLVED:
            raise click.BadParameter(f"{obj_path} is not bound", param_hint="--method")
        behavior = tracing_behavior(f"{obj_path}.{method_name}")
        if hooks.hook_object_method(obj_path, method_name, behavior) is not True:
            raise click.BadParameter(f"{method_spec} could not be hooked", param_hint="--method")


def main():
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
