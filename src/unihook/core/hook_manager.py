"""
Hook manager for unihook

The registration surface of the hook system. Resolves targets in the
namespace (waiting for them when they are not bound yet), builds the
replacement, swaps the binding, and records how to swap it back.
"""

import asyncio
import atexit
import inspect
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Union

from ..config import Config, HookConfig
from ..exceptions import HookError, NotCallable, NotFound
from .constructor_wrapper import build_constructor
from .environment import UNRESOLVED, Environment, split_path
from .function_wrapper import CODE_COMPILERS, Behavior, build_source_wrapper, build_wrapper
from .hook_logger import HookLogger
from .registry import HookKind, HookRecord, HookRegistry, RestoreTarget
from .resolver import Resolver

BehaviorLike = Union[Behavior, Dict[str, Any], None]


def _as_behavior(behavior: BehaviorLike, callbacks: Dict[str, Any]) -> Behavior:
    if isinstance(behavior, Behavior):
        return Behavior.from_options(vars(behavior), **callbacks) if callbacks else behavior
    return Behavior.from_options(behavior, **callbacks)


class UniversalHook:
    """Installs, tracks and restores hooks on namespace bindings."""

    def __init__(
        self,
        environment: Optional[Environment] = None,
        config: Optional[HookConfig] = None,
        logger=None,
    ):
        self.environment = environment or Environment()
        self.config = config if config is not None else Config.get_instance()
        self.log = HookLogger(self.config, logger)
        self.resolver = Resolver(
            self.environment, interval_ms=self.config.poll_interval_ms, logger=self.log
        )
        self.registry = HookRegistry(self.environment, self.log)
        self._teardown_registered = False
        self._sync_teardown()

    # Configuration

    def set_config(self, partial: Optional[Dict[str, Any]] = None, **kwargs) -> "UniversalHook":
        """Shallow-merge settings into this instance's configuration."""
        updates = dict(partial or {})
        updates.update(kwargs)
        self.config.merge(updates)

        if "log_level" in updates:
            self.log.logger.setLevel(self.config.log_level)
        if "poll_interval_ms" in updates:
            self.resolver.interval_ms = self.config.poll_interval_ms
        self._sync_teardown()
        return self

    def _sync_teardown(self) -> None:
        if self.config.auto_restore_on_teardown and not self._teardown_registered:
            atexit.register(self.restore_all)
            self._teardown_registered = True
        elif not self.config.auto_restore_on_teardown and self._teardown_registered:
            atexit.unregister(self.restore_all)
            self._teardown_registered = False

    # Hook installation

    def hook_function(
        self,
        name: str,
        callback: Callable,
        options: BehaviorLike = None,
        **kwargs,
    ):
        """Hook ``name`` so ``callback(result, args, original)`` sees each result.

        ``options`` may add ``before_call`` and ``on_error``. The explicit
        callback always supplies ``after_call``.
        """
        behavior = _as_behavior(options, kwargs)
        if behavior.after_call is not None:
            self.log.warning("Ignoring after_call option for %s; the callback wins", name)

        def after_call(result, args, original, context):
            return callback(result, args, original)

        return self.hook_function_advanced(name, behavior.with_after_call(after_call))

    def hook_function_advanced(
        self,
        name: str,
        behavior: BehaviorLike = None,
        timeout_ms: Optional[int] = None,
        **callbacks,
    ):
        """Hook the function bound at ``name`` with a full behavior.

        Returns ``True``/``False`` when the target is already bound. Otherwise
        the install is deferred until it appears, and an awaitable resolving
        to the same boolean is returned.
        """
        behavior = _as_behavior(behavior, callbacks)
        if not self.environment.is_resolved(name):
            self.log.info("Waiting for function %s...", name)
            return self._defer(name, lambda: self._install_function(name, behavior), timeout_ms)
        return self._install_function(name, behavior)

    def hook_constructor(
        self,
        name: str,
        method_name: str,
        callback: Callable,
        timeout_ms: Optional[int] = None,
    ):
        """Hook the class bound at ``name`` so ``method_name`` results of each
        new instance pass through ``callback(result, args, method, instance)``.
        """
        if not self.environment.is_resolved(name):
            self.log.info("Waiting for constructor %s...", name)
            return self._defer(
                name, lambda: self._install_constructor(name, method_name, callback), timeout_ms
            )
        return self._install_constructor(name, method_name, callback)

    def hook_function_constructor(self, callback: Callable, name: str = "compile") -> bool:
        """Intercept source text passed to a builtin code compiler."""
        if name not in CODE_COMPILERS:
            self.log.error("%s is not a code compiler (expected one of %s)", name, CODE_COMPILERS)
            return False
        try:
            original = self._callable_at(name)
        except HookError as error:
            self.log.error("%s", error)
            return False

        hooked = build_source_wrapper(original, callback, name=name)
        self.environment.set(name, hooked)
        self.registry.install(
            HookRecord(
                id=name,
                kind=HookKind.DYNAMIC_CODE_CONSTRUCTOR,
                original=original,
                target=RestoreTarget.binding(name),
                replacement=hooked,
                behavior=callback,
            )
        )
        self.log.info("Hooked %s source compiler", name)
        return True

    def hook_object_method(
        self,
        path: str,
        method_name: str,
        behavior: BehaviorLike = None,
        timeout_ms: Optional[int] = None,
        **callbacks,
    ):
        """Hook ``method_name`` on the object bound at the dotted ``path``.

        Only the segments before the last one are waited for; if they resolve
        but the object itself is missing, the hook fails with ``False``.
        """
        behavior = _as_behavior(behavior, callbacks)
        parts = split_path(path)
        awaited = ".".join(parts[:-1]) if len(parts) > 1 else path
        if not self.environment.is_resolved(awaited):
            self.log.info("Waiting for object %s...", awaited)

            def install() -> bool:
                return self._install_object_method(path, method_name, behavior)

            return self._defer(awaited, install, timeout_ms)
        return self._install_object_method(path, method_name, behavior)

    # Restoration and introspection

    def restore(self, hook_id: str) -> bool:
        """Revert the hook ``hook_id``; False if it is not installed."""
        return self.registry.restore(hook_id)

    def restore_all(self) -> "UniversalHook":
        """Revert every installed hook."""
        self.registry.restore_all()
        return self

    def get_hook_info(self, hook_id: str) -> Optional[HookRecord]:
        return self.registry.get(hook_id)

    def list_hooks(self) -> List[str]:
        return self.registry.list_ids()

    def __enter__(self) -> "UniversalHook":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.restore_all()

    # Internals

    def _defer(self, path: str, install: Callable[[], bool], timeout_ms: Optional[int]):
        """Install once ``path`` resolves.

        Returns a task on the running event loop, or the bare coroutine when
        no loop is running so the caller can drive it.
        """
        if timeout_ms is None:
            timeout_ms = self.config.default_timeout_ms

        async def install_when_ready() -> bool:
            await self.resolver.resolve(path, timeout_ms)
            return install()

        coroutine = install_when_ready()
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return coroutine
        return asyncio.ensure_future(coroutine)

    def _callable_at(self, path: str) -> Any:
        value = self.environment.get(path)
        if value is UNRESOLVED:
            raise NotFound(path, "Function")
        if not callable(value):
            raise NotCallable(path, value)
        return value

    def _install_function(self, name: str, behavior: Behavior) -> bool:
        try:
            original = self._callable_at(name)
        except HookError as error:
            self.log.error("%s", error)
            return False

        hooked = build_wrapper(original, behavior, context=self.environment.root)
        self.environment.set(name, hooked)
        self.registry.install(
            HookRecord(
                id=name,
                kind=HookKind.GLOBAL_FUNCTION,
                original=original,
                target=RestoreTarget.binding(name),
                replacement=hooked,
                behavior=behavior,
            )
        )
        self.log.info("Hooked function %s", name)
        return True

    def _install_constructor(self, name: str, method_name: str, callback: Callable) -> bool:
        try:
            original = self._callable_at(name)
        except HookError as error:
            self.log.error("%s", error)
            return False

        hooked = build_constructor(
            original,
            method_name,
            callback,
            environment=self.environment,
            logger=self.log,
        )
        self.environment.set(name, hooked)
        self.registry.install(
            HookRecord(
                id=name,
                kind=HookKind.CONSTRUCTOR,
                original=original,
                target=RestoreTarget.binding(name),
                replacement=hooked,
                behavior=callback,
                method_name=method_name,
            )
        )
        self.log.info("Hooked %s.%s", name, method_name)
        return True

    def _install_object_method(self, path: str, method_name: str, behavior: Behavior) -> bool:
        hook_id = f"{path}.{method_name}"
        try:
            obj = self.environment.get(path)
            if obj is UNRESOLVED:
                raise NotFound(path)
            original = self.environment.get(hook_id)
            if original is UNRESOLVED:
                raise NotFound(hook_id, "Method")
            if not callable(original):
                raise NotCallable(hook_id, original)
        except HookError as error:
            self.log.error("%s", error)
            return False

        if isinstance(obj, Mapping):
            own, raw = True, original
        else:
            own_attrs = getattr(obj, "__dict__", {})
            own = method_name in own_attrs
            if own:
                raw = own_attrs[method_name]
            else:
                raw = inspect.getattr_static(obj, method_name, original)

        hooked = build_wrapper(original, behavior, context=obj)
        if isinstance(obj, type) and isinstance(raw, (staticmethod, classmethod)):
            hooked = staticmethod(hooked)

        try:
            self.environment.set_method(obj, method_name, hooked)
        except (AttributeError, TypeError) as error:
            self.log.error("Cannot replace %s: %s", hook_id, error)
            return False

        self.registry.install(
            HookRecord(
                id=hook_id,
                kind=HookKind.OBJECT_METHOD,
                original=raw if own else original,
                target=RestoreTarget.method(obj, method_name, own=own),
                replacement=hooked,
                behavior=behavior,
                method_name=method_name,
            )
        )
        self.log.info("Hooked %s", hook_id)
        return True


# Process-wide default instance over the interpreter's global namespace.
universal_hook = UniversalHook()
