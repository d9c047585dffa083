"""
Wrapper builder for unihook.

Builds replacement callables that enforce the interception contract shared by
function hooks and object-method hooks:

    before_call(args, original, context)           -> new args or None
    original(*args, **kwargs)
    after_call(result, args, original, context)    -> new result or None
    on_error(error, args, original, context)       -> replacement result

Awaitable results are settled asynchronously before ``after_call`` runs.
"""

import inspect
import sys
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Sequence, Tuple


@dataclass
class Behavior:
    """The callbacks controlling a hook. Missing callbacks pass through."""

    before_call: Optional[Callable] = None
    after_call: Optional[Callable] = None
    on_error: Optional[Callable] = None

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None, **overrides) -> "Behavior":
        """Build a behavior from a mapping of callback names, ignoring other keys."""
        merged = dict(options or {})
        merged.update(overrides)
        return cls(
            before_call=merged.get("before_call"),
            after_call=merged.get("after_call"),
            on_error=merged.get("on_error"),
        )

    def with_after_call(self, callback: Callable) -> "Behavior":
        return replace(self, after_call=callback)

    @property
    def is_passthrough(self) -> bool:
        return self.before_call is None and self.after_call is None and self.on_error is None


@dataclass
class Metadata:
    """Reflective shape of a callable, copied onto its replacement."""

    display_name: Optional[str] = None
    qualname: Optional[str] = None
    module: Optional[str] = None
    doc: Optional[str] = None
    arity: Optional[int] = None
    signature: Optional[inspect.Signature] = None
    own_properties: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def capture(cls, obj: Any, display_name: Optional[str] = None) -> "Metadata":
        try:
            signature = inspect.signature(obj)
        except (TypeError, ValueError):
            signature = None

        return cls(
            display_name=display_name or getattr(obj, "__name__", None),
            qualname=getattr(obj, "__qualname__", None),
            module=getattr(obj, "__module__", None),
            doc=getattr(obj, "__doc__", None),
            arity=_arity(signature),
            signature=signature,
            own_properties=_own_properties(obj),
        )

    def apply(self, target: Any) -> Any:
        """Copy every captured field onto ``target`` and return it."""
        if self.display_name is not None:
            target.__name__ = self.display_name
        if self.qualname is not None:
            target.__qualname__ = self.qualname
        if self.module is not None:
            target.__module__ = self.module
        target.__doc__ = self.doc
        if self.signature is not None:
            target.__signature__ = self.signature
        for key, value in self.own_properties.items():
            try:
                setattr(target, key, value)
            except (AttributeError, TypeError):
                continue
        return target

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "qualname": self.qualname,
            "module": self.module,
            "doc": self.doc,
            "arity": self.arity,
            "signature": str(self.signature) if self.signature is not None else None,
            "own_properties": sorted(self.own_properties),
        }


def _arity(signature: Optional[inspect.Signature]) -> Optional[int]:
    """Number of positional parameters before the first default."""
    if signature is None:
        return None
    count = 0
    for param in signature.parameters.values():
        if param.kind not in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            break
        if param.default is not param.empty:
            break
        count += 1
    return count


def _own_properties(obj: Any) -> Dict[str, Any]:
    try:
        names = list(vars(obj))
    except TypeError:
        return {}
    properties = {}
    for name in names:
        if name.startswith("_"):
            continue
        try:
            properties[name] = getattr(obj, name)
        except AttributeError:
            continue
    return properties


def _as_args(value: Any) -> Tuple:
    if isinstance(value, tuple):
        return value
    if isinstance(value, list):
        return tuple(value)
    raise TypeError(
        f"before_call must return a tuple or list of arguments, not {type(value).__name__}"
    )


def build_wrapper(
    original: Callable,
    behavior: Behavior,
    context: Any = None,
    metadata: Optional[Metadata] = None,
) -> Callable:
    """Return a replacement for ``original`` that applies ``behavior``.

    ``context`` is handed to every callback: the namespace root for plain
    functions, the owning object for object methods. Keyword arguments are
    passed to ``original`` unchanged.
    """
    before_call = behavior.before_call
    after_call = behavior.after_call
    on_error = behavior.on_error

    async def settle(pending, args):
        try:
            resolved = await pending
            processed = after_call(resolved, args, original, context)
            if inspect.isawaitable(processed):
                processed = await processed
        except Exception as error:
            if on_error is None:
                raise
            handled = on_error(error, args, original, context)
            if inspect.isawaitable(handled):
                handled = await handled
            return handled
        return resolved if processed is None else processed

    def hooked(*args, **kwargs):
        call_args = args
        if before_call is not None:
            replaced = before_call(args, original, context)
            if replaced is not None:
                call_args = _as_args(replaced)

        try:
            result = original(*call_args, **kwargs)
        except Exception as error:
            if on_error is None:
                raise
            return on_error(error, call_args, original, context)

        if after_call is None:
            return result

        if inspect.isawaitable(result):
            return settle(result, call_args)

        processed = after_call(result, call_args, original, context)
        return result if processed is None else processed

    if metadata is None:
        metadata = Metadata.capture(original)
    metadata.apply(hooked)
    hooked.__wrapped__ = original
    return hooked


# Builtins that compile source text into executable code.
CODE_COMPILERS = ("compile", "exec", "eval")

# exec/eval default to the caller's namespaces.
_CALLER_SCOPED = ("exec", "eval")


def _with_caller_scope(
    args: tuple, kwargs: Dict[str, Any], frame
) -> Tuple[tuple, Dict[str, Any]]:
    """Fill in missing or ``None`` namespaces of an exec/eval call from ``frame``."""
    source, globals_, locals_ = (list(args) + [None, None])[:3]
    globals_ = kwargs.pop("globals", globals_)
    locals_ = kwargs.pop("locals", locals_)
    if globals_ is None:
        globals_ = frame.f_globals
        if locals_ is None:
            locals_ = frame.f_locals
    if locals_ is None:
        return (source, globals_), kwargs
    return (source, globals_, locals_), kwargs


def build_source_wrapper(
    original: Callable, callback: Callable, name: str = "compile"
) -> Callable:
    """Return a replacement for a builtin code compiler.

    ``callback(source, params, original)`` sees the source text before it is
    compiled; a ``str`` or ``bytes`` return value replaces it. ``params`` is
    the list of remaining positional arguments.
    """
    scoped = name in _CALLER_SCOPED

    def hooked(*args, **kwargs):
        if args:
            source, params = args[0], list(args[1:])
            processed = callback(source, params, original)
            if isinstance(processed, (str, bytes)):
                args = (processed, *params)
        elif "source" in kwargs:
            processed = callback(kwargs["source"], [], original)
            if isinstance(processed, (str, bytes)):
                kwargs["source"] = processed

        if scoped and args:
            args, kwargs = _with_caller_scope(args, kwargs, sys._getframe(1))
        return original(*args, **kwargs)

    Metadata.capture(original, display_name=name).apply(hooked)
    hooked.__wrapped__ = original
    return hooked


def unwrap_chain(func: Callable) -> Sequence[Callable]:
    """List ``func`` and every callable it wraps, outermost first."""
    chain = [func]
    seen = {id(func)}
    while True:
        inner = getattr(chain[-1], "__wrapped__", None)
        if inner is None or id(inner) in seen:
            return chain
        seen.add(id(inner))
        chain.append(inner)
