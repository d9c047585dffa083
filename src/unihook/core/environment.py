"""
Environment accessor for unihook.

Resolves dotted binding paths against a namespace root and writes replacement
bindings back. The accessor carries no policy; it only reads and writes.
"""

import builtins
import sys
from collections.abc import Mapping, MutableMapping
from typing import Any, Optional, Tuple


class _Unresolved:
    """Sentinel returned when a binding path does not resolve."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()


def split_path(path: str) -> Tuple[str, ...]:
    """Split a dotted path into its segments."""
    parts = tuple(path.split("."))
    if not path or any(not part for part in parts):
        raise ValueError(f"Invalid binding path: {path!r}")
    return parts


class GlobalNamespace:
    """The interpreter-wide namespace.

    A first path segment is looked up among the loaded modules, then among
    the builtins. Top-level writes go to ``builtins`` so that every module
    that has not shadowed the name sees the replacement.
    """

    def __getitem__(self, name: str) -> Any:
        module = sys.modules.get(name)
        if module is not None:
            return module
        try:
            return getattr(builtins, name)
        except AttributeError:
            raise KeyError(name) from None

    def __contains__(self, name: str) -> bool:
        return name in sys.modules or hasattr(builtins, name)

    def __setitem__(self, name: str, value: Any) -> None:
        if name in sys.modules:
            sys.modules[name] = value
        else:
            setattr(builtins, name, value)

    def __delitem__(self, name: str) -> None:
        if name in sys.modules:
            del sys.modules[name]
        else:
            delattr(builtins, name)

    def __repr__(self):
        return "<GlobalNamespace>"


def _lookup(node: Any, name: str) -> Any:
    if isinstance(node, (Mapping, GlobalNamespace)):
        try:
            value = node[name]
        except KeyError:
            return UNRESOLVED
    else:
        value = getattr(node, name, UNRESOLVED)
    return UNRESOLVED if value is None else value


def _assign(node: Any, name: str, value: Any) -> None:
    if isinstance(node, (MutableMapping, GlobalNamespace)):
        node[name] = value
    else:
        setattr(node, name, value)


def _remove(node: Any, name: str) -> None:
    if isinstance(node, (MutableMapping, GlobalNamespace)):
        del node[name]
    else:
        delattr(node, name)


class Environment:
    """Read/write access to bindings in a namespace tree."""

    def __init__(self, root: Optional[Any] = None):
        self.root = GlobalNamespace() if root is None else root

    def get(self, path: str) -> Any:
        """Return the value bound at ``path`` or :data:`UNRESOLVED`."""
        node = self.root
        for part in split_path(path):
            node = _lookup(node, part)
            if node is UNRESOLVED:
                return UNRESOLVED
        return node

    def is_resolved(self, path: str) -> bool:
        return self.get(path) is not UNRESOLVED

    def parent_of(self, path: str) -> Tuple[Any, str]:
        """Return the object holding the final segment of ``path`` and its name."""
        parts = split_path(path)
        if len(parts) == 1:
            return self.root, parts[0]
        parent = self.get(".".join(parts[:-1]))
        if parent is UNRESOLVED:
            raise LookupError(".".join(parts[:-1]))
        return parent, parts[-1]

    def set(self, path: str, value: Any) -> None:
        """Bind ``value`` at ``path``. Every parent segment must resolve."""
        parent, name = self.parent_of(path)
        _assign(parent, name, value)

    def delete(self, path: str) -> None:
        parent, name = self.parent_of(path)
        _remove(parent, name)

    def set_method(self, obj: Any, name: str, value: Any) -> None:
        """Attach ``value`` as attribute ``name`` of ``obj``."""
        _assign(obj, name, value)

    def delete_method(self, obj: Any, name: str) -> None:
        _remove(obj, name)

    def override_method(self, instance: Any, name: str, replacement: Any) -> Any:
        """Return ``instance`` with the single slot ``name`` overridden.

        Instances that refuse attribute assignment (``__slots__`` without a
        ``__dict__``, builtin types) are returned unchanged.
        """
        try:
            object.__setattr__(instance, name, replacement)
        except (AttributeError, TypeError):
            return instance
        return instance
