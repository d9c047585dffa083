"""
Hook registry for unihook.

Maps hook ids to the records needed to put the original bindings back.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .environment import Environment

_MISSING = object()


class HookKind(Enum):
    """What sort of binding a hook replaced."""

    GLOBAL_FUNCTION = "global_function"
    CONSTRUCTOR = "constructor"
    OBJECT_METHOD = "object_method"
    DYNAMIC_CODE_CONSTRUCTOR = "dynamic_code_constructor"


@dataclass
class RestoreTarget:
    """Where a hook's original goes back to.

    Either a namespace binding path, or an object plus attribute name. For
    object attributes ``own`` records whether the original lived in the
    object's own ``__dict__``; if not, restoring deletes the override so the
    inherited attribute shows through again.
    """

    path: Optional[str] = None
    obj: Any = None
    attribute: Optional[str] = None
    own: bool = True

    @classmethod
    def binding(cls, path: str) -> "RestoreTarget":
        return cls(path=path)

    @classmethod
    def method(cls, obj: Any, attribute: str, own: bool = True) -> "RestoreTarget":
        return cls(obj=obj, attribute=attribute, own=own)

    @property
    def is_binding(self) -> bool:
        return self.path is not None

    def describe(self) -> str:
        if self.is_binding:
            return self.path
        return f"{type(self.obj).__name__}.{self.attribute}"


@dataclass
class HookRecord:
    """Everything needed to reverse one installed hook."""

    id: str
    kind: HookKind
    original: Any
    target: RestoreTarget
    replacement: Any = None
    behavior: Any = None
    method_name: Optional[str] = None
    previous: Optional["HookRecord"] = field(default=None, repr=False)

    @property
    def layers(self) -> int:
        """How many hooks are stacked under this id."""
        count, record = 1, self.previous
        while record is not None:
            count, record = count + 1, record.previous
        return count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "original": repr(self.original),
            "target": self.target.describe(),
            "method_name": self.method_name,
            "layers": self.layers,
        }


class HookRegistry:
    """Registry of installed hooks keyed by id."""

    def __init__(self, environment: Environment, logger=None):
        self.environment = environment
        self.log = logger
        self._records: Dict[str, HookRecord] = {}

    def install(self, record: HookRecord) -> HookRecord:
        """Insert ``record`` under ``record.id``.

        If the id is already taken, the new record replaces the old one but
        inherits its original and keeps it as ``previous``; restoring the id
        then unwinds every stacked layer back to the first original.
        """
        existing = self._records.get(record.id)
        if existing is not None:
            record = replace(
                record, original=existing.original, target=existing.target, previous=existing
            )
            if self.log:
                self.log.warning(
                    "Hook %s installed over an existing hook (%d layers)", record.id, record.layers
                )
        self._records[record.id] = record
        return record

    def restore(self, hook_id: str) -> bool:
        """Put the original back for ``hook_id``. False if no such hook.

        Errors from writing the original back propagate and the hook stays
        registered.
        """
        record = self._records.get(hook_id)
        if record is None:
            return False

        self._write_back(record)
        del self._records[hook_id]
        if self.log:
            self.log.info("Restored %s", hook_id)
        return True

    def restore_all(self) -> int:
        """Restore every installed hook; returns how many were restored.

        A hook whose target can no longer be written (its parent was removed,
        or the attribute became read-only) is logged and dropped, and the
        remaining hooks are still restored.
        """
        restored = 0
        for hook_id in list(self._records):
            try:
                if self.restore(hook_id):
                    restored += 1
            except (LookupError, AttributeError, TypeError) as error:
                self._records.pop(hook_id, None)
                if self.log:
                    self.log.error("Could not restore %s: %s", hook_id, error)
        return restored

    def get(self, hook_id: str) -> Optional[HookRecord]:
        return self._records.get(hook_id)

    def list_ids(self) -> List[str]:
        return list(self._records)

    def __contains__(self, hook_id: str) -> bool:
        return hook_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def _write_back(self, record: HookRecord) -> None:
        target = record.target
        if target.is_binding:
            self.environment.set(target.path, record.original)
        elif target.own:
            self.environment.set_method(target.obj, target.attribute, record.original)
        elif getattr(target.obj, "__dict__", {}).get(target.attribute, _MISSING) is not _MISSING:
            self.environment.delete_method(target.obj, target.attribute)
