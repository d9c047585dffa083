"""
Constructor wrapper builder for unihook.

A hooked constructor delegates instance creation to the original class and
then overrides one method on each instance it produces, so the callback sees
every result that method returns.
"""

from typing import Any, Callable, Optional

from .environment import Environment
from .function_wrapper import Metadata


class HookedConstructor:
    """Stand-in for a class whose instances get one method intercepted.

    ``isinstance`` and ``issubclass`` checks against the stand-in are answered
    by the original class, and subclassing the stand-in subclasses the
    original.
    """

    def __init__(
        self,
        original: type,
        method_name: str,
        callback: Callable,
        environment: Optional[Environment] = None,
        logger=None,
        display_name: Optional[str] = None,
    ):
        self.__wrapped__ = original
        self._method_name = method_name
        self._callback = callback
        self._environment = environment or Environment()
        self._log = logger
        Metadata.capture(original, display_name=display_name).apply(self)

    def __call__(self, *args, **kwargs):
        instance = self.__wrapped__(*args, **kwargs)
        return self._intercept(instance)

    def _intercept(self, instance: Any) -> Any:
        """Override ``method_name`` on ``instance`` if it is callable."""
        method = getattr(instance, self._method_name, None)
        if not callable(method):
            return instance

        callback = self._callback

        def hooked_method(*method_args, **method_kwargs):
            result = method(*method_args, **method_kwargs)
            return callback(result, method_args, method, instance)

        Metadata.capture(method).apply(hooked_method)
        hooked_method.__wrapped__ = method

        instance = self._environment.override_method(instance, self._method_name, hooked_method)
        installed = getattr(instance, self._method_name, None) is hooked_method
        if self._log is not None and not installed:
            self._log.debug(
                "Could not override %s on %s instance",
                self._method_name,
                type(instance).__name__,
            )
        return instance

    def __instancecheck__(self, obj: Any) -> bool:
        return isinstance(obj, self.__wrapped__)

    def __subclasscheck__(self, cls: type) -> bool:
        return issubclass(cls, self.__wrapped__)

    def __mro_entries__(self, bases):
        return (self.__wrapped__,)

    def __repr__(self):
        name = getattr(self.__wrapped__, "__qualname__", repr(self.__wrapped__))
        return f"<HookedConstructor {name}.{self._method_name}>"


def build_constructor(
    original: type,
    method_name: str,
    callback: Callable,
    environment: Optional[Environment] = None,
    logger=None,
    display_name: Optional[str] = None,
) -> HookedConstructor:
    """Wrap ``original`` so ``callback`` sees every ``method_name`` result."""
    return HookedConstructor(
        original,
        method_name,
        callback,
        environment=environment,
        logger=logger,
        display_name=display_name,
    )
