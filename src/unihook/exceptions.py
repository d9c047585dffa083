"""Exception types raised by the hook system."""


class HookError(Exception):
    """Base class for all unihook errors."""


class ResolutionTimeout(HookError, TimeoutError):
    """A binding path never became resolvable within the timeout."""

    def __init__(self, path: str, timeout_ms: int):
        super().__init__(f"Timeout waiting for {path} ({timeout_ms}ms)")
        self.path = path
        self.timeout_ms = timeout_ms


class NotCallable(HookError, TypeError):
    """The hook target exists but cannot be invoked."""

    def __init__(self, path: str, value=None):
        super().__init__(f"{path} is not callable (got {type(value).__name__})")
        self.path = path
        self.value = value


class NotFound(HookError, LookupError):
    """A segment of the hook target's path is missing."""

    def __init__(self, path: str, what: str = "Object"):
        super().__init__(f"{what} not found: {path}")
        self.path = path
