"""
unihook - Call interception for Python namespaces

Intercept calls to functions, object methods and constructors bound in a
shared namespace without touching their call sites, wait for bindings that do
not exist yet, and restore the originals afterwards.
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

# Configuration
from .config import Config, HookConfig, get_config
from .core.constructor_wrapper import HookedConstructor, build_constructor
from .core.environment import UNRESOLVED, Environment, GlobalNamespace
from .core.function_wrapper import Behavior, Metadata, build_source_wrapper, build_wrapper
from .core.hook_manager import UniversalHook, universal_hook
from .core.registry import HookKind, HookRecord, HookRegistry, RestoreTarget
from .core.resolver import PendingResolution, Resolver
from .exceptions import HookError, NotCallable, NotFound, ResolutionTimeout

# Module-level registration surface bound to the default instance
set_config = universal_hook.set_config
hook_function = universal_hook.hook_function
hook_function_advanced = universal_hook.hook_function_advanced
hook_constructor = universal_hook.hook_constructor
hook_function_constructor = universal_hook.hook_function_constructor
hook_object_method = universal_hook.hook_object_method
restore = universal_hook.restore
restore_all = universal_hook.restore_all
get_hook_info = universal_hook.get_hook_info
list_hooks = universal_hook.list_hooks

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Registration surface
    "UniversalHook",
    "universal_hook",
    "set_config",
    "hook_function",
    "hook_function_advanced",
    "hook_constructor",
    "hook_function_constructor",
    "hook_object_method",
    "restore",
    "restore_all",
    "get_hook_info",
    "list_hooks",
    # Building blocks
    "Behavior",
    "Metadata",
    "build_wrapper",
    "build_source_wrapper",
    "HookedConstructor",
    "build_constructor",
    "Environment",
    "GlobalNamespace",
    "UNRESOLVED",
    "Resolver",
    "PendingResolution",
    "HookRegistry",
    "HookRecord",
    "HookKind",
    "RestoreTarget",
    # Configuration
    "Config",
    "HookConfig",
    "get_config",
    # Errors
    "HookError",
    "ResolutionTimeout",
    "NotCallable",
    "NotFound",
]
