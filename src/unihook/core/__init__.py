"""
Core functionality package for unihook.

This package contains the namespace accessor, resolver, wrapper builders and
registry that together install and restore hooks.
"""

from .constructor_wrapper import *
from .environment import *
from .function_wrapper import *
from .hook_manager import *
from .registry import *
from .resolver import *

__version__ = "0.1.0"
