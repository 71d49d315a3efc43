"""
impmon Loader Package.

Import interception, resolution, caching and reloading.
Requires Python 3.11+.
"""

from impmon.loader.cache import ModuleCache
from impmon.loader.ignore import IgnoreList, matches
from impmon.loader.reloader import ModuleReloader, UNLOAD_HOOK
from impmon.loader.request import ImportRequest, canonical_path
from impmon.loader.resolver import ModuleResolver, Resolution, ResolutionError
from impmon.loader.scoped import DependencyScopedLoader

__all__ = [
    "ModuleCache",
    "IgnoreList",
    "matches",
    "ModuleReloader",
    "UNLOAD_HOOK",
    "ImportRequest",
    "canonical_path",
    "ModuleResolver",
    "Resolution",
    "ResolutionError",
    "DependencyScopedLoader",
]
