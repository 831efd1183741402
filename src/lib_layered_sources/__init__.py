"""Public package surface of ``lib_layered_sources``.

Load configuration from the environment, system properties, strings, mappings,
files and URLs, stack the results as layers where the newest wins, and keep
files or URLs hot-reloaded with watches.
"""

from __future__ import annotations

from .adapters.env.default import default_env_prefix, env_key_to_path, path_to_env_key
from .adapters.sysprops.default import SYSTEM_PROPERTIES, SystemProperties
from .application.ports import Provider, ProviderFormat, Scheduler
from .application.watch import WatchHandle, WatchState
from .core import DEFAULT_WATCH_INTERVAL, DefaultLoaders, with_source_from
from .domain.config import EMPTY_CONFIG, Config, Layer, SourceInfo
from .domain.errors import ConfigError, LoadFailure, ParseFailure, UnsupportedExtension
from .observability import bind_trace_id, get_logger
from .registry import BUILTIN_EXTENSIONS, ProviderRegistry

__all__ = [
    "BUILTIN_EXTENSIONS",
    "Config",
    "ConfigError",
    "DEFAULT_WATCH_INTERVAL",
    "DefaultLoaders",
    "EMPTY_CONFIG",
    "Layer",
    "LoadFailure",
    "ParseFailure",
    "Provider",
    "ProviderFormat",
    "ProviderRegistry",
    "SYSTEM_PROPERTIES",
    "Scheduler",
    "SourceInfo",
    "SystemProperties",
    "UnsupportedExtension",
    "WatchHandle",
    "WatchState",
    "bind_trace_id",
    "default_env_prefix",
    "env_key_to_path",
    "get_logger",
    "path_to_env_key",
    "with_source_from",
]
