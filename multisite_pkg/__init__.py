"""
Multisite - run a static site generator on many sites at once.

Multisite finds site directories under a base directory, picks the matching
per-site configuration for each, and hands every site to an external static
site generator with the right output directory, path prefix and formats.
"""

__version__ = "1.0.0"

from .config import (
    DEFAULT_CONFIG,
    ConfigError,
    GlobalConfig,
    OverriddenPattern,
    PlainPattern,
    RunOptions,
    SiteOverride,
    build_run_options,
)
from .logger import logger
from .runner import run_site
from .sites import SiteMatch, find_sites, match_site_config

__all__ = [
    'DEFAULT_CONFIG',
    'ConfigError',
    'GlobalConfig',
    'OverriddenPattern',
    'PlainPattern',
    'RunOptions',
    'SiteMatch',
    'SiteOverride',
    'build_run_options',
    'find_sites',
    'logger',
    'match_site_config',
    'run_site',
]
