"""
Data model for Multisite: global configuration, site specs and run options.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional, Tuple, Union


class ConfigError(ValueError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class SiteOverride:
    """Per-site settings that take precedence over the global ones."""

    out_dir: Optional[str] = None
    config_path: Optional[str] = None
    path_prefix: Optional[str] = None
    template_formats: Optional[List[str]] = None
    ignore_global: bool = False


@dataclass(frozen=True)
class PlainPattern:
    """A site glob that uses the default configuration."""

    glob: str


@dataclass(frozen=True)
class OverriddenPattern:
    """A site glob paired with its own override."""

    glob: str
    override: SiteOverride


SiteSpec = Union[PlainPattern, OverriddenPattern]


@dataclass(frozen=True)
class GlobalConfig:
    base_dir: str
    out_dir: str
    sites: Tuple[SiteSpec, ...] = ()
    path_prefix: Optional[str] = None
    template_formats: Optional[List[str]] = None
    excludes: Union[List[str], str, None] = None
    includes_dir: Optional[str] = None
    layouts_dir: Optional[str] = None

    @property
    def exclude_patterns(self) -> List[str]:
        """Excludes as a list, whichever form they were given in."""
        if not self.excludes:
            return []
        if isinstance(self.excludes, str):
            return [self.excludes]
        return list(self.excludes)


DEFAULT_CONFIG = GlobalConfig(
    base_dir='sites/',
    out_dir='_out/',
    sites=(PlainPattern('*'),),
    includes_dir='_includes/',
    layouts_dir='_layouts/',
)


@dataclass
class RunOptions:
    """Launch parameters for a single site, built fresh for every run."""

    source_dir: str
    out_dir: str
    config_path: Optional[str] = None
    path_prefix: Optional[str] = None
    template_formats: Optional[List[str]] = None
    port: Optional[int] = None
    serve: bool = False
    watch: bool = False
    dry_run: bool = False
    incremental: bool = False
    quiet: bool = False
    ignore_global: bool = False
    global_config_path: Optional[str] = None


_OVERRIDE_KEYS = {f.name for f in fields(SiteOverride)}
CONFIG_KEYS = {f.name for f in fields(GlobalConfig)}


def parse_override(raw: Any, glob: str = '') -> SiteOverride:
    """Build a SiteOverride from a mapping, rejecting unknown keys."""
    if raw is None:
        return SiteOverride()
    if not isinstance(raw, dict):
        raise ConfigError(f"Override for site '{glob}' must be a mapping, got {type(raw).__name__}")
    unknown = set(raw) - _OVERRIDE_KEYS
    if unknown:
        raise ConfigError(f"Unknown override keys for site '{glob}': {', '.join(sorted(unknown))}")
    values = dict(raw)
    formats = values.get('template_formats')
    if isinstance(formats, str):
        values['template_formats'] = [fmt.strip() for fmt in formats.split(',') if fmt.strip()]
    ignore_global = values.get('ignore_global', False)
    if not isinstance(ignore_global, bool):
        raise ConfigError(f"'ignore_global' for site '{glob}' must be true or false, got {ignore_global!r}")
    return SiteOverride(**values)


def parse_site_spec(raw: Any) -> SiteSpec:
    """
    Convert a site spec as written in a config file into a SiteSpec.

    Accepted forms:
        "blog/*"                          -> PlainPattern
        ["docs", {"config_path": ...}]    -> OverriddenPattern
        {"docs": {"config_path": ...}}    -> OverriddenPattern
    """
    if isinstance(raw, (PlainPattern, OverriddenPattern)):
        return raw
    if isinstance(raw, str):
        return PlainPattern(raw)
    if isinstance(raw, (list, tuple)) and len(raw) == 2 and isinstance(raw[0], str):
        return OverriddenPattern(raw[0], parse_override(raw[1], raw[0]))
    if isinstance(raw, dict) and len(raw) == 1:
        glob, override = next(iter(raw.items()))
        if isinstance(glob, str):
            return OverriddenPattern(glob, parse_override(override, glob))
    raise ConfigError(f"Invalid site spec: {raw!r}")


def merge_config(user: Optional[Dict[str, Any]] = None, defaults: GlobalConfig = DEFAULT_CONFIG) -> GlobalConfig:
    """
    Merge a user configuration over the defaults.

    Every key is optional; keys that are present (and not None) replace the
    default value, everything else is inherited.
    """
    if not user:
        return defaults
    unknown = set(user) - CONFIG_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    values = {key: value for key, value in user.items() if value is not None}
    if 'sites' in values:
        sites = values['sites']
        if isinstance(sites, str):
            sites = [sites]
        if not isinstance(sites, (list, tuple)):
            raise ConfigError("'sites' must be a list of site specs")
        values['sites'] = tuple(parse_site_spec(spec) for spec in sites)
    formats = values.get('template_formats')
    if isinstance(formats, str):
        values['template_formats'] = [fmt.strip() for fmt in formats.split(',') if fmt.strip()]
    return replace(defaults, **values)


def build_run_options(config: GlobalConfig, site: str, override: Optional[SiteOverride] = None, **flags) -> RunOptions:
    """
    Resolve the launch parameters for `site`.

    Fields the override leaves unset fall back to the global configuration.
    `flags` carries the invocation switches (serve, watch, port, dry_run,
    incremental, quiet, global_config_path).
    """
    override = override or SiteOverride()
    return RunOptions(
        source_dir=os.path.join(config.base_dir, site),
        out_dir=override.out_dir or os.path.join(config.out_dir, site),
        config_path=override.config_path,
        path_prefix=override.path_prefix or config.path_prefix,
        template_formats=override.template_formats or config.template_formats,
        ignore_global=override.ignore_global,
        **flags
    )
