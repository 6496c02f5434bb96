"""
Site discovery and per-site configuration matching.
"""

import os
from enum import Enum
from typing import Callable, List, Sequence, Union

import pathspec
from wcmatch import glob

from .config import GlobalConfig, OverriddenPattern, SiteOverride

# minimatch-like behaviour: `**` crosses directories, braces and extglobs
# expand, `*` does not match dotfiles.
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.EXTGLOB

GITIGNORE = '.gitignore'


class SiteMatch(Enum):
    """Outcomes of `match_site_config` that carry no override."""

    USE_DEFAULT = 'use-default'
    NO_MATCH = 'no-match'


def load_ignore_filter(path: str = GITIGNORE) -> Callable[[str], bool]:
    """
    Return a predicate telling whether a path is ignored by the `.gitignore`
    at `path`. Without such a file nothing is ignored.
    """
    if not os.path.isfile(path):
        return lambda candidate: False

    with open(path, 'r', encoding='utf-8') as f:
        spec = pathspec.GitIgnoreSpec.from_lines(f)

    def is_ignored(candidate: str) -> bool:
        rel = os.path.relpath(candidate)
        if _escapes(rel):
            # Outside the working tree, .gitignore has no say.
            return False
        return spec.match_file(rel.replace(os.sep, '/') + '/')

    return is_ignored


def _escapes(rel: str) -> bool:
    return rel == os.pardir or rel.startswith(os.pardir + os.sep)


def is_inside(candidate: str, boundary: str) -> bool:
    """True when `candidate` is `boundary` itself or anywhere below it."""
    return not _escapes(os.path.relpath(candidate, boundary))


def _is_excluded(candidate: str, excludes: List[str]) -> bool:
    if not excludes:
        return False
    stripped = candidate.rstrip('/')
    return glob.globmatch(stripped, excludes, flags=GLOB_FLAGS) or \
        glob.globmatch(stripped + '/', excludes, flags=GLOB_FLAGS)


def find_sites(config: GlobalConfig, patterns: Union[str, Sequence[str]]) -> List[str]:
    """
    Find sites in `config.base_dir` matching the given glob patterns.

    Patterns always match directories only. Candidates excluded by
    `config.excludes`, ignored by the working directory's `.gitignore`, or
    lying under the output, includes or layouts directory are dropped.

    Args:
        config: Global configuration
        patterns: A glob pattern or a list of them, relative to `base_dir`

    Returns:
        Site paths relative to `base_dir`, in pattern order and then
        filesystem order
    """
    is_ignored = load_ignore_filter()
    excludes = config.exclude_patterns
    if isinstance(patterns, str):
        patterns = [patterns]

    boundaries = [config.out_dir]
    if config.includes_dir:
        boundaries.append(config.includes_dir)
    if config.layouts_dir:
        boundaries.append(config.layouts_dir)

    results = []
    for pattern in patterns:
        if not pattern.endswith('/'):
            pattern += '/'
        pattern = os.path.join(glob.escape(config.base_dir), pattern)

        for base in glob.glob(pattern, flags=GLOB_FLAGS):
            if _is_excluded(base, excludes) or is_ignored(base):
                continue
            if any(is_inside(base, boundary) for boundary in boundaries):
                continue
            results.append(os.path.relpath(base, config.base_dir))
    return results


def match_site_config(config: GlobalConfig, site: str) -> Union[SiteOverride, SiteMatch]:
    """
    Find the configuration for `site` by walking `config.sites` in order.

    Returns the override of the first matching spec, `SiteMatch.USE_DEFAULT`
    when that spec is a plain pattern, or `SiteMatch.NO_MATCH`.
    """
    for spec in config.sites:
        if glob.globmatch(site, spec.glob, flags=GLOB_FLAGS):
            if isinstance(spec, OverriddenPattern):
                return spec.override
            return SiteMatch.USE_DEFAULT
    return SiteMatch.NO_MATCH
