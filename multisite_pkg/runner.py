"""
Site runner: drive the external generator for one site.
"""

import asyncio
import importlib.util
import inspect
import os
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .config import ConfigError, RunOptions
from .generator import GeneratorFactory
from .logger import logger

HOOK_NAME = 'configure'

SiteHook = Callable[[object], None]


def select_config_path(options: RunOptions) -> Optional[str]:
    """The global config file wins over the site's own unless the site opts out."""
    if not options.ignore_global and options.global_config_path:
        return options.global_config_path
    return options.config_path


def load_config_hook(path: str) -> SiteHook:
    """Load the `configure(config)` function from the Python file at `path`."""
    if not os.path.isfile(path):
        raise ConfigError(f"Site configuration file not found: {path}")

    module_name = 'multisite_site_config_' + os.path.splitext(os.path.basename(path))[0]
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"Cannot load site configuration file: {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ConfigError(f"Cannot load site configuration file {path}: {e}") from e

    hook = getattr(module, HOOK_NAME, None)
    if not callable(hook):
        raise ConfigError(f"Site configuration file {path} does not define {HOOK_NAME}(config)")
    return hook


def load_site_hooks(options: RunOptions) -> List[SiteHook]:
    """Hooks to run against the generator config for this site."""
    if options.ignore_global or not options.config_path:
        return []
    return [load_config_hook(options.config_path)]


async def _maybe_await(result):
    if inspect.isawaitable(result):
        return await result
    return result


async def run_site(options: RunOptions, factory: GeneratorFactory, hooks: Sequence[SiteHook] = ()) -> None:
    """
    Run the generator on a single site.

    Builds the generator, applies the per-site settings and hooks, then either
    watches (and optionally serves) the site or writes it once. Failures are
    logged and not raised, so one broken site does not stop the others.
    """
    try:
        generator = factory(
            options.source_dir,
            options.out_dir,
            quiet=options.quiet,
            config_path=select_config_path(options),
        )
        generator.set_path_prefix(options.path_prefix)
        generator.set_dry_run(options.dry_run)
        generator.set_incremental_build(options.incremental)
        generator.set_formats(options.template_formats)
        if not options.ignore_global:
            for hook in hooks:
                hook(generator.config)

        await generator.init()
        if options.serve or options.watch:
            try:
                await generator.watch()
            except Exception as e:
                logger.warn(f"Failed to watch site {options.source_dir}: {e}")
                return
            if options.serve:
                await _maybe_await(generator.serve(options.port))
            else:
                logger.force_log(f"Started watching site {options.source_dir}")
        else:
            await _maybe_await(generator.write())
    except Exception as e:
        logger.error(f"Error building site {options.source_dir}: {e}")


async def run_sites(runs: Iterable[Tuple[RunOptions, GeneratorFactory, Sequence[SiteHook]]]) -> None:
    """Run several sites concurrently. No ordering between sites is implied."""
    await asyncio.gather(*(run_site(options, factory, hooks) for options, factory, hooks in runs))
