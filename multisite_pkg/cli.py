#!/usr/bin/env python3
"""
Command-line interface for Multisite - build many static sites at once.
"""

import sys
import asyncio
import argparse
from typing import List, Optional

from . import __version__
from .config import ConfigError, build_run_options
from .generator import load_generator
from .logger import logger, setup_logging
from .runner import load_site_hooks, run_sites
from .settings import MultisiteSettings
from .sites import SiteMatch, find_sites, match_site_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Multisite - run a static site generator on many sites')
    parser.add_argument('patterns', nargs='*',
                        help='Glob patterns of sites to build, relative to the base directory')
    parser.add_argument('--base-dir', dest='base_dir', type=str,
                        help='Directory containing the sites')
    parser.add_argument('--output', dest='out_dir', type=str,
                        help='Output directory for generated sites')
    parser.add_argument('--path-prefix', dest='path_prefix', type=str,
                        help='URL path prefix for every site')
    parser.add_argument('--formats', dest='template_formats', type=str,
                        help='Comma-separated list of template formats')
    parser.add_argument('--generator', type=str,
                        help="Generator factory as 'module:attribute'")
    parser.add_argument('--config', dest='global_config', type=str,
                        help='Global generator configuration file, overrides site configuration')
    parser.add_argument('--port', type=int,
                        help='Port for --serve')
    parser.add_argument('--serve', action='store_true',
                        help='Watch and serve the sites')
    parser.add_argument('--watch', action='store_true',
                        help='Watch the sites and rebuild on change')
    parser.add_argument('--dryrun', dest='dry_run', action='store_true',
                        help='Run without writing output')
    parser.add_argument('--incremental', action='store_true',
                        help='Only rebuild changed files')
    parser.add_argument('--quiet', action='store_true',
                        help='Print less output')
    parser.add_argument('--log-dir', dest='log_dir', type=str,
                        help='Also write a debug log into this directory')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(quiet=args.quiet, log_dir=args.log_dir)

    # Handle init command
    if args.init:
        settings_loader = MultisiteSettings()
        try:
            config_path = settings_loader.create_sample_config(args.init)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Created sample configuration file: {config_path}")
        return

    try:
        settings_loader = MultisiteSettings()
        settings_loader.load_settings()
        if settings_loader.config_file_path:
            logger.log(f"Loaded configuration from: {settings_loader.config_file_path}")

        # Command line arguments take precedence over the config file
        args_dict = {
            key: getattr(args, key)
            for key in ('base_dir', 'out_dir', 'path_prefix', 'template_formats', 'generator', 'global_config', 'port')
        }
        final_settings = settings_loader.merge_with_args(args_dict)
        config = settings_loader.to_config(final_settings)

        if not final_settings['generator']:
            raise ConfigError("No generator configured, use --generator or the 'generator' setting")
        factory = load_generator(final_settings['generator'])

        patterns = args.patterns or [spec.glob for spec in config.sites]
        # A site matched by several patterns is built once
        sites = list(dict.fromkeys(find_sites(config, patterns)))
        if not sites:
            logger.warn(f"No sites found in {config.base_dir}")
            return

        runs = []
        for site in sites:
            match = match_site_config(config, site)
            if match is SiteMatch.NO_MATCH:
                logger.warn(f"Skipping site {site}: no matching site spec")
                continue
            options = build_run_options(
                config, site,
                None if match is SiteMatch.USE_DEFAULT else match,
                port=final_settings['port'],
                serve=args.serve,
                watch=args.watch,
                dry_run=args.dry_run,
                incremental=args.incremental,
                quiet=args.quiet,
                global_config_path=final_settings['global_config'],
            )
            try:
                hooks = load_site_hooks(options)
            except ConfigError as e:
                logger.error(f"Skipping site {site}: {e}")
                continue
            runs.append((options, factory, hooks))

        logger.log(f"Running {len(runs)} site(s)")
        asyncio.run(run_sites(runs))

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
