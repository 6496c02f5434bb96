"""
Logging for Multisite.

`ConsoleLogger` is the generator-style logger (log / force_log / warn / error)
on top of the standard `logging` module, and `logger` is the process-wide
instance that tags every message with ``[multisite]``.
"""

import logging
import os
from datetime import datetime
from typing import Optional

LOGGER_NAME = 'multisite'
TAG = '[multisite]'


class ConsoleLogger:
    """Console logger with a quiet mode that only `force_log` bypasses."""

    def __init__(self, name: str = LOGGER_NAME, quiet: bool = False):
        self.logger = logging.getLogger(name)
        self.quiet = quiet

    def log(self, msg):
        if not self.quiet:
            self.logger.info(msg)

    def force_log(self, msg):
        self.logger.info(msg)

    def warn(self, msg):
        self.logger.warning(msg)

    def error(self, msg):
        self.logger.error(msg)


class PrefixedLogger:
    """
    Wraps a logger and prefixes the message of `log`, `force_log`, `warn` and
    `error` with a fixed tag. Any other attribute is read from the wrapped
    logger.
    """

    def __init__(self, target, tag: str = TAG):
        self.target = target
        self.tag = tag

    def log(self, msg):
        self.target.log(f"{self.tag} {msg}")

    def force_log(self, msg):
        self.target.force_log(f"{self.tag} {msg}")

    def warn(self, msg):
        self.target.warn(f"{self.tag} {msg}")

    def error(self, msg):
        self.target.error(f"{self.tag} {msg}")

    def __getattr__(self, name):
        return getattr(self.target, name)


logger = PrefixedLogger(ConsoleLogger())


def setup_logging(quiet: bool = False, log_dir: Optional[str] = None) -> logging.Logger:
    """Set up the console handler and, with `log_dir`, a timestamped debug log file."""
    base = logging.getLogger(LOGGER_NAME)
    base.setLevel(logging.DEBUG)
    logger.target.quiet = quiet

    if not any(getattr(h, '_multisite_console', False) for h in base.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        console_handler._multisite_console = True
        base.addHandler(console_handler)

    if log_dir and not any(isinstance(h, logging.FileHandler) for h in base.handlers):
        os.makedirs(log_dir, exist_ok=True)
        log_filename = datetime.now().strftime('multisite_%Y-%m-%d_%H-%M-%S.log')
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        base.addHandler(file_handler)

    return base
