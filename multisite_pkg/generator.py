"""
Interface of the external static site generator Multisite delegates to.

Multisite never renders, watches or serves anything itself. A generator
factory is named in the settings as ``package.module:attribute`` and must
produce objects shaped like `Generator`.
"""

import importlib
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from .config import ConfigError


class Generator(ABC):
    """What a generator must expose to be driven by the site runner."""

    #: Configuration object handed to site hooks before `init`.
    config: Any = None

    #: Logger with log / force_log / warn / error.
    logger: Any = None

    @abstractmethod
    def __init__(self, source_dir: str, out_dir: str, quiet: bool = False, config_path: Optional[str] = None):
        ...

    @abstractmethod
    def set_path_prefix(self, path_prefix: Optional[str]) -> None:
        ...

    @abstractmethod
    def set_dry_run(self, dry_run: bool) -> None:
        ...

    @abstractmethod
    def set_incremental_build(self, incremental: bool) -> None:
        ...

    @abstractmethod
    def set_formats(self, formats: Optional[List[str]]) -> None:
        ...

    @abstractmethod
    async def init(self) -> None:
        ...

    @abstractmethod
    async def watch(self) -> None:
        """Start watching the source directory. May raise."""

    @abstractmethod
    def serve(self, port: Optional[int] = None):
        """Start serving the output. May return an awaitable."""

    @abstractmethod
    def write(self):
        """Build the site once. May return an awaitable."""


GeneratorFactory = Callable[..., Generator]


def load_generator(reference: str) -> GeneratorFactory:
    """
    Import a generator factory from a ``package.module:attribute`` reference.

    Raises:
        ConfigError: If the reference is malformed or the attribute is missing
            or not callable
    """
    if not reference or ':' not in reference:
        raise ConfigError(f"Generator must be given as 'module:attribute', got {reference!r}")

    module_name, _, attr_path = reference.partition(':')
    if not module_name or not attr_path:
        raise ConfigError(f"Generator must be given as 'module:attribute', got {reference!r}")

    target = importlib.import_module(module_name)
    for attr in attr_path.split('.'):
        try:
            target = getattr(target, attr)
        except AttributeError:
            raise ConfigError(f"Module '{module_name}' has no attribute '{attr_path}'") from None

    if not callable(target):
        raise ConfigError(f"Generator '{reference}' is not callable")
    return target
