"""Test configuration and fixtures for Multisite tests."""

import pytest
import logging
import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from multisite_pkg.config import GlobalConfig, PlainPattern
from multisite_pkg.logger import LOGGER_NAME, logger


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI installs and leave quiet mode off."""
    base = logging.getLogger(LOGGER_NAME)
    handlers = list(base.handlers)
    level = base.level
    yield
    for handler in base.handlers[:]:
        if handler not in handlers:
            base.removeHandler(handler)
            handler.close()
    base.setLevel(level)
    logger.target.quiet = False


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test from an empty temporary working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def sites_tree(workdir):
    """
    Create a sites tree in the working directory:

        sites/blog/            sites/_out/blog/
        sites/docs/            sites/_includes/partials/
        sites/.hidden/         sites/_layouts/
        sites/notes.md
    """
    base = Path(workdir) / 'sites'
    for name in ['blog', 'docs', '.hidden', '_out/blog', '_includes/partials', '_layouts']:
        (base / name).mkdir(parents=True)
    (base / 'notes.md').write_text('# Notes\n')
    return base


@pytest.fixture
def tree_config():
    """Global config matching `sites_tree`."""
    return GlobalConfig(
        base_dir='sites/',
        out_dir='sites/_out/',
        sites=(PlainPattern('*'),),
        includes_dir='sites/_includes/',
        layouts_dir='sites/_layouts/',
    )


@pytest.fixture
def mock_generator():
    """A generator double; init and watch are coroutines."""
    generator = Mock()
    generator.init = AsyncMock()
    generator.watch = AsyncMock()
    generator.serve = Mock(return_value=None)
    generator.write = Mock(return_value=None)
    return generator


@pytest.fixture
def mock_factory(mock_generator):
    """A generator factory always returning `mock_generator`."""
    return Mock(return_value=mock_generator)
