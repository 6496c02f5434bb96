"""Tests for the Multisite command line."""

import pytest
import os
import yaml
from pathlib import Path
from unittest.mock import patch

from multisite_pkg import cli


def write_settings(**settings):
    settings.setdefault('generator', 'mygen:Generator')
    Path('multisite.yml').write_text(yaml.dump(settings))


@pytest.fixture
def patched_generator(mock_factory):
    """Route generator loading to `mock_factory`."""
    with patch('multisite_pkg.cli.load_generator', return_value=mock_factory) as loader:
        yield loader


class TestCli:
    """Test cases for cli.main."""

    def test_builds_every_matched_site(self, sites_tree, patched_generator, mock_factory, mock_generator):
        """Test every site spec is discovered, resolved and built."""
        write_settings(
            out_dir='sites/_out/',
            sites=['blog', ['docs', {'out_dir': 'public/docs', 'path_prefix': '/docs/'}]],
        )

        cli.main([])

        patched_generator.assert_called_once_with('mygen:Generator')
        calls = {c.args: c.kwargs for c in mock_factory.call_args_list}
        assert calls == {
            (os.path.join('sites/', 'blog'), os.path.join('sites/_out/', 'blog')): {'quiet': False, 'config_path': None},
            (os.path.join('sites/', 'docs'), 'public/docs'): {'quiet': False, 'config_path': None},
        }
        assert mock_generator.write.call_count == 2
        mock_generator.set_path_prefix.assert_any_call('/docs/')

    def test_cli_patterns_select_sites(self, sites_tree, patched_generator, mock_factory):
        """Test command-line patterns replace the configured globs."""
        write_settings(out_dir='sites/_out/', sites=['*'])

        cli.main(['docs'])

        mock_factory.assert_called_once()
        assert mock_factory.call_args.args[0] == os.path.join('sites/', 'docs')

    def test_unmatched_site_is_skipped(self, sites_tree, patched_generator, mock_factory, caplog):
        """Test a site no spec matches is skipped with a warning."""
        write_settings(out_dir='sites/_out/', sites=['blog'])

        cli.main(['docs'])

        mock_factory.assert_not_called()
        assert "Skipping site docs: no matching site spec" in caplog.text

    def test_flags_reach_generator(self, sites_tree, patched_generator, mock_factory, mock_generator):
        """Test command-line flags reach the generator."""
        write_settings(out_dir='sites/_out/', sites=['blog'], port=9000)

        cli.main(['--serve', '--dryrun', '--incremental', '--quiet', '--formats', 'md,njk', '--config', 'global.py'])

        mock_factory.assert_called_once_with(
            os.path.join('sites/', 'blog'), os.path.join('sites/_out/', 'blog'),
            quiet=True, config_path='global.py')
        mock_generator.set_dry_run.assert_called_once_with(True)
        mock_generator.set_incremental_build.assert_called_once_with(True)
        mock_generator.set_formats.assert_called_once_with(['md', 'njk'])
        mock_generator.serve.assert_called_once_with(9000)

    def test_site_hook_is_applied(self, sites_tree, patched_generator, mock_generator):
        """Test a site's configure() hook is applied to the generator config."""
        (sites_tree / 'blog' / 'site_config.py').write_text(
            "def configure(config):\n"
            "    config.add_collection('posts')\n"
        )
        write_settings(out_dir='sites/_out/', sites=[['blog', {'config_path': 'sites/blog/site_config.py'}]])

        cli.main([])

        mock_generator.config.add_collection.assert_called_once_with('posts')

    def test_broken_site_hook_skips_site(self, sites_tree, patched_generator, mock_factory, caplog):
        """Test a missing hook file skips its site only."""
        write_settings(out_dir='sites/_out/', sites=[['blog', {'config_path': 'missing.py'}], 'docs'])

        cli.main([])

        assert mock_factory.call_count == 1
        assert mock_factory.call_args.args[0] == os.path.join('sites/', 'docs')
        assert "Skipping site blog" in caplog.text

    def test_overlapping_specs_build_each_site_once(self, sites_tree, patched_generator, mock_factory, mock_generator):
        """Test a site matched by several site specs is built only once."""
        write_settings(
            out_dir='sites/_out/',
            includes_dir='sites/_includes/',
            layouts_dir='sites/_layouts/',
            sites=['blog', {'docs': {'path_prefix': '/docs/'}}, '*'],
        )

        cli.main([])

        sources = [c.args[0] for c in mock_factory.call_args_list]
        assert sorted(sources) == [os.path.join('sites/', 'blog'), os.path.join('sites/', 'docs')]
        assert mock_generator.write.call_count == 2

    def test_overlapping_cli_patterns_build_each_site_once(self, sites_tree, patched_generator, mock_factory):
        """Test repeating a site on the command line does not build it twice."""
        write_settings(out_dir='sites/_out/', sites=['*'])

        cli.main(['docs', 'docs', 'd*'])

        mock_factory.assert_called_once()

    def test_unloadable_site_hook_skips_only_that_site(self, sites_tree, patched_generator, mock_factory, caplog):
        """Test a hook file that fails to import skips its site and the rest still build."""
        (sites_tree / 'blog' / 'site_config.py').write_text("def configure(config:\n")
        write_settings(out_dir='sites/_out/', sites=[['blog', {'config_path': 'sites/blog/site_config.py'}], 'docs'])

        cli.main([])

        assert mock_factory.call_count == 1
        assert mock_factory.call_args.args[0] == os.path.join('sites/', 'docs')
        assert "Skipping site blog" in caplog.text

    def test_no_sites_found(self, workdir, patched_generator, mock_factory, caplog):
        """Test an empty base directory warns and builds nothing."""
        write_settings()

        cli.main([])

        mock_factory.assert_not_called()
        assert "No sites found in sites/" in caplog.text

    def test_no_generator_configured(self, sites_tree, capsys):
        """Test running without a generator exits with an error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert "No generator configured" in capsys.readouterr().err

    def test_invalid_settings_file(self, sites_tree, capsys):
        """Test a broken settings file exits with an error."""
        Path('multisite.yml').write_text('sites: [unclosed\n')

        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert "Invalid YAML" in capsys.readouterr().err

    def test_init_creates_sample(self, workdir, capsys):
        """Test --init writes a sample settings file."""
        cli.main(['--init', 'yml'])

        assert Path('multisite.yml').exists()
        assert "Created sample configuration file" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(['--version'])

        assert exc_info.value.code == 0
        assert '1.0.0' in capsys.readouterr().out
