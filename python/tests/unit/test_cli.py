"""
Tests for the midi2input CLI.

Startup is exercised with the backends and the loop patched out.
"""

import pytest
from unittest.mock import MagicMock, patch

from midi2input.cli import main as cli
from midi2input.errors import (
    BackendUnavailableError,
    EXIT_BACKEND_OPEN,
    EXIT_BACKEND_UNAVAILABLE,
    EXIT_CONFIG,
)
from midi2input.focus.watcher import XdotoolFocusWatcher


@pytest.fixture(autouse=True)
def quiet_cli():
    """Keep the CLI from reconfiguring logging or installing signal handlers"""
    with patch.object(cli, 'setup_logging'), patch.object(cli, 'install_signal_handlers'):
        yield


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv('HOME', str(tmp_path))
    return tmp_path


@pytest.fixture
def script(home):
    path = home / '.midi2input.py'
    path.write_text("def midi_recv(status, data1, data2):\n    pass\n")
    return path


class TestParser:
    """Test flag parsing."""

    def test_flags(self):
        args = cli.build_parser().parse_args(['-v', '-c', 'x.py', '-a', '-j', '--no-focus'])
        assert args.verbose is True
        assert args.config == 'x.py'
        assert args.alsa is True
        assert args.jack is True
        assert args.no_focus is True

    def test_long_flags(self):
        args = cli.build_parser().parse_args(['--verbose', '--config', 'x.py', '--alsa', '--jack'])
        assert cli.requested_backends(args) == ['alsa', 'jack']

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(['--help'])
        assert excinfo.value.code == 0
        assert '--alsa' in capsys.readouterr().out


class TestLoadRouterConfig:
    """Test settings file and overrides."""

    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        config = cli.load_router_config(args)
        assert config.client_name == 'midi2input'
        assert config.watch_focus is True

    def test_settings_file_with_overrides(self, tmp_path):
        settings = tmp_path / 'settings.json'
        settings.write_text('{"clientName": "pads", "pollInterval": 2.0, "maxEventsPerBackend": 8}')
        args = cli.build_parser().parse_args(['-s', str(settings), '--interval', '0.1', '--no-focus'])

        config = cli.load_router_config(args)

        assert config.client_name == 'pads'
        assert config.poll_interval == 0.1
        assert config.max_events_per_backend == 8
        assert config.watch_focus is False


class TestMainStartup:
    """Test fatal startup paths and the normal path."""

    def test_missing_config_is_fatal(self, home):
        with patch.object(cli.Dispatcher, 'run') as run:
            assert cli.main([]) == EXIT_CONFIG
        run.assert_not_called()

    def test_broken_script_is_fatal(self, home):
        (home / '.midi2input.py').write_text("this is not python\n")
        assert cli.main([]) == EXIT_CONFIG

    def test_invalid_settings_is_fatal(self, script, tmp_path):
        settings = tmp_path / 'bad.json'
        settings.write_text('{not json')
        assert cli.main(['-s', str(settings)]) == EXIT_CONFIG

    def test_backend_unavailable_is_fatal(self, script):
        with patch.object(cli, 'create_backend', side_effect=BackendUnavailableError("no jack")):
            assert cli.main(['--jack']) == EXIT_BACKEND_UNAVAILABLE

    def test_backend_open_failure_is_fatal_and_closes_others(self, script, make_backend):
        good = make_backend('alsa')
        bad = MagicMock()
        bad.name = 'jack'
        bad.valid = False
        bad.open.return_value = False

        with patch.object(cli, 'create_backend', side_effect=[good, bad]):
            assert cli.main(['--alsa', '--jack']) == EXIT_BACKEND_OPEN

        assert good.valid is False
        bad.close.assert_called_once()

    def test_normal_run_closes_backends(self, script, make_backend):
        backend = make_backend('alsa')
        with patch.object(cli, 'create_backend', return_value=backend), \
                patch.object(cli.Dispatcher, 'run') as run:
            assert cli.main(['--alsa', '--no-focus']) == 0

        run.assert_called_once()
        assert backend.valid is False

    def test_focus_watcher_created_unless_disabled(self, script, monkeypatch):
        monkeypatch.setenv('DISPLAY', ':0')
        monkeypatch.setattr('midi2input.focus.watcher.shutil.which', lambda name: '/usr/bin/' + name)
        captured = {}

        def fake_run(self):
            captured['watcher'] = self.focus_watcher

        with patch.object(cli.Dispatcher, 'run', fake_run):
            cli.main([])
        assert isinstance(captured['watcher'], XdotoolFocusWatcher)

        with patch.object(cli.Dispatcher, 'run', fake_run):
            cli.main(['--no-focus'])
        assert captured['watcher'] is None

    def test_no_focus_watcher_without_display(self, script, monkeypatch):
        monkeypatch.delenv('DISPLAY', raising=False)
        captured = {}

        def fake_run(self):
            captured['idle'] = self.is_idle

        with patch.object(cli.Dispatcher, 'run', fake_run):
            assert cli.main([]) == 0
        assert captured['idle'] is True

    @pytest.mark.parametrize('content', ['[]', '"pads"', '{"watchFocus": "false"}',
                                         '{"focusCommand": "xdotool getactivewindow getwindowname"}'])
    def test_wrongly_typed_settings_are_fatal(self, script, tmp_path, content):
        settings = tmp_path / 'settings.json'
        settings.write_text(content)
        with patch.object(cli.Dispatcher, 'run') as run:
            assert cli.main(['-s', str(settings)]) == EXIT_CONFIG
        run.assert_not_called()
