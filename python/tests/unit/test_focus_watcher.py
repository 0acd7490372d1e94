"""
Tests for the focus watchers.
"""

import subprocess
import pytest
from unittest.mock import MagicMock, patch

from midi2input.focus.watcher import XdotoolFocusWatcher, create_focus_watcher
from midi2input.models.router_config import RouterConfig


class TestFocusWatcherChangeDetection:
    """Test the change detection shared by all watchers."""

    def test_only_changes_are_reported(self, scripted_watcher):
        watcher = scripted_watcher(['Editor', 'Editor', 'Browser'])
        assert watcher.poll() == 'Editor'
        assert watcher.poll() is None
        assert watcher.poll() == 'Browser'
        assert watcher.last_title == 'Browser'

    def test_unknown_title_is_no_change(self, scripted_watcher):
        watcher = scripted_watcher([None, 'Editor', None])
        assert watcher.poll() is None
        assert watcher.poll() == 'Editor'
        assert watcher.poll() is None
        assert watcher.last_title == 'Editor'

    def test_last_title_empty_initially(self, scripted_watcher):
        assert scripted_watcher([]).last_title == ''


@pytest.fixture
def xdotool_env(monkeypatch):
    monkeypatch.setenv('DISPLAY', ':0')
    with patch('midi2input.focus.watcher.shutil.which', return_value='/usr/bin/xdotool'):
        yield


def _completed(stdout='', returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr='')


class TestXdotoolFocusWatcher:
    """Test the xdotool based watcher."""

    def test_reports_window_name(self, xdotool_env):
        watcher = XdotoolFocusWatcher()
        with patch('midi2input.focus.watcher.subprocess.run',
                   return_value=_completed('Mozilla Firefox\n')) as run:
            assert watcher.poll() == 'Mozilla Firefox'
            assert watcher.poll() is None

        args, kwargs = run.call_args
        assert args[0] == ['xdotool', 'getactivewindow', 'getwindowname']
        assert kwargs['timeout'] == 0.5

    def test_non_zero_exit_is_no_change(self, xdotool_env):
        watcher = XdotoolFocusWatcher()
        with patch('midi2input.focus.watcher.subprocess.run', return_value=_completed('', 1)):
            assert watcher.poll() is None

    def test_timeout_is_no_change(self, xdotool_env):
        watcher = XdotoolFocusWatcher(timeout=0.1)
        with patch('midi2input.focus.watcher.subprocess.run',
                   side_effect=subprocess.TimeoutExpired('xdotool', 0.1)):
            assert watcher.poll() is None
        assert watcher.available is True

    def test_os_error_disables_watcher(self, xdotool_env):
        watcher = XdotoolFocusWatcher()
        with patch('midi2input.focus.watcher.subprocess.run', side_effect=OSError("exec failed")):
            assert watcher.poll() is None
        assert watcher.available is False

    def test_missing_binary_means_unavailable(self, monkeypatch):
        monkeypatch.setenv('DISPLAY', ':0')
        with patch('midi2input.focus.watcher.shutil.which', return_value=None):
            watcher = XdotoolFocusWatcher()
        run = MagicMock()
        with patch('midi2input.focus.watcher.subprocess.run', run):
            assert watcher.poll() is None
        assert watcher.available is False
        run.assert_not_called()

    def test_missing_display_means_unavailable(self, monkeypatch):
        monkeypatch.delenv('DISPLAY', raising=False)
        with patch('midi2input.focus.watcher.shutil.which', return_value='/usr/bin/xdotool'):
            watcher = XdotoolFocusWatcher()
        assert watcher.available is False
        assert watcher.poll() is None

    def test_custom_command(self, xdotool_env):
        watcher = XdotoolFocusWatcher(['echo', 'Ardour'])
        with patch('midi2input.focus.watcher.subprocess.run', return_value=_completed('Ardour\n')) as run:
            assert watcher.poll() == 'Ardour'
        assert run.call_args[0][0] == ['echo', 'Ardour']


class TestCreateFocusWatcher:
    """Test the factory."""

    def test_disabled(self):
        assert create_focus_watcher(RouterConfig(watch_focus=False)) is None

    def test_enabled(self, xdotool_env):
        watcher = create_focus_watcher(RouterConfig(focus_command=['echo', 'x'], focus_timeout=1.0))
        assert isinstance(watcher, XdotoolFocusWatcher)

    def test_unavailable_watcher_is_not_created(self, monkeypatch):
        monkeypatch.delenv('DISPLAY', raising=False)
        with patch('midi2input.focus.watcher.shutil.which', return_value='/usr/bin/xdotool'):
            assert create_focus_watcher(RouterConfig()) is None
