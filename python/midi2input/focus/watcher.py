"""
Focus Watcher

Reports the title of the focused desktop window whenever it changes.
"""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.router_config import RouterConfig

logger = logging.getLogger(__name__)


class FocusWatcher(ABC):
    """
    Change-detecting focus watcher.

    Subclasses implement ``_query`` returning the current title (or None
    when it cannot be determined). ``poll`` only returns a title when it
    differs from the last one observed.
    """

    def __init__(self):
        self._last_title: Optional[str] = None

    @property
    def last_title(self) -> str:
        """Last observed title, empty if none has been seen yet."""
        return self._last_title or ''

    @property
    def available(self) -> bool:
        return True

    def poll(self) -> Optional[str]:
        """
        Query the focused window.

        Returns:
            The new title if it changed since the last poll, otherwise None
        """
        if not self.available:
            return None
        title = self._query()
        if title is None or title == self._last_title:
            return None
        self._last_title = title
        return title

    @abstractmethod
    def _query(self) -> Optional[str]:
        pass


class XdotoolFocusWatcher(FocusWatcher):
    """
    Polls X11 for the active window name by running ``xdotool``.

    If the command is missing or there is no display, the watcher is
    unavailable and ``poll`` always reports no change.
    """

    def __init__(self, command: Optional[List[str]] = None, timeout: float = 0.5):
        super().__init__()
        self._command = list(command or RouterConfig().focus_command)
        self._timeout = timeout
        self._available = self._probe()

    @property
    def available(self) -> bool:
        return self._available

    def _probe(self) -> bool:
        if shutil.which(self._command[0]) is None:
            logger.warning("'%s' not found, window focus detection disabled", self._command[0])
            return False
        if not os.environ.get('DISPLAY'):
            logger.warning("No DISPLAY set, window focus detection disabled")
            return False
        return True

    def _query(self) -> Optional[str]:
        try:
            result = subprocess.run(
                self._command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            logger.debug("Focus query timed out after %.2fs", self._timeout)
            return None
        except OSError as e:
            logger.warning("Focus query failed, disabling focus detection: %s", e)
            self._available = False
            return None

        if result.returncode != 0:
            # No focused window (e.g. desktop/root window)
            return None
        return result.stdout.strip()


def create_focus_watcher(config: RouterConfig) -> Optional[FocusWatcher]:
    """Build the configured focus watcher, or None if focus watching is off or unavailable."""
    if not config.watch_focus:
        return None
    watcher = XdotoolFocusWatcher(config.focus_command, config.focus_timeout)
    return watcher if watcher.available else None
