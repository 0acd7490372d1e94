"""
Window focus watching.
"""

from .watcher import FocusWatcher, XdotoolFocusWatcher, create_focus_watcher

__all__ = [
    'FocusWatcher',
    'XdotoolFocusWatcher',
    'create_focus_watcher',
]
