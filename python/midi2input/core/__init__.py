"""
Core event routing for midi2input.
"""

from .dispatcher import Dispatcher, DispatcherState, DispatcherStats

__all__ = [
    'Dispatcher',
    'DispatcherState',
    'DispatcherStats',
]
