"""
Dispatcher

The single-threaded loop that multiplexes MIDI backends and the focus
watcher into handler calls, and fans handler sends back out to every
valid backend.

Transport threads only ever touch their backend's queue; handler code runs
exclusively on the thread calling ``run`` / ``poll_once``.
"""

import logging
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from ..focus.watcher import FocusWatcher
from ..handler.protocol import HostPrimitives, MidiHandler
from ..midi.protocol import MidiBackendProtocol
from ..models.midi_event import MidiEvent
from ..models.router_config import RouterConfig

logger = logging.getLogger(__name__)
command_logger = logging.getLogger('midi2input.exec')


class DispatcherState(Enum):
    IDLE = 'idle'                      # running, but nothing to route
    RUNNING = 'running'
    SHUTTING_DOWN = 'shutting_down'    # stop requested, finishing the iteration
    STOPPED = 'stopped'


@dataclass
class DispatcherStats:
    """Counters for diagnostics."""
    events_in: int = 0
    events_out: int = 0
    handler_errors: int = 0
    focus_changes: int = 0
    commands_run: int = 0
    commands_failed: int = 0


class Dispatcher(HostPrimitives):
    """
    Routes events between backends, the focus watcher and one handler.

    Example:
        dispatcher = Dispatcher(handler, config)
        handler.load(dispatcher)
        dispatcher.add_backend(backend)
        dispatcher.focus_watcher = XdotoolFocusWatcher()
        try:
            dispatcher.run()
        finally:
            dispatcher.close()
    """

    def __init__(self, handler: MidiHandler, config: Optional[RouterConfig] = None,
                 focus_watcher: Optional[FocusWatcher] = None):
        self._handler = handler
        self._config = config or RouterConfig()
        self._focus_watcher = focus_watcher
        # One slot per backend variant
        self._backends: Dict[str, MidiBackendProtocol] = {}
        self._wakeup = threading.Event()
        self._stop_requested = False
        self._state = DispatcherState.STOPPED
        self.stats = DispatcherStats()

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def handler(self) -> MidiHandler:
        return self._handler

    @property
    def backends(self) -> Tuple[MidiBackendProtocol, ...]:
        return tuple(self._backends.values())

    @property
    def focus_watcher(self) -> Optional[FocusWatcher]:
        return self._focus_watcher

    @focus_watcher.setter
    def focus_watcher(self, watcher: Optional[FocusWatcher]) -> None:
        self._focus_watcher = watcher

    @property
    def is_idle(self) -> bool:
        """True when there is no backend and no focus watcher to poll."""
        return not self._backends and self._focus_watcher is None

    def add_backend(self, backend: MidiBackendProtocol) -> None:
        """
        Take ownership of a backend. It is closed by ``close()``.

        Raises:
            ValueError: A backend of the same variant is already present
        """
        if backend.name in self._backends:
            raise ValueError(f"a {backend.name} backend is already registered")
        self._backends[backend.name] = backend
        backend.set_notifier(self._wakeup.set)
        if not backend.valid:
            logger.warning("%s backend is not valid, it will be ignored for sending", backend.name)

    # Host primitives, called from handler code on the loop thread

    def send(self, status: int, data1: int, data2: int) -> None:
        """Send one event on every currently valid backend."""
        event = MidiEvent(status, data1, data2)
        for backend in self._backends.values():
            if backend.valid:
                logger.debug("-> %s %s", backend.name, event)
                backend.send(event)
                self.stats.events_out += 1

    def run_external(self, command: str) -> bool:
        """
        Run a shell command, logging its combined output line by line.

        Returns:
            True if the command exited with status 0
        """
        logger.info("exec: %s", command)
        self.stats.commands_run += 1
        try:
            process = subprocess.Popen(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors='replace',
            )
        except OSError as e:
            self.stats.commands_failed += 1
            logger.error("exec: could not start '%s': %s", command, e)
            return False

        with process:
            for line in process.stdout:
                command_logger.info(line.rstrip('\n'))
        returncode = process.wait()

        if returncode != 0:
            self.stats.commands_failed += 1
            logger.error("exec: '%s' exited with status %d", command, returncode)
            return False
        return True

    # Loop

    def poll_once(self) -> int:
        """
        Run one iteration: focus check, then drain each backend up to the cap.

        Returns:
            Number of MIDI events delivered to the handler
        """
        self._poll_focus()

        delivered = 0
        cap = self._config.max_events_per_backend
        for backend in list(self._backends.values()):
            drained = 0
            while drained < cap and backend.has_pending_input():
                event = backend.receive()
                drained += 1
                self.stats.events_in += 1
                logger.debug("<- %s %s", backend.name, event)
                self._call_handler(self._handler.on_midi, event.status, event.data1, event.data2)
            if drained == cap and backend.has_pending_input():
                # Leftovers are picked up next iteration without waiting
                self._wakeup.set()
            delivered += drained
        return delivered

    def _poll_focus(self) -> None:
        if self._focus_watcher is None:
            return
        try:
            title = self._focus_watcher.poll()
        except Exception as e:
            logger.error("Focus watcher failed: %s", e)
            return
        if title is None:
            return
        self.stats.focus_changes += 1
        logger.info("Focus: %s", title)
        self._call_handler(self._handler.on_focus, title)

    def _call_handler(self, callback: Callable, *args) -> None:
        try:
            callback(*args)
        except Exception as e:
            self.stats.handler_errors += 1
            logger.error("call to handler %s%s failed: %s", getattr(callback, "__name__", callback), args, e,
                         exc_info=logger.isEnabledFor(logging.DEBUG))

    def run(self, iterations: Optional[int] = None) -> None:
        """
        Loop until ``stop()`` is called.

        Args:
            iterations: Stop after this many iterations (None = forever)
        """
        if self.is_idle:
            logger.warning("No MIDI backend or focus watcher active, nothing to do")
            self._state = DispatcherState.IDLE
        else:
            self._state = DispatcherState.RUNNING

        logger.info("Entering loop, waiting for events")
        count = 0
        try:
            while not self._stop_requested:
                self._wakeup.clear()
                self.poll_once()
                count += 1
                if iterations is not None and count >= iterations:
                    break
                if self._stop_requested:
                    break
                self._wakeup.wait(self._config.poll_interval)
        finally:
            self._state = DispatcherState.STOPPED
        logger.info("Loop finished after %d iterations", count)

    def stop(self) -> None:
        """
        Request the loop to finish its current iteration and return.

        Safe to call from a signal handler or another thread.
        """
        self._stop_requested = True
        if self._state in (DispatcherState.RUNNING, DispatcherState.IDLE):
            self._state = DispatcherState.SHUTTING_DOWN
        self._wakeup.set()

    def close(self) -> None:
        """Close every backend. Safe to call more than once."""
        for backend in self._backends.values():
            backend.close()
