"""
Script Handler

Runs user handler logic written as a Python script.

The script is executed once into a private namespace that already holds
the host primitives:

    midi_send(event)      send [status, data1, data2] on every valid backend
    exec(command)         run a shell command, returns True on success
    log                   a logger for the script

and may define:

    midi_recv(status, data1, data2)   called for every inbound event
    focus_changed(title)              called when the focused window changes

Example script:

    def midi_recv(status, data1, data2):
        if status == 0x90 and data1 == 60:
            exec('xdotool key ctrl+s')
            midi_send([0x80, data1, 0])
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .protocol import HostPrimitives, MidiHandler
from ..errors import HandlerLoadError
from ..models.midi_event import MidiEvent

logger = logging.getLogger(__name__)
script_logger = logging.getLogger('midi2input.script')

MIDI_CALLBACK = 'midi_recv'
FOCUS_CALLBACK = 'focus_changed'


class ScriptHandler(MidiHandler):
    """
    MidiHandler backed by a user Python script.

    Callbacks are looked up in the script's globals on every call, so a
    script may rebind them at runtime (e.g. per focused application).
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._namespace: Optional[Dict[str, Any]] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._namespace is not None

    @property
    def namespace(self) -> Dict[str, Any]:
        if self._namespace is None:
            raise RuntimeError("handler script not loaded")
        return self._namespace

    def load(self, host: HostPrimitives) -> None:
        """
        Execute the script with the host primitives bound to ``host``.

        Raises:
            HandlerLoadError: If the script cannot be read or fails to run
        """
        try:
            source = self._path.read_text()
        except OSError as e:
            raise HandlerLoadError(f"cannot read configuration file {self._path}: {e}") from e

        namespace: Dict[str, Any] = {
            '__name__': '__midi2input__',
            '__file__': str(self._path),
            'midi_send': self._make_midi_send(host),
            'exec': host.run_external,
            'log': script_logger,
        }
        try:
            code = compile(source, str(self._path), 'exec')
            exec(code, namespace)
        except Exception as e:
            raise HandlerLoadError(f"cannot run configuration file {self._path}: {e}") from e

        if not callable(namespace.get(MIDI_CALLBACK)):
            logger.warning("%s does not define %s(status, data1, data2); MIDI input will be ignored",
                           self._path, MIDI_CALLBACK)

        self._namespace = namespace

    @staticmethod
    def _make_midi_send(host: HostPrimitives) -> Callable[[Any], None]:
        def midi_send(values) -> None:
            event = MidiEvent.from_sequence(values)
            host.send(event.status, event.data1, event.data2)
        return midi_send

    def _callback(self, name: str) -> Optional[Callable]:
        callback = self.namespace.get(name)
        return callback if callable(callback) else None

    def on_midi(self, status: int, data1: int, data2: int) -> None:
        callback = self._callback(MIDI_CALLBACK)
        if callback is not None:
            callback(status, data1, data2)

    def on_focus(self, title: str) -> None:
        callback = self._callback(FOCUS_CALLBACK)
        if callback is not None:
            callback(title)
