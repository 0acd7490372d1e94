"""
Router Config Model

Configuration model for the dispatcher loop and MIDI backends.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import json


DEFAULT_FOCUS_COMMAND: List[str] = ['xdotool', 'getactivewindow', 'getwindowname']


@dataclass
class RouterConfig:
    """
    Configuration for the dispatcher and its backends.

    Attributes:
        client_name: Name used for the JACK client and ALSA sequencer client
        poll_interval: Seconds the loop waits between iterations when idle
        max_events_per_backend: Max events drained from one backend per iteration
        queue_size: Bound of each backend's inbound/outbound event queue
        watch_focus: Create a window focus watcher
        focus_command: Command printing the focused window title
        focus_timeout: Max seconds a single focus query may take
        jack_connect_inputs: JACK ports to connect to our midi_in after activation
        jack_connect_outputs: JACK ports to connect our midi_out to after activation
    """
    client_name: str = "midi2input"
    poll_interval: float = 0.5
    max_events_per_backend: int = 64
    queue_size: int = 1024
    watch_focus: bool = True
    focus_command: List[str] = field(default_factory=lambda: DEFAULT_FOCUS_COMMAND.copy())
    focus_timeout: float = 0.5
    jack_connect_inputs: List[str] = field(default_factory=list)
    jack_connect_outputs: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.client_name:
            raise ValueError("client_name must not be empty")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.max_events_per_backend < 1:
            raise ValueError(f"max_events_per_backend must be >= 1, got {self.max_events_per_backend}")
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {self.queue_size}")
        if self.focus_timeout <= 0:
            raise ValueError(f"focus_timeout must be positive, got {self.focus_timeout}")
        if not self.focus_command:
            raise ValueError("focus_command must not be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouterConfig':
        """
        Create a RouterConfig from a dictionary

        Raises:
            ValueError: If data is not a dict or a value has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"settings must be a JSON object, got {type(data).__name__}")

        defaults = cls()

        # Handle both snake_case and camelCase keys
        def get(snake: str, camel: str) -> Any:
            return data.get(snake, data.get(camel, getattr(defaults, snake)))

        return cls(
            client_name=_as_str('clientName', get('client_name', 'clientName')),
            poll_interval=_as_number('pollInterval', get('poll_interval', 'pollInterval')),
            max_events_per_backend=_as_int('maxEventsPerBackend',
                                           get('max_events_per_backend', 'maxEventsPerBackend')),
            queue_size=_as_int('queueSize', get('queue_size', 'queueSize')),
            watch_focus=_as_bool('watchFocus', get('watch_focus', 'watchFocus')),
            focus_command=_as_str_list('focusCommand', get('focus_command', 'focusCommand')),
            focus_timeout=_as_number('focusTimeout', get('focus_timeout', 'focusTimeout')),
            jack_connect_inputs=_as_str_list('jackConnectInputs',
                                             get('jack_connect_inputs', 'jackConnectInputs')),
            jack_connect_outputs=_as_str_list('jackConnectOutputs',
                                              get('jack_connect_outputs', 'jackConnectOutputs')),
        )

    @classmethod
    def from_json_file(cls, path: str) -> 'RouterConfig':
        """Load a RouterConfig from a JSON file"""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def with_overrides(self, client_name: Optional[str] = None,
                       poll_interval: Optional[float] = None,
                       watch_focus: Optional[bool] = None) -> 'RouterConfig':
        """Return a copy with CLI overrides applied (None = keep current value)"""
        data = self.to_dict()
        if client_name is not None:
            data['clientName'] = client_name
        if poll_interval is not None:
            data['pollInterval'] = poll_interval
        if watch_focus is not None:
            data['watchFocus'] = watch_focus
        return RouterConfig.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (camelCase)"""
        return {
            'clientName': self.client_name,
            'pollInterval': self.poll_interval,
            'maxEventsPerBackend': self.max_events_per_backend,
            'queueSize': self.queue_size,
            'watchFocus': self.watch_focus,
            'focusCommand': list(self.focus_command),
            'focusTimeout': self.focus_timeout,
            'jackConnectInputs': list(self.jack_connect_inputs),
            'jackConnectOutputs': list(self.jack_connect_outputs),
        }

    def to_json_file(self, path: str) -> None:
        """Save the config to a JSON file"""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def _as_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def _as_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _as_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return float(value)


def _as_str_list(key: str, value: Any) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a list of strings, got {value!r}")
    return list(value)
