"""
Error types for midi2input.

Only startup failures are raised as exceptions out of the library; runtime
failures (degraded backends, handler errors, failing external commands)
are logged and the unit of work is skipped.
"""

EXIT_CONFIG = 3
EXIT_BACKEND_UNAVAILABLE = 4
EXIT_BACKEND_OPEN = 5


class Midi2InputError(Exception):
    """Base class for all midi2input errors."""


class StartupError(Midi2InputError):
    """A fatal error before the dispatcher loop starts."""

    exit_code = 1


class ConfigNotFoundError(StartupError):
    """No readable handler script was found at any candidate path."""

    exit_code = EXIT_CONFIG

    def __init__(self, candidates):
        self.candidates = list(candidates)
        tried = ', '.join(str(p) for p in self.candidates) or '(none)'
        super().__init__(f"Unable to open configuration file, tried: {tried}")


class HandlerLoadError(StartupError):
    """The handler script could not be read or executed."""

    exit_code = EXIT_CONFIG


class BackendUnavailableError(StartupError):
    """The requested backend's transport library is not installed."""

    exit_code = EXIT_BACKEND_UNAVAILABLE


class BackendOpenError(StartupError):
    """An explicitly requested backend failed to open."""

    exit_code = EXIT_BACKEND_OPEN
