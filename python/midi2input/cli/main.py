#!/usr/bin/env python3
"""
midi2input CLI

Routes MIDI from JACK and/or ALSA to a handler script, which can run
commands and send MIDI back out, optionally depending on the focused
window.

Usage:
    # Handler script from ~/.config/midi2input.py, ALSA sequencer backend
    python -m midi2input.cli.main --alsa

    # Explicit handler script, both backends, verbose event logging
    python -m midi2input.cli.main -c ./controls.py --alsa --jack -v
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional

from midi2input import __version__
from midi2input.core.dispatcher import Dispatcher
from midi2input.errors import BackendOpenError, StartupError, EXIT_CONFIG
from midi2input.focus.watcher import create_focus_watcher
from midi2input.handler.discovery import find_config
from midi2input.handler.script import ScriptHandler
from midi2input.midi import create_backend
from midi2input.models.router_config import RouterConfig
from midi2input.utils.log import setup_logging

logger = logging.getLogger('midi2input.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='midi2input',
        description='midi2input - route MIDI control surfaces to a handler script',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Handler script lookup order:
    -c PATH, ~/.config/midi2input.py, ~/.midi2input.py

Examples:
    # ALSA sequencer backend with the default handler script
    midi2input --alsa

    # JACK backend, custom client name, no window focus detection
    midi2input --jack --client-name pads --no-focus

    # Settings from a JSON file
    midi2input -a -s settings.json
"""
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Output more information (log every MIDI event)'
    )

    parser.add_argument(
        '-c', '--config',
        help='Handler script, default = ~/.config/midi2input.py'
    )

    parser.add_argument(
        '-a', '--alsa',
        action='store_true',
        help='Use ALSA midi backend'
    )

    parser.add_argument(
        '-j', '--jack',
        action='store_true',
        help='Use JACK midi backend'
    )

    parser.add_argument(
        '-s', '--settings',
        help='Path to JSON settings file (client name, poll interval, ...)'
    )

    parser.add_argument(
        '--client-name',
        help='JACK/ALSA client name (overrides settings)'
    )

    parser.add_argument(
        '--interval',
        type=float,
        help='Loop poll interval in seconds (overrides settings)'
    )

    parser.add_argument(
        '--no-focus',
        action='store_true',
        help='Disable window focus detection'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def load_router_config(args: argparse.Namespace) -> RouterConfig:
    """Settings file (if any) with CLI overrides applied."""
    config = RouterConfig.from_json_file(args.settings) if args.settings else RouterConfig()
    return config.with_overrides(
        client_name=args.client_name,
        poll_interval=args.interval,
        watch_focus=False if args.no_focus else None,
    )


def requested_backends(args: argparse.Namespace) -> List[str]:
    backends = []
    if args.alsa:
        backends.append('alsa')
    if args.jack:
        backends.append('jack')
    return backends


def build_dispatcher(args: argparse.Namespace, config: RouterConfig) -> Dispatcher:
    """
    Load the handler script and open the requested backends.

    Raises:
        StartupError: On any fatal startup failure; already opened
            backends are closed first
    """
    script_path = find_config(args.config)
    handler = ScriptHandler(script_path)
    dispatcher = Dispatcher(handler, config)
    handler.load(dispatcher)

    try:
        for kind in requested_backends(args):
            backend = create_backend(kind, config)
            opened = backend.open()
            # Owned by the dispatcher either way, so close() releases it
            dispatcher.add_backend(backend)
            if not opened:
                raise BackendOpenError(f"{kind} backend failed to open")
    except StartupError:
        dispatcher.close()
        raise

    dispatcher.focus_watcher = create_focus_watcher(config)
    return dispatcher


def install_signal_handlers(dispatcher: Dispatcher) -> None:
    shutdown_requested = False

    def shutdown_handler(signum, frame):
        """Handle shutdown signals"""
        nonlocal shutdown_requested
        if shutdown_requested:
            # Force exit on second signal
            logger.warning("Force shutdown...")
            raise SystemExit(1)
        shutdown_requested = True
        logger.info("Shutting down...")
        dispatcher.stop()

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = load_router_config(args)
    except (OSError, ValueError) as e:
        logger.critical("Invalid settings: %s", e)
        return EXIT_CONFIG

    if not requested_backends(args):
        logger.warning("No MIDI backend requested (use --alsa and/or --jack)")

    try:
        dispatcher = build_dispatcher(args, config)
    except StartupError as e:
        logger.critical("%s", e)
        return e.exit_code

    install_signal_handlers(dispatcher)
    try:
        dispatcher.run()
    finally:
        dispatcher.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
