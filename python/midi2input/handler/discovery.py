"""
Config Discovery

Locates the handler script from a priority list of paths.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from ..errors import ConfigNotFoundError

logger = logging.getLogger(__name__)

APP_NAME = 'midi2input'
CONFIG_EXTENSION = 'py'


def candidate_config_paths(explicit: Optional[Union[str, Path]] = None,
                           home: Optional[Union[str, Path]] = None) -> List[Path]:
    """
    Build the ordered list of places to look for the handler script.

    Order:
        1. explicit path, if given
        2. $HOME/.config/midi2input.py
        3. $HOME/.midi2input.py
    """
    if home is None:
        home = os.environ.get('HOME') or Path.home()
    home = Path(home)

    paths: List[Path] = []
    if explicit:
        paths.append(Path(os.path.expanduser(str(explicit))))
    paths.append(home / '.config' / f'{APP_NAME}.{CONFIG_EXTENSION}')
    paths.append(home / f'.{APP_NAME}.{CONFIG_EXTENSION}')
    return paths


def find_config(explicit: Optional[Union[str, Path]] = None,
                home: Optional[Union[str, Path]] = None) -> Path:
    """
    Return the first candidate that is an existing, readable file.

    Raises:
        ConfigNotFoundError: If no candidate can be read
    """
    candidates = candidate_config_paths(explicit, home)
    for path in candidates:
        if path.is_file() and os.access(path, os.R_OK):
            logger.info("Using: %s", path)
            return path
        logger.debug("No config at %s", path)
    raise ConfigNotFoundError(candidates)
