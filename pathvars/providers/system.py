"""
System backed collaborators.

Reads the clock, user identity and per-user directories from the running
platform. Special directories follow the freedesktop user-dirs convention.
"""

import getpass
import logging
import os
import re
import shlex
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional

from .types import ImageRecord


logger = logging.getLogger(__name__)

_USER_DIRS_LINE = re.compile(r'^\s*(XDG_[A-Z]+_DIR)\s*=\s*(.*)$')


class SystemClock:
    """Local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class SystemIdentity:
    """Current user name from the login environment."""

    def user_name(self) -> Optional[str]:
        try:
            return getpass.getuser()
        except (KeyError, OSError) as e:
            logger.warning(f"Could not determine user name: {e}")
            return None


class NullMetadataStore:
    """Metadata store without any items; every checkout yields None."""

    @contextmanager
    def checkout(self, item_id: int) -> Iterator[Optional[ImageRecord]]:
        yield None


class SystemLocations:
    """
    Per-user directories for the current platform.

    Pictures and desktop come from the user-dirs.dirs file under
    $XDG_CONFIG_HOME (default ~/.config). Entries pointing at $HOME itself
    are treated as unset, matching the freedesktop convention for disabled
    directories.
    """

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        """
        Initialize location provider.

        Args:
            environ: Environment mapping to read HOME/XDG_CONFIG_HOME from
                (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self._user_dirs: Optional[Dict[str, str]] = None

    def home_dir(self) -> Optional[str]:
        home = self.environ.get('HOME')
        if home:
            return home
        try:
            return str(Path.home())
        except RuntimeError as e:
            logger.warning(f"Could not determine home directory: {e}")
            return None

    def pictures_dir(self) -> Optional[str]:
        return self._special_dir('XDG_PICTURES_DIR')

    def desktop_dir(self) -> Optional[str]:
        desktop = self._special_dir('XDG_DESKTOP_DIR')
        if desktop:
            return desktop
        home = self.home_dir()
        if home and (Path(home) / 'Desktop').is_dir():
            return str(Path(home) / 'Desktop')
        return None

    def _special_dir(self, key: str) -> Optional[str]:
        if self._user_dirs is None:
            self._user_dirs = self._load_user_dirs()
        return self._user_dirs.get(key)

    def _user_dirs_file(self) -> Optional[Path]:
        config_home = self.environ.get('XDG_CONFIG_HOME')
        if config_home:
            return Path(config_home) / 'user-dirs.dirs'
        home = self.home_dir()
        if home:
            return Path(home) / '.config' / 'user-dirs.dirs'
        return None

    def _load_user_dirs(self) -> Dict[str, str]:
        """
        Parse user-dirs.dirs into a mapping of XDG_*_DIR to absolute paths.

        Returns:
            Mapping of configured directories (empty if the file is missing)
        """
        dirs: Dict[str, str] = {}
        path = self._user_dirs_file()
        if path is None or not path.is_file():
            return dirs

        try:
            content = path.read_text(encoding='utf-8')
        except OSError as e:
            logger.warning(f"Failed to read {path}: {e}")
            return dirs

        home = (self.home_dir() or '').rstrip('/')
        for line in content.splitlines():
            match = _USER_DIRS_LINE.match(line)
            if not match:
                continue
            key, raw = match.groups()
            try:
                parts = shlex.split(raw, comments=True)
            except ValueError:
                logger.debug(f"Skipping malformed user-dirs entry: {line}")
                continue
            if len(parts) != 1:
                continue
            value = parts[0]
            if value.startswith('$HOME'):
                value = home + value[len('$HOME'):]
            elif not value.startswith('/'):
                continue
            value = value.rstrip('/') or '/'
            if value == home:
                continue
            dirs[key] = value

        logger.debug(f"Loaded user dirs from {path}: {dirs}")
        return dirs
