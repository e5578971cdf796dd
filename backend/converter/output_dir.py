"""Process-wide output directory setting and the open-in-file-manager action."""
import logging
import os
import shutil
import subprocess
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from converter.config import OUTPUT_DIR
from converter.errors import DirectoryCreateError, FileManagerActionFailed, InvalidPath

logger = logging.getLogger("converter.output")

FILE_MANAGER_TIMEOUT = 10


def ensure_dir(path: Path) -> Path:
    """Create path (and parents) if missing. Idempotent."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as e:
        raise DirectoryCreateError(f"Output path exists and is not a directory: {path}") from e
    except OSError as e:
        raise DirectoryCreateError(f"Cannot create output directory {path}: {e.strerror or e}") from e
    return path


def file_manager_command(path: Path, platform: Optional[str] = None) -> list[str]:
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", str(path)]
    if platform.startswith("win"):
        return ["explorer", str(path)]
    return ["xdg-open", str(path)]


class OutputLocation:
    """
    Holds the current output directory. Reads and writes are lock-guarded; a batch
    takes one snapshot via get() and writes all its files there, so a later set()
    from another request never moves files of a batch already in flight.
    """

    def __init__(self, initial: Union[str, Path] = OUTPUT_DIR):
        self._lock = threading.Lock()
        self._path = Path(initial).resolve()

    @property
    def path(self) -> Path:
        """Current value without touching the filesystem."""
        with self._lock:
            return self._path

    def get(self) -> Path:
        """Current output directory, created on disk if missing."""
        return ensure_dir(self.path)

    def set(self, user_path: Optional[str]) -> Path:
        """Resolve user_path against the working directory, store it and create it."""
        if user_path is None or not str(user_path).strip():
            raise InvalidPath("Output path is required")
        resolved = Path(os.path.expanduser(str(user_path).strip())).resolve()
        ensure_dir(resolved)
        with self._lock:
            self._path = resolved
        logger.info("Output directory set to %s", resolved)
        return resolved

    def open_in_file_manager(self) -> None:
        """Reveal the current directory in the OS file manager. Raises FileManagerActionFailed."""
        path = self.get()
        cmd = file_manager_command(path)
        if shutil.which(cmd[0]) is None:
            logger.warning("File manager command not available: %s", cmd[0])
            raise FileManagerActionFailed("Cannot open folder: no file manager available")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=FILE_MANAGER_TIMEOUT)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Opening %s failed: %s", path, e)
            raise FileManagerActionFailed("Cannot open folder") from e
        # explorer.exe exits 1 even on success
        if result.returncode != 0 and cmd[0] != "explorer":
            logger.warning("Opening %s failed (exit %s): %s", path, result.returncode, result.stderr.strip())
            raise FileManagerActionFailed("Cannot open folder")


# Singleton
_output_location: Optional[OutputLocation] = None


def get_output_location() -> OutputLocation:
    global _output_location
    if _output_location is None:
        _output_location = OutputLocation()
    return _output_location
