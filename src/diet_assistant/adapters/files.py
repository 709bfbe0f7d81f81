"""Text file helpers for the flat-file repositories."""

import logging
import os
import stat
import tempfile
from pathlib import Path

_logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when a persisted resource cannot be read or written."""


def read_lines(path: Path) -> list[str] | None:
    """Return the lines of a text file, or None when it does not exist.

    Only line feeds end a line. Bytes that are not valid UTF-8 are kept as
    lone surrogates so the parser can report the offending line.
    """
    try:
        with path.open(encoding="utf-8", errors="surrogateescape") as handle:
            text = handle.read()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageError(f"Failed to read {path}: {exc}") from exc
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def write_lines(path: Path, lines: list[str]) -> None:
    """Replace a text file with ``lines`` via a temporary sibling file."""
    payload = "".join(f"{line}\n" for line in lines)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        mode = _file_mode(path)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
    except OSError as exc:
        raise StorageError(f"Failed to write {path}: {exc}") from exc
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise StorageError(f"Failed to write {path}: {exc}") from exc
    _logger.debug("Wrote %s lines to %s", len(lines), path)


def _file_mode(path: Path) -> int:
    """Permissions for the replacement: the existing file's, else umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
