import os
import re
import secrets
import shutil
import string
from errno import EACCES
from pathlib import Path
from stat import S_IRWXG, S_IRWXO, S_IRWXU
from typing import Any, Callable

from loguru import logger
from packaging.version import InvalidVersion, Version

from reachlaunch.utils.constants import CLIENT_ARTIFACT_EXTENSION

# Characters rejected by at least one of the supported file systems
_ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_RESERVED_WINDOWS_NAMES = {
    "CON",
    "PRN",
    "AUX",
    "NUL",
    *(f"COM{i}" for i in range(1, 10)),
    *(f"LPT{i}" for i in range(1, 10)),
}


def sanitize_filename(name: str) -> str:
    """
    Turn an arbitrary display name into a name usable as a directory on every platform.

    :param name: the name to sanitize
    :return: the sanitized name, possibly empty
    """
    clean = _ILLEGAL_FILENAME_CHARS.sub("", name).strip().rstrip(". ")
    if clean.upper() in _RESERVED_WINDOWS_NAMES:
        clean = f"_{clean}"
    return clean


def random_string(length: int) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def is_version_lower_than(version: str, other: str) -> bool:
    """
    Compare two semantic-version-like strings.

    Unparseable versions are never considered lower.
    """
    try:
        return Version(version) < Version(other)
    except InvalidVersion:
        logger.debug(f"Unable to compare versions {version} and {other}")
        return False


def version_artifact_path(versions_folder: Path, version_id: str) -> Path:
    """
    Location of the primary client binary of a version: <versions>/<id>/<id>.jar
    """
    return (
        versions_folder / version_id / f"{version_id}{CLIENT_ARTIFACT_EXTENSION}"
    ).absolute()


def format_playtime(seconds: int) -> str:
    """
    Format a duration in seconds as e.g. "1h 2m 3s", dropping empty leading units.

    :param seconds: the duration to format
    :return: the formatted duration, empty for zero
    """
    hours, remainder = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if hours or minutes:
        parts.append(f"{minutes}m")
    if hours or minutes or secs:
        parts.append(f"{secs}s")
    return " ".join(parts)


def attempt_chmod(
    func: Callable[[str], Any], path: str, excinfo: BaseException
) -> None:
    """
    onexc handler for shutil.rmtree retrying read-only entries after a chmod.
    """
    if (
        isinstance(excinfo, OSError)
        and func in (os.rmdir, os.remove, os.unlink)
        and excinfo.errno == EACCES
    ):
        os.chmod(path, S_IRWXU | S_IRWXG | S_IRWXO)  # 0777
        func(path)
        return
    raise excinfo


def delete_directory(path: Path) -> None:
    """
    Recursively delete a directory, handling read-only files on Windows.

    Missing directories are ignored. Any other failure propagates.
    """
    if not path.exists():
        logger.debug(f"Directory already gone: {path}")
        return
    logger.debug(f"Deleting directory: {path}")
    shutil.rmtree(path, onexc=attempt_chmod)
