"""
Version catalog interfaces consumed by the launcher, and an offline implementation.

Fetching client binaries from the network is left to whichever VersionManager
the application is wired with; LocalVersionManager only knows about versions
already present in the versions folder.
"""

from pathlib import Path
from typing import Callable, Optional, Protocol

import msgspec
from loguru import logger
from packaging.version import InvalidVersion, Version as PackagingVersion

from reachlaunch.utils.exception import RemoteUnavailableError, VersionUnavailableError
from reachlaunch.utils.generic import version_artifact_path

# (downloaded bytes, total bytes)
ProgressSink = Callable[[int, int], None]


class Version(msgspec.Struct, frozen=True):
    """Immutable descriptor of a client release."""

    id: str
    url: str = ""
    size: int = 0
    sha256: str = ""


class VersionList(msgspec.Struct, frozen=True):
    versions: tuple[Version, ...]

    def get_latest(self) -> Version:
        if not self.versions:
            raise VersionUnavailableError("The version list is empty")
        return self.versions[-1]


class VersionManager(Protocol):
    def get_version(self, version_id: str) -> Version: ...

    def download_version(
        self, version: Version, progress: Optional[ProgressSink] = None
    ) -> None: ...

    def load_remote_versions(self) -> None: ...

    def get_version_list(self) -> Optional[VersionList]: ...


def _version_sort_key(version: Version) -> tuple[int, PackagingVersion | str]:
    try:
        return 1, PackagingVersion(version.id)
    except InvalidVersion:
        return 0, version.id


class LocalVersionManager:
    """
    VersionManager backed by the versions folder alone.

    :param versions_folder: folder holding <id>/<id>.jar for every installed version
    """

    def __init__(self, versions_folder: Path) -> None:
        self.versions_folder = versions_folder
        self._version_list: Optional[VersionList] = None

    def get_version(self, version_id: str) -> Version:
        return Version(id=version_id)

    def download_version(
        self, version: Version, progress: Optional[ProgressSink] = None
    ) -> None:
        artifact = version_artifact_path(self.versions_folder, version.id)
        if not artifact.is_file():
            raise VersionUnavailableError(
                f"Version {version.id} is not installed and cannot be downloaded offline: {artifact}"
            )
        if progress is not None:
            size = artifact.stat().st_size
            progress(size, size)

    def load_remote_versions(self) -> None:
        raise RemoteUnavailableError("No remote version catalog is configured")

    def get_version_list(self) -> Optional[VersionList]:
        if self._version_list is None:
            self._version_list = self._scan_installed()
        return self._version_list

    def _scan_installed(self) -> Optional[VersionList]:
        if not self.versions_folder.is_dir():
            return None
        versions = [
            Version(id=entry.name)
            for entry in self.versions_folder.iterdir()
            if version_artifact_path(self.versions_folder, entry.name).is_file()
        ]
        if not versions:
            logger.debug(f"No installed versions in {self.versions_folder}")
            return None
        return VersionList(versions=tuple(sorted(versions, key=_version_sort_key)))
