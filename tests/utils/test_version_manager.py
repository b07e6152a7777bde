from pathlib import Path
from unittest.mock import MagicMock

import pytest

from reachlaunch.utils.exception import RemoteUnavailableError, VersionUnavailableError
from reachlaunch.utils.version_manager import LocalVersionManager, Version, VersionList


def _install(versions_folder: Path, version_id: str) -> Path:
    folder = versions_folder / version_id
    folder.mkdir(parents=True)
    artifact = folder / f"{version_id}.jar"
    artifact.write_bytes(b"client")
    return artifact


def test_version_list_latest() -> None:
    version_list = VersionList(versions=(Version(id="0.1.0"), Version(id="0.3.2")))
    assert version_list.get_latest().id == "0.3.2"

    with pytest.raises(VersionUnavailableError):
        VersionList(versions=()).get_latest()


def test_local_version_list_orders_installed_versions(tmp_path: Path) -> None:
    for version_id in ("0.10.0", "0.3.2", "0.9.1"):
        _install(tmp_path, version_id)
    (tmp_path / "empty").mkdir()

    version_list = LocalVersionManager(tmp_path).get_version_list()

    assert version_list is not None
    assert [version.id for version in version_list.versions] == [
        "0.3.2",
        "0.9.1",
        "0.10.0",
    ]
    assert version_list.get_latest().id == "0.10.0"


def test_local_version_list_none_when_nothing_installed(tmp_path: Path) -> None:
    assert LocalVersionManager(tmp_path).get_version_list() is None


def test_local_download_requires_installed_artifact(tmp_path: Path) -> None:
    manager = LocalVersionManager(tmp_path)
    _install(tmp_path, "0.3.2")
    progress = MagicMock()

    manager.download_version(manager.get_version("0.3.2"), progress)
    progress.assert_called_once_with(6, 6)

    with pytest.raises(VersionUnavailableError):
        manager.download_version(manager.get_version("0.4.0"))


def test_local_remote_versions_unavailable(tmp_path: Path) -> None:
    with pytest.raises(RemoteUnavailableError):
        LocalVersionManager(tmp_path).load_remote_versions()
