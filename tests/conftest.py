from pathlib import Path
from typing import Callable, Generator
from zipfile import ZipFile

import pytest
from PySide6.QtCore import QCoreApplication

from reachlaunch.controllers.instance_controller import InstanceController
from reachlaunch.models.settings import Settings
from reachlaunch.utils.app_info import AppInfo
from reachlaunch.utils.java_locator import JavaLocator


@pytest.fixture(scope="session")
def qapp() -> Generator[QCoreApplication, None, None]:
    """Create a QCoreApplication instance for Qt tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def app_info(tmp_path: Path) -> AppInfo:
    return AppInfo(tmp_path / "data")


@pytest.fixture
def settings(qapp: QCoreApplication, app_info: AppInfo) -> Settings:
    return Settings(app_info)


@pytest.fixture
def instance_controller(app_info: AppInfo) -> InstanceController:
    return InstanceController(app_info.instances_folder, JavaLocator("/opt/java/bin/java"))


def _make_zip(path: Path, entries: dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with ZipFile(path, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return path


def _read_zip(path: Path) -> dict[str, str]:
    with ZipFile(path) as archive:
        return {name: archive.read(name).decode() for name in archive.namelist()}


@pytest.fixture
def make_zip() -> Callable[[Path, dict[str, str]], Path]:
    """Write a ZIP archive holding the given text entries."""
    return _make_zip


@pytest.fixture
def read_zip() -> Callable[[Path], dict[str, str]]:
    return _read_zip
