import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from PySide6.QtCore import QCoreApplication, QObject, Slot

from reachlaunch.controllers.instance_controller import InstanceController
from reachlaunch.controllers.launch_controller import LaunchContext, LaunchController
from reachlaunch.models.settings import Settings
from reachlaunch.utils.app_info import AppInfo
from reachlaunch.utils.constants import LaunchState
from reachlaunch.utils.exception import InstanceNotFoundError
from reachlaunch.utils.game_launcher import JavaProcessLauncher
from reachlaunch.utils.java_locator import JavaLocator
from reachlaunch.utils.version_manager import LocalVersionManager, VersionManager


class AppController(QObject):
    """
    Wires settings, the instance registry and the launch controller together.

    :param app_info: application folders
    :param version_manager: catalog/download client, offline by default
    """

    def __init__(
        self,
        app_info: AppInfo,
        version_manager: Optional[VersionManager] = None,
    ) -> None:
        super().__init__()

        self.app = QCoreApplication.instance() or QCoreApplication(sys.argv)
        self.app_info = app_info

        # Initialize the application settings.
        self.settings = Settings(app_info)
        self.settings.load()

        self.java_locator = JavaLocator(self.settings.java_path)

        # Index the instances on disk
        self.instance_controller = InstanceController(
            app_info.instances_folder, self.java_locator
        )
        self.instance_controller.load()

        self.launch_controller = LaunchController(
            LaunchContext(
                settings=self.settings,
                instances=self.instance_controller,
                version_manager=version_manager
                or LocalVersionManager(app_info.versions_folder),
                java_locator=self.java_locator,
                process_launcher=JavaProcessLauncher(),
                versions_folder=Path(app_info.versions_folder),
            )
        )
        self._exit_code = 0

    def launch_and_wait(self, name: str) -> int:
        """
        Launch an instance and run the event loop until the launch ends.

        :return: the game exit code, or 1 when the launch failed
        """
        instance = self.instance_controller.get_instance_by_name(name)
        if instance is None:
            raise InstanceNotFoundError(name)

        signals = self.launch_controller.signals
        signals.finished.connect(self._on_launch_finished)
        signals.failed.connect(self._on_launch_failed)
        signals.state_changed.connect(self._on_state_changed)

        if self.launch_controller.launch(instance) is None:
            return 1
        self.app.exec()
        self.launch_controller.wait_for_done()
        return self._exit_code

    @Slot(str, int, int)
    def _on_launch_finished(self, name: str, exit_code: int, seconds: int) -> None:
        self._exit_code = exit_code

    @Slot(str, str)
    def _on_launch_failed(self, name: str, message: str) -> None:
        logger.error(f"Launch of {name} failed: {message}")
        self._exit_code = 1

    @Slot(str, str)
    def _on_state_changed(self, name: str, state: str) -> None:
        if state == LaunchState.IDLE.value:
            self.app.quit()
