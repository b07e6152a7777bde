from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from platformdirs import PlatformDirs


class AppInfo:
    """
    Provides information about the application and its related directories.

    The directories are determined using the `platformdirs` package, ensuring
    platform-specific conventions are adhered to. A custom storage folder can be
    given to root every directory somewhere else (portable installs, tests).

    Examples:
        >>> app_info = AppInfo()
        >>> print(app_info.app_name)
        >>> print(app_info.instances_folder)
    """

    def __init__(self, storage_folder: Path | None = None) -> None:
        """
        Initialize the `AppInfo`, setting application metadata and determining important directories.

        :param storage_folder: Optional override for the user data folder.
        """
        self._app_name = "ReachLaunch"

        try:
            self._app_version = version("reachlaunch")
        except PackageNotFoundError:
            self._app_version = "Unknown version"

        platform_dirs = PlatformDirs(appname=self._app_name, appauthor=False)
        if storage_folder is None:
            self._app_storage_folder = Path(platform_dirs.user_data_dir)
            self._user_log_folder = Path(platform_dirs.user_log_dir)
        else:
            self._app_storage_folder = Path(storage_folder)
            self._user_log_folder = self._app_storage_folder / "logs"

        # Derive some secondary directory paths

        self._instances_folder: Path = self._app_storage_folder / "instances"
        self._versions_folder: Path = self._app_storage_folder / "versions"
        self._settings_file: Path = self._app_storage_folder / "settings.json"
        self._debug_file: Path = self._app_storage_folder / "DEBUG"

        # Make sure important directories exist

        self._app_storage_folder.mkdir(parents=True, exist_ok=True)
        self._user_log_folder.mkdir(parents=True, exist_ok=True)
        self._instances_folder.mkdir(parents=True, exist_ok=True)
        self._versions_folder.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def app_version(self) -> str:
        return self._app_version

    @property
    def app_storage_folder(self) -> Path:
        """
        Get the path to the folder where user-specific data for the application is stored.

        Returns:
            Path: The path to the user-specific data folder.
        """
        return self._app_storage_folder

    @property
    def user_log_folder(self) -> Path:
        return self._user_log_folder

    @property
    def instances_folder(self) -> Path:
        """
        Get the root folder holding one sub folder per instance.
        """
        return self._instances_folder

    @property
    def versions_folder(self) -> Path:
        """
        Get the root folder holding one sub folder per downloaded client version.
        """
        return self._versions_folder

    @property
    def app_settings_file(self) -> Path:
        return self._settings_file

    @property
    def debug_file(self) -> Path:
        """
        Marker file enabling debug logging when present.
        """
        return self._debug_file
