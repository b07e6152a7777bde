import json
from typing import Any, Dict

from loguru import logger
from PySide6.QtCore import QObject, Signal

from reachlaunch.utils.app_info import AppInfo


class Settings(QObject):
    settings_have_changed = Signal()

    def __init__(self, app_info: AppInfo) -> None:
        super().__init__()

        self._settings_file = app_info.app_settings_file
        self._debug_file = app_info.debug_file

        # Shut the launcher down once the game exits cleanly
        self.exit_on_game_exit: bool = False

        # Runtime used when an instance has none configured, empty = auto-detect
        self.java_path: str = ""

        # Upper bound of launches running side by side (one per instance at most)
        self.max_concurrent_launches: int = 4

        # Advanced
        self.debug_logging_enabled: bool = False

    def __setattr__(self, key: str, value: Any) -> None:
        # If private attribute, set it normally
        if key.startswith("_"):
            super().__setattr__(key, value)
            return

        if hasattr(self, key) and getattr(self, key) == value:
            return
        super().__setattr__(key, value)
        self.settings_have_changed.emit()

    def load(self) -> None:
        self.debug_logging_enabled = (
            self._debug_file.exists() and self._debug_file.is_file()
        )

        try:
            with open(str(self._settings_file), "r") as file:
                data = json.load(file)
        except FileNotFoundError:
            logger.info(f"No settings file found, writing defaults to {self._settings_file}")
            self.save()
            return

        self._from_dict(data)

    def save(self) -> None:
        if self.debug_logging_enabled:
            self._debug_file.touch(exist_ok=True)
        else:
            self._debug_file.unlink(missing_ok=True)

        with open(str(self._settings_file), "w") as file:
            json.dump(self._to_dict(), file, indent=4)

    def _from_dict(self, data: Dict[str, Any]) -> None:
        for key, value in data.items():
            if key == "debug_logging_enabled":
                continue
            if not hasattr(self, key):
                logger.debug(f"Ignoring unknown settings key: {key}")
                continue
            setattr(self, key, value)

    def _to_dict(self, skip_private: bool = True) -> Dict[str, Any]:
        skip_attributes = [
            "destroyed",
            "objectNameChanged",
            "settings_have_changed",
            "debug_logging_enabled",
        ]

        data = {}

        for key, value in self.__dict__.items():
            if key in skip_attributes:
                continue
            if skip_private and key.startswith("_"):
                continue
            data[key] = value

        return data
