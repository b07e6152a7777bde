import os
import shutil
import sys
from pathlib import Path

from loguru import logger

JAVA_EXECUTABLE = "java.exe" if sys.platform == "win32" else "java"


class JavaLocator:
    """
    Finds the Java runtime used to start the game client.

    A configured default (from settings) wins, then JAVA_HOME, then the first
    java on PATH. Falls back to the bare executable name and lets the OS resolve it.
    """

    def __init__(self, default_path: str = "") -> None:
        self.default_path = default_path

    def get_runtime_path(self) -> str:
        if self.default_path:
            return self.default_path

        java_home = os.environ.get("JAVA_HOME")
        if java_home:
            candidate = Path(java_home) / "bin" / JAVA_EXECUTABLE
            if candidate.is_file():
                logger.debug(f"Using Java from JAVA_HOME: {candidate}")
                return str(candidate)
            logger.warning(f"JAVA_HOME is set but contains no {JAVA_EXECUTABLE}: {java_home}")

        on_path = shutil.which(JAVA_EXECUTABLE)
        if on_path:
            logger.debug(f"Using Java from PATH: {on_path}")
            return on_path

        logger.warning("No Java runtime found, relying on the OS to resolve 'java'")
        return JAVA_EXECUTABLE
