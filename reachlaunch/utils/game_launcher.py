import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterator, Optional, Protocol

import psutil
from loguru import logger

from reachlaunch.utils.constants import (
    SAVE_LOCATION_ARGUMENT,
    WINDOW_TITLE_PROPERTY,
    InstanceVariant,
)


@dataclass
class LaunchParameters:
    """Everything needed to start the client for one instance."""

    java_path: str
    variant: InstanceVariant
    save_dir: Path
    working_dir: Path
    client_path: Path
    mods_dir: Optional[Path] = None
    loader_version: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)


class RunningGame(Protocol):
    def lines(self) -> Iterator[str]: ...

    def wait(self) -> int: ...

    def terminate(self) -> None: ...


class ProcessLauncher(Protocol):
    def launch(self, params: LaunchParameters) -> RunningGame: ...


class GameProcess:
    """
    A spawned client process whose merged stdout/stderr is read line by line.
    """

    def __init__(self, process: subprocess.Popen[str]) -> None:
        self._process = process
        self.pid = process.pid

    def lines(self) -> Iterator[str]:
        """Blocking line reads until end of stream."""
        stdout: Optional[IO[str]] = self._process.stdout
        if stdout is None:
            return
        with stdout:
            for line in stdout:
                yield line.rstrip("\r\n")

    def wait(self) -> int:
        return self._process.wait()

    def terminate(self) -> None:
        """Terminate the process and all its child processes."""
        try:
            parent_process = psutil.Process(self.pid)
        except psutil.NoSuchProcess:
            return

        for child in parent_process.children(recursive=True):
            try:
                child.terminate()
            except psutil.NoSuchProcess:
                # Process might have already terminated
                pass

        try:
            parent_process.terminate()
        except psutil.NoSuchProcess:
            pass

        gone, alive = psutil.wait_procs([parent_process], timeout=5)
        for process in alive:
            logger.warning(f"Process {process.pid} ignored terminate, killing it")
            process.kill()


class JavaProcessLauncher:
    """
    Starts the client with a Java runtime.

    Command line: java [-Dkey=value ...] -jar <client> --save-location <save dir>.
    Loader variants also receive their mods folder and loader version as properties.
    """

    def build_command(self, params: LaunchParameters) -> list[str]:
        properties = dict(params.properties)
        if params.variant is not InstanceVariant.VANILLA:
            loader = params.variant.value
            if params.mods_dir is not None:
                properties[f"{loader}.modsDir"] = str(params.mods_dir)
            if params.loader_version:
                properties[f"{loader}.loaderVersion"] = params.loader_version

        command = [params.java_path]
        command.extend(f"-D{key}={value}" for key, value in properties.items())
        command.extend(
            [
                "-jar",
                str(params.client_path),
                SAVE_LOCATION_ARGUMENT,
                str(params.save_dir),
            ]
        )
        return command

    def launch(self, params: LaunchParameters) -> GameProcess:
        command = self.build_command(params)
        logger.info(f"Launching the game with subprocess.Popen(): {command}")

        creationflags = 0
        if sys.platform == "win32":
            creationflags = subprocess.CREATE_NEW_PROCESS_GROUP

        process = subprocess.Popen(
            command,
            cwd=str(params.working_dir),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            creationflags=creationflags,
        )
        logger.info(f"Launched game process with PID {process.pid}")
        return GameProcess(process)


def window_title_properties(title: str) -> dict[str, str]:
    """System properties overriding the client window title, if one is configured."""
    if not title or not title.strip():
        return {}
    return {WINDOW_TITLE_PROPERTY: title}
