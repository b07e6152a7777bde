import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from loguru import logger
from PySide6.QtCore import QCoreApplication, QObject, QRunnable, QThreadPool, Signal, Slot

from reachlaunch.controllers.instance_controller import InstanceController
from reachlaunch.models.instance import Instance, LoaderProfile, VanillaProfile
from reachlaunch.models.settings import Settings
from reachlaunch.utils.constants import LaunchState
from reachlaunch.utils.exception import (
    LaunchCancelledError,
    RemoteUnavailableError,
    UnknownVariantError,
)
from reachlaunch.utils.game_launcher import (
    LaunchParameters,
    ProcessLauncher,
    RunningGame,
    window_title_properties,
)
from reachlaunch.utils.game_output import GameOutputSink
from reachlaunch.utils.generic import format_playtime, version_artifact_path
from reachlaunch.utils.jar_merger import merge_jar_mods
from reachlaunch.utils.java_locator import JavaLocator
from reachlaunch.utils.mod_reconciler import reconcile_mods
from reachlaunch.utils.version_manager import VersionManager


@dataclass
class LaunchContext:
    """Collaborators shared by every launch."""

    settings: Settings
    instances: InstanceController
    version_manager: VersionManager
    java_locator: JavaLocator
    process_launcher: ProcessLauncher
    versions_folder: Path
    output_sink: GameOutputSink = field(default_factory=GameOutputSink)


class LaunchSignals(QObject):
    """Signals emitted by launch workers, delivered on the receiver's thread"""

    state_changed = Signal(str, str)  # instance name, LaunchState value
    progress = Signal(str, int, int)  # instance name, done, total
    finished = Signal(str, int, int)  # instance name, exit code, seconds played
    failed = Signal(str, str)  # instance name, error message
    playtime_recorded = Signal(str, int)  # instance name, seconds played
    shutdown_requested = Signal()

    def __init__(self) -> None:
        super().__init__()


class LaunchWorker(QRunnable):
    """
    Runs one launch of one instance, from version resolution to the game exit.

    States: Updating -> Resolving -> (Merging | Reconciling) -> Launching ->
    Running -> Finalizing -> Idle. Update failures only skip the update. Any
    later failure aborts the launch. Cleanup (running flag reset, temporary
    client deletion) always runs.
    """

    def __init__(
        self,
        context: LaunchContext,
        instance: Instance,
        signals: LaunchSignals,
        release: Callable[[Instance], None],
    ) -> None:
        super().__init__()
        self.setAutoDelete(False)
        self.context = context
        self.instance = instance
        self.signals = signals
        self._release = release
        self._cancelled = threading.Event()
        self._process: Optional[RunningGame] = None
        self.client_copy: Optional[Path] = None
        self.state = LaunchState.IDLE

    def cancel(self) -> None:
        """
        Best-effort cancellation: stops before the next step, or terminates the
        game process if it is already running. Playtime is not recorded.
        """
        logger.info(f"Cancelling launch of instance {self.instance.name}")
        self._cancelled.set()
        process = self._process
        if process is not None:
            process.terminate()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _set_state(self, state: LaunchState) -> None:
        self.state = state
        logger.debug(f"Launch of {self.instance.name}: {state.value}")
        self.signals.state_changed.emit(self.instance.name, state.value)

    def _check_cancelled(self) -> None:
        if self.cancelled:
            raise LaunchCancelledError(f"Launch of {self.instance.name} was cancelled")

    def _report_progress(self, done: int, total: int) -> None:
        self.signals.progress.emit(self.instance.name, done, total)

    def run(self) -> None:
        instance = self.instance
        try:
            self._update_version()
            self._check_cancelled()

            client_path = self._resolve()
            self._check_cancelled()

            profile = instance.profile
            if isinstance(profile, VanillaProfile):
                client_path = self._merge(client_path)
            elif isinstance(profile, LoaderProfile):
                self._reconcile()
            else:
                raise UnknownVariantError(
                    f"Unknown instance variant: {type(profile).__name__}"
                )
            self._check_cancelled()

            exit_code, seconds_played = self._launch_and_wait(client_path)
            self._finalize(exit_code, seconds_played)
        except LaunchCancelledError as e:
            logger.info(str(e))
        except Exception as e:
            logger.exception(
                f"Exception occurred while trying to start instance {instance.name}"
            )
            self.signals.failed.emit(instance.name, str(e))
        finally:
            self._cleanup()

    def _update_version(self) -> None:
        instance = self.instance
        if not instance.auto_update_to_latest:
            return

        self._set_state(LaunchState.UPDATING)
        version_manager = self.context.version_manager
        try:
            version_list = version_manager.get_version_list()
            if version_list is None:
                version_manager.load_remote_versions()
                version_list = version_manager.get_version_list()
            if version_list is None:
                raise RemoteUnavailableError("No version list available")
            latest = version_list.get_latest()
        except Exception as e:
            logger.error(
                f"Could not load remote versions, no auto-update performed: {e}"
            )
            return

        if latest.id != instance.target_version:
            logger.info(
                f"Updating instance {instance.name} from {instance.target_version} to {latest.id}"
            )
            instance.target_version = latest.id

    def _resolve(self) -> Path:
        self._set_state(LaunchState.RESOLVING)
        instance = self.instance
        version_manager = self.context.version_manager

        version = version_manager.get_version(instance.target_version)
        version_manager.download_version(version, self._report_progress)
        client_path = version_artifact_path(self.context.versions_folder, version.id)

        if not instance.java_path:
            instance.java_path = self.context.java_locator.get_runtime_path()
            logger.info(f"Detected Java for {instance.name}: {instance.java_path}")

        instance.last_played = datetime.now()
        self.context.instances.save_instance(instance)
        return client_path

    def _merge(self, client_path: Path) -> Path:
        self._set_state(LaunchState.MERGING)
        merged = merge_jar_mods(
            client_path, self.instance.jar_mods, Path(self.instance.work_dir)
        )
        if merged != client_path:
            self.client_copy = merged
        return merged

    def _reconcile(self) -> None:
        self._set_state(LaunchState.RECONCILING)
        instance = self.instance
        assert isinstance(instance.profile, LoaderProfile)
        try:
            moved = reconcile_mods(
                instance.profile.mods,
                InstanceController.get_enabled_mods_path(instance),
                InstanceController.get_disabled_mods_path(instance),
            )
        except OSError as e:
            logger.warning(f"Failed to update mods of instance {instance.name}: {e}")
            return
        if moved:
            self.context.instances.save_instance(instance)

    def build_parameters(self, client_path: Path) -> LaunchParameters:
        instance = self.instance
        game_folder = InstanceController.get_game_folder_path(instance)
        params = LaunchParameters(
            java_path=instance.java_path,
            variant=instance.variant,
            save_dir=game_folder,
            working_dir=game_folder,
            client_path=client_path,
            properties=window_title_properties(instance.custom_window_title),
        )
        if isinstance(instance.profile, LoaderProfile):
            params.mods_dir = InstanceController.get_enabled_mods_path(instance)
            params.loader_version = instance.profile.loader_version
        return params

    def _launch_and_wait(self, client_path: Path) -> tuple[int, int]:
        self._set_state(LaunchState.LAUNCHING)
        instance = self.instance
        params = self.build_parameters(client_path)
        self._process = self.context.process_launcher.launch(params)
        if self.cancelled:
            self._process.terminate()

        self._set_state(LaunchState.RUNNING)
        start = time.monotonic()
        for line in self._process.lines():
            self.context.output_sink.write(instance.variant, line)
        exit_code = self._process.wait()
        seconds_played = int(time.monotonic() - start)

        logger.info(f"Game process of {instance.name} finished with exit code {exit_code}")
        return exit_code, seconds_played

    def _finalize(self, exit_code: int, seconds_played: int) -> None:
        self._set_state(LaunchState.FINALIZING)
        instance = self.instance
        self._check_cancelled()

        time_played = format_playtime(seconds_played)
        if time_played:
            logger.info(f"You played for {time_played}!")

        instance.total_playtime_seconds += seconds_played
        self.context.instances.save_instance(instance)
        self.signals.playtime_recorded.emit(instance.name, seconds_played)
        self.signals.finished.emit(instance.name, exit_code, seconds_played)

        if exit_code == 0 and self.context.settings.exit_on_game_exit:
            logger.info("Game exited cleanly, shutting down as configured")
            self.signals.shutdown_requested.emit()

    def _cleanup(self) -> None:
        self._release(self.instance)

        if self.client_copy is not None and self.client_copy.exists():
            try:
                self.client_copy.unlink()
            except OSError as e:
                logger.error(f"Unable to delete temporary client {self.client_copy}: {e}")
        self._set_state(LaunchState.IDLE)


class LaunchController(QObject):
    """
    Starts launches on a worker pool, one at most per instance at a time.
    """

    def __init__(self, context: LaunchContext) -> None:
        super().__init__()
        self.context = context
        self.signals = LaunchSignals()
        self.thread_pool = QThreadPool()
        self.thread_pool.setMaxThreadCount(
            max(1, context.settings.max_concurrent_launches)
        )
        self._lock = threading.Lock()
        self._workers: dict[int, LaunchWorker] = {}

        self.signals.shutdown_requested.connect(self._on_shutdown_requested)

    def _try_acquire(self, instance: Instance) -> bool:
        """Check and set the running flag as one step."""
        with self._lock:
            if instance.running:
                return False
            instance.running = True
            return True

    def _release(self, instance: Instance) -> None:
        with self._lock:
            instance.running = False
            self._workers.pop(id(instance), None)

    def launch(self, instance: Instance) -> Optional[LaunchWorker]:
        """
        Submit a launch of the instance to the worker pool.

        :return: the worker, or None when the instance is already running
        """
        if not self._try_acquire(instance):
            logger.warning(f"Instance {instance.name} is already running")
            return None

        worker = LaunchWorker(self.context, instance, self.signals, self._release)
        with self._lock:
            self._workers[id(instance)] = worker
        logger.info(f"Starting launch of instance {instance.name}")
        self.thread_pool.start(worker)
        return worker

    def cancel(self, instance: Instance) -> bool:
        with self._lock:
            worker = self._workers.get(id(instance))
        if worker is None:
            return False
        worker.cancel()
        return True

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self.thread_pool.waitForDone(msecs)

    @Slot()
    def _on_shutdown_requested(self) -> None:
        app = QCoreApplication.instance()
        if app is not None:
            app.quit()
