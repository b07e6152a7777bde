import os
import shutil
from pathlib import Path
from typing import Optional
from zipfile import ZipFile

import msgspec
from loguru import logger

from reachlaunch.models.instance import (
    PROFILE_TYPES,
    Instance,
    JarMod,
    LoaderProfile,
    Mod,
    Profile,
    VanillaProfile,
)
from reachlaunch.utils.constants import (
    DEFAULT_GROUP_NAME,
    DEFAULT_INSTANCE_NAME_PREFIX,
    GAME_FOLDER_NAME,
    INSTANCE_FILE_NAME,
    JAR_MODS_FOLDER_NAME,
    LEGACY_ASSETS_FOLDER_NAME,
    LEGACY_ASSETS_MAX_VERSION,
    MAX_FREE_NAME_ATTEMPTS,
    MODS_FOLDER_NAME,
    RANDOM_NAME_LENGTH,
    InstanceVariant,
)
from reachlaunch.utils.exception import (
    InstanceAlreadyExistsError,
    InvalidArchivePathError,
    UnknownVariantError,
)
from reachlaunch.utils.generic import (
    delete_directory,
    is_version_lower_than,
    random_string,
    sanitize_filename,
)
from reachlaunch.utils.jar_merger import extract_archive
from reachlaunch.utils.java_locator import JavaLocator


def _new_profile(variant: InstanceVariant | str, loader_version: str) -> Profile:
    try:
        variant = InstanceVariant(variant)
    except ValueError as e:
        raise UnknownVariantError(f"Unknown instance variant: {variant}") from e
    profile_type = PROFILE_TYPES[variant]
    if issubclass(profile_type, LoaderProfile):
        return profile_type(loader_version=loader_version)
    return VanillaProfile()


class InstanceController:
    """
    Registry of the instances found under the instances folder.

    Each instance lives in its own folder holding an instance.json manifest.
    Instances are indexed by their unique name.
    """

    def __init__(self, instances_folder: Path, java_locator: JavaLocator) -> None:
        self.instances_folder = instances_folder
        self.java_locator = java_locator
        self._instances: list[Instance] = []
        self._instances_by_name: dict[str, Instance] = {}

    # Layout

    @staticmethod
    def get_manifest_path(instance: Instance) -> Path:
        return Path(instance.work_dir) / INSTANCE_FILE_NAME

    @staticmethod
    def get_game_folder_path(instance: Instance) -> Path:
        """Get the game data folder, also used as save location and working directory."""
        return Path(instance.work_dir) / GAME_FOLDER_NAME

    @staticmethod
    def get_jar_mods_path(instance: Instance) -> Path:
        return Path(instance.work_dir) / JAR_MODS_FOLDER_NAME

    @staticmethod
    def get_mods_path(instance: Instance) -> Path:
        return InstanceController.get_game_folder_path(instance) / MODS_FOLDER_NAME

    @staticmethod
    def get_enabled_mods_path(instance: Instance) -> Path:
        """Get the folder the loader reads mods from. Loader variants only."""
        if not isinstance(instance.profile, LoaderProfile):
            raise UnknownVariantError(
                f"Instance {instance.name} has no loader mods folder ({instance.variant.value})"
            )
        return InstanceController.get_game_folder_path(instance) / (
            f"{instance.variant.value}-mods"
        )

    @staticmethod
    def get_disabled_mods_path(instance: Instance) -> Path:
        if not isinstance(instance.profile, LoaderProfile):
            raise UnknownVariantError(
                f"Instance {instance.name} has no loader mods folder ({instance.variant.value})"
            )
        return InstanceController.get_game_folder_path(instance) / (
            f"disabled-{instance.variant.value}-mods"
        )

    # Index

    def _cache_instance(self, instance: Instance) -> None:
        if instance.name in self._instances_by_name:
            logger.warning(
                f"Skipping instance at {instance.work_dir}: name {instance.name} is already taken"
            )
            return
        self._instances.append(instance)
        self._instances_by_name[instance.name] = instance

    def _uncache_instance(self, instance: Instance) -> None:
        if self._instances_by_name.get(instance.name) is not instance:
            return
        self._instances.remove(instance)
        del self._instances_by_name[instance.name]

    def _uncache_all(self) -> None:
        self._instances.clear()
        self._instances_by_name.clear()

    def get_instance_by_name(self, name: str) -> Optional[Instance]:
        return self._instances_by_name.get(name)

    def get_instances(self) -> list[Instance]:
        return list(self._instances)

    # Persistence

    @staticmethod
    def to_bytes(instance: Instance) -> bytes:
        """Encode the instance manifest to JSON bytes."""
        return msgspec.json.format(msgspec.json.encode(instance.to_manifest()), indent=4)

    @staticmethod
    def from_bytes(instance_bytes: bytes) -> Instance:
        """Decode a manifest. Transient attributes are reset."""
        instance = msgspec.json.decode(instance_bytes, type=Instance)
        instance.work_dir = ""
        instance.running = False
        return instance

    def read_manifest(self, manifest_path: Path) -> Instance:
        instance = self.from_bytes(manifest_path.read_bytes())
        instance.work_dir = str(manifest_path.parent)
        return instance

    def save_instance(self, instance: Instance) -> None:
        """Write the instance manifest, replacing the previous one atomically."""
        manifest_path = self.get_manifest_path(instance)
        partial_path = manifest_path.with_name(manifest_path.name + ".part")
        partial_path.write_bytes(self.to_bytes(instance))
        os.replace(partial_path, manifest_path)
        logger.debug(f"Saved manifest of instance {instance.name} to {manifest_path}")

    def load(self) -> None:
        """
        Scan the instances folder and index every folder holding a manifest.

        Folders without a manifest are skipped. A manifest that cannot be read or
        decoded is logged and skipped without affecting the other instances.

        :raises OSError: if the instances folder itself cannot be listed
        """
        for path in sorted(self.instances_folder.iterdir()):
            if not path.is_dir():
                continue

            manifest_path = path / INSTANCE_FILE_NAME
            if not manifest_path.is_file():
                continue

            try:
                instance = self.read_manifest(manifest_path)
            except (OSError, msgspec.DecodeError) as e:
                logger.error(f"Unable to load instance manifest {manifest_path}: {e}")
                continue

            self._cache_instance(instance)

        logger.info(
            f"Loaded {len(self._instances)} instance(s) from {self.instances_folder}"
        )

    def reload(self) -> None:
        self._uncache_all()
        self.load()

    # Free name resolution

    def _is_name_taken(self, name: str) -> bool:
        return (
            self.instances_folder / name
        ).exists() or name in self._instances_by_name

    def find_free_work_dir(self, suggested_name: str, version: str) -> Path:
        """
        Pick a folder for an instance that collides with neither an existing
        folder nor a registered instance name.

        Underscores are appended until the name is free. After
        MAX_FREE_NAME_ATTEMPTS tries a random name is used instead.

        :param suggested_name: the desired instance name
        :param version: the instance version, used when the name sanitizes to nothing
        :return: the free folder path, not created yet
        """
        candidate = sanitize_filename(suggested_name)
        if not candidate:
            candidate = sanitize_filename(
                f"{DEFAULT_INSTANCE_NAME_PREFIX}{version}"
            ) or DEFAULT_INSTANCE_NAME_PREFIX

        for _ in range(MAX_FREE_NAME_ATTEMPTS):
            if not self._is_name_taken(candidate):
                return self.instances_folder / candidate
            candidate = sanitize_filename(candidate + "_")

        logger.warning(
            f"Unable to find free name for instance {suggested_name}, using a random one"
        )
        candidate = random_string(RANDOM_NAME_LENGTH)
        while self._is_name_taken(candidate):
            candidate = random_string(RANDOM_NAME_LENGTH)
        return self.instances_folder / candidate

    # Operations

    def create_instance(
        self,
        name: str,
        group: str = DEFAULT_GROUP_NAME,
        version: str = "",
        auto_update: bool = False,
        variant: InstanceVariant | str = InstanceVariant.VANILLA,
        loader_version: str = "",
    ) -> Instance:
        """
        Create a new instance folder with its manifest and register it.

        :param name: Unique name of the instance
        :param group: Free-form group label
        :param version: Client version to run
        :param auto_update: Follow the latest version on every launch
        :param variant: Loader configuration of the instance
        :param loader_version: Version of the mod loader, loader variants only
        :return: Created Instance
        :rtype: Instance
        :raises InstanceAlreadyExistsError: if the name is already registered
        """
        if name in self._instances_by_name:
            raise InstanceAlreadyExistsError(name)

        profile = _new_profile(variant, loader_version)
        work_dir = self.find_free_work_dir(name, version)
        instance = Instance(
            name=name,
            group=group,
            target_version=version,
            auto_update_to_latest=auto_update,
            java_path=self.java_locator.get_runtime_path(),
            profile=profile,
            work_dir=str(work_dir),
        )

        work_dir.mkdir(parents=True)
        try:
            self.get_game_folder_path(instance).mkdir(parents=True, exist_ok=True)
            self.get_jar_mods_path(instance).mkdir(parents=True, exist_ok=True)

            mods_path = self.get_mods_path(instance)
            mods_path.mkdir(parents=True, exist_ok=True)
            if is_version_lower_than(version, LEGACY_ASSETS_MAX_VERSION):
                (mods_path / LEGACY_ASSETS_FOLDER_NAME).mkdir(exist_ok=True)

            self.save_instance(instance)
        except OSError:
            logger.error(f"Failed to create instance {name} at {work_dir}")
            delete_directory(work_dir)
            raise

        self._cache_instance(instance)
        logger.info(f"Created instance {name} ({profile.kind.value} {version}) at {work_dir}")
        return instance

    def remove_instance(self, name: str) -> None:
        instance = self.get_instance_by_name(name)
        if instance is None:
            logger.debug(f"Tried to remove unknown instance {name}")
            return

        logger.info(f"Removing instance {name} at {instance.work_dir}")
        delete_directory(Path(instance.work_dir))
        self._uncache_instance(instance)

    def rename_instance(self, instance: Instance, new_name: str) -> bool:
        """
        Rename an instance and move its folder to match.

        :param instance: the instance to rename
        :param new_name: the requested name
        :return: True if the requested name could not be used verbatim, in which
            case the instance is named after its final folder instead
        """
        old_work_dir = Path(instance.work_dir)
        if new_name == instance.name and old_work_dir.name == new_name:
            return False

        self._uncache_instance(instance)

        try:
            new_work_dir = self.find_free_work_dir(new_name, instance.target_version)
            shutil.move(str(old_work_dir), str(new_work_dir))
        except OSError:
            logger.error(f"Failed to move {old_work_dir} while renaming {instance.name}")
            self._cache_instance(instance)
            raise

        instance.work_dir = str(new_work_dir)
        self._rebase_mod_paths(instance)

        invalid_name = new_work_dir.name != new_name
        if invalid_name:
            logger.warning(
                f"Instance name {new_name} is not usable as-is, renamed to {new_work_dir.name}"
            )
            instance.name = new_work_dir.name
        else:
            instance.name = new_name

        self._cache_instance(instance)
        self.save_instance(instance)
        return invalid_name

    # Mods

    def add_mod(self, instance: Instance, source: Path) -> Mod:
        """Copy a mod file into the loader mods folder and record it as active."""
        if not isinstance(instance.profile, LoaderProfile):
            raise UnknownVariantError(
                f"Vanilla instance {instance.name} cannot hold loader mods"
            )
        enabled_mods_path = self.get_enabled_mods_path(instance)
        enabled_mods_path.mkdir(parents=True, exist_ok=True)

        destination = shutil.copy2(source, enabled_mods_path / source.name)
        mod = Mod(file_path=str(destination), active=True, name=source.stem)
        instance.profile.mods.append(mod)
        self.save_instance(instance)
        logger.info(f"Added mod {source.name} to instance {instance.name}")
        return mod

    def add_jar_mod(self, instance: Instance, source: Path) -> JarMod:
        jar_mods_path = self.get_jar_mods_path(instance)
        jar_mods_path.mkdir(parents=True, exist_ok=True)

        destination = shutil.copy2(source, jar_mods_path / source.name)
        jar_mod = JarMod(full_path=str(destination), active=True, name=source.stem)
        instance.jar_mods.append(jar_mod)
        self.save_instance(instance)
        logger.info(f"Added jar mod {source.name} to instance {instance.name}")
        return jar_mod

    def set_mod_active(
        self, instance: Instance, file_name: str, active: bool
    ) -> Mod | JarMod | None:
        """
        Flag a loader mod or jar mod, found by file name, as active or inactive.

        Loader mod files are moved on the next launch.
        """
        candidates: list[Mod | JarMod] = list(instance.jar_mods)
        if isinstance(instance.profile, LoaderProfile):
            candidates.extend(instance.profile.mods)

        for mod in candidates:
            path = mod.full_path if isinstance(mod, JarMod) else mod.file_path
            if Path(path).name == file_name:
                mod.active = active
                self.save_instance(instance)
                return mod

        logger.warning(f"No mod named {file_name} in instance {instance.name}")
        return None

    # Archives

    @staticmethod
    def _validate_archive_path(archive_path: str) -> bool:
        """Validate archive path exists and has .zip extension."""
        return Path(archive_path).exists() and archive_path.endswith(".zip")

    def export_instance(self, instance: Instance, output_path: str) -> Path:
        """Compress the instance folder to a ZIP archive, skipping symlinks and junctions."""
        if not output_path.endswith(".zip"):
            output_path += ".zip"

        self.save_instance(instance)
        work_dir = Path(instance.work_dir)
        logger.info(f"Compressing instance {instance.name} to archive: {output_path}")

        with ZipFile(output_path, "w") as archive:
            for root, dirs, files in os.walk(work_dir, topdown=True, followlinks=False):
                # Detect and skip symlinks by comparing resolved vs absolute paths
                if Path(root).absolute() != Path(root).resolve():
                    logger.debug(f"Skipping symlinked directory: {root}")
                    dirs.clear()
                    continue

                # Empty folders are part of the layout, keep them
                for _dir in dirs:
                    dir_path = Path(root) / _dir
                    archive.write(dir_path, dir_path.relative_to(work_dir).as_posix())

                for file in files:
                    file_path = Path(root) / file
                    archive.write(file_path, file_path.relative_to(work_dir).as_posix())

        return Path(output_path)

    def import_instance(self, archive_path: str) -> Instance:
        """
        Register an instance restored from an archive made by export_instance.

        :raises InvalidArchivePathError: if the archive is missing or not a .zip
        :raises InstanceAlreadyExistsError: if its name is already registered
        """
        if not self._validate_archive_path(archive_path):
            logger.error(f"Invalid archive path: {archive_path}")
            raise InvalidArchivePathError(archive_path)

        with ZipFile(archive_path, "r") as archive:
            instance = self.from_bytes(archive.read(INSTANCE_FILE_NAME))

        if instance.name in self._instances_by_name:
            raise InstanceAlreadyExistsError(instance.name)

        work_dir = self.find_free_work_dir(instance.name, instance.target_version)
        logger.info(f"Extracting instance {instance.name} to: {work_dir}")
        try:
            extract_archive(archive_path, work_dir)
            instance.work_dir = str(work_dir)
            self._rebase_mod_paths(instance)
            self.save_instance(instance)
        except BaseException:
            delete_directory(work_dir)
            raise

        self._cache_instance(instance)
        return instance

    def _rebase_mod_paths(self, instance: Instance) -> None:
        """Point mod records at the files inside the current work dir, after a move or import."""
        jar_mods_path = self.get_jar_mods_path(instance)
        for jar_mod in instance.jar_mods:
            jar_mod.full_path = str(jar_mods_path / Path(jar_mod.full_path).name)

        if isinstance(instance.profile, LoaderProfile):
            enabled = self.get_enabled_mods_path(instance)
            disabled = self.get_disabled_mods_path(instance)
            for mod in instance.profile.mods:
                file_name = Path(mod.file_path).name
                mod.file_path = str(
                    (enabled if (enabled / file_name).exists() else disabled)
                    / file_name
                )
        logger.debug(f"Rebased mod paths of {instance.name} onto {instance.work_dir}")
