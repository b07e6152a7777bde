"""Client archive operations for jar mods.

This module provides:
- extract_archive: Full extraction of an archive into a folder
- inject_files: Add files to an archive, replacing entries with the same name
- merge_jar_mods: Build a temporary client archive with the active jar mods merged in
"""

import os
import shutil
import time
from pathlib import Path
from typing import Mapping, Sequence
from zipfile import ZIP_DEFLATED, ZipFile

from loguru import logger

from reachlaunch.models.instance import JarMod
from reachlaunch.utils.constants import JAR_MOD_SCRATCH_FOLDER_NAME
from reachlaunch.utils.generic import delete_directory

__all__ = [
    "extract_archive",
    "inject_files",
    "merge_jar_mods",
    "scratch_folder_name",
]


def extract_archive(zip_path: str | Path, target_path: str | Path) -> list[Path]:
    """Extract every entry of a ZIP archive into a folder.

    Args:
        zip_path: Path to the ZIP file to extract
        target_path: Destination directory for extraction

    Returns:
        The extracted files (directories excluded)

    Raises:
        BadZipFile: If the archive is invalid
        OSError: If an entry would land outside target_path or cannot be written
    """
    target = Path(target_path).resolve()
    extracted: list[Path] = []

    with ZipFile(zip_path) as zipobj:
        for zip_info in zipobj.infolist():
            dst = (target / zip_info.filename).resolve()
            if not dst.is_relative_to(target):
                raise OSError(f"Archive entry escapes extraction folder: {zip_info.filename}")

            if zip_info.is_dir():
                dst.mkdir(parents=True, exist_ok=True)
                continue

            dst.parent.mkdir(parents=True, exist_ok=True)
            with zipobj.open(zip_info) as src, open(dst, "wb") as out_file:
                shutil.copyfileobj(src, out_file)
            extracted.append(dst)

    return extracted


def inject_files(archive_path: str | Path, files: Mapping[str, Path]) -> None:
    """Add files to an archive, overwriting any existing entry with the same name.

    The archive is rewritten next to itself and swapped in once complete, since
    ZIP entries cannot be replaced in place.

    Args:
        archive_path: Archive to modify
        files: Mapping of entry name (forward slashes) to the file on disk
    """
    archive = Path(archive_path)
    rewritten = archive.with_name(archive.name + ".part")

    try:
        with ZipFile(archive) as source, ZipFile(rewritten, "w", ZIP_DEFLATED) as out:
            for info in source.infolist():
                if info.filename in files:
                    continue
                out.writestr(info, source.read(info))
            for arcname, file_path in files.items():
                out.write(file_path, arcname)
    except BaseException:
        rewritten.unlink(missing_ok=True)
        raise

    os.replace(rewritten, archive)


def scratch_folder_name(mod_file: Path) -> str:
    """Deterministic extraction folder name for a jar mod, free of separators and dots."""
    name = mod_file.name
    for sep in ("/", "\\", os.sep, "."):
        name = name.replace(sep, "_")
    return name


def _collect_entries(unpack_dir: Path) -> dict[str, Path]:
    entries: dict[str, Path] = {}
    for root, _, files in os.walk(unpack_dir):
        for file in files:
            file_path = Path(root) / file
            entries[file_path.relative_to(unpack_dir).as_posix()] = file_path
    return entries


def merge_jar_mods(
    base_archive: Path, jar_mods: Sequence[JarMod], work_dir: Path
) -> Path:
    """Merge the active jar mods into a temporary copy of the client archive.

    Mods are applied in list order, so later mods win file conflicts. When no jar
    mod is active, the base archive path is returned and nothing is written.

    The returned temporary archive belongs to the caller, who must delete it once
    the game process exits. On failure the partial copy is removed before the
    error propagates.

    Args:
        base_archive: The original client archive
        jar_mods: Jar mods of the instance, active or not
        work_dir: Instance folder receiving the temporary archive and scratch folders

    Returns:
        The path of the archive to launch
    """
    active_mods = [jar_mod for jar_mod in jar_mods if jar_mod.active]
    if not active_mods:
        return base_archive

    client_copy = work_dir / f"{base_archive.name}{time.time_ns()}{base_archive.suffix}"
    scratch_root = work_dir / JAR_MOD_SCRATCH_FOLDER_NAME
    logger.info(f"Merging {len(active_mods)} jar mod(s) into {client_copy.name}")

    try:
        shutil.copyfile(base_archive, client_copy)

        for jar_mod in active_mods:
            mod_file = Path(jar_mod.full_path)
            unpack_dir = scratch_root / scratch_folder_name(mod_file)
            if unpack_dir.exists():
                delete_directory(unpack_dir)
            unpack_dir.mkdir(parents=True)

            logger.debug(f"Extracting jar mod {mod_file} into {unpack_dir}")
            extract_archive(mod_file, unpack_dir)
            inject_files(client_copy, _collect_entries(unpack_dir))

            delete_directory(unpack_dir)
    except BaseException:
        logger.error(f"Failed to merge jar mods into {client_copy}")
        client_copy.unlink(missing_ok=True)
        raise
    finally:
        delete_directory(scratch_root)

    return client_copy
