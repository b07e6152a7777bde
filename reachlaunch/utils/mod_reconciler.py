"""Keep loader mod files in the folder matching their active flag.

Active mods live in the enabled mods folder, inactive ones in the disabled
mods folder. Files already in the right place are left untouched, so running
the reconciliation again with unchanged flags moves nothing.
"""

import shutil
from pathlib import Path
from typing import Sequence

from loguru import logger

from reachlaunch.models.instance import Mod


def _is_inside(path: Path, folder: Path) -> bool:
    return path.resolve().is_relative_to(folder.resolve())


def reconcile_mods(
    mods: Sequence[Mod], enabled_mods_dir: Path, disabled_mods_dir: Path
) -> int:
    """
    Move every mod file into the enabled or disabled folder according to its flag.

    Mods whose file is missing are skipped with a warning. Same-named files at the
    destination are overwritten and the mod's recorded path is updated.

    :param mods: the mods to reconcile, updated in place
    :param enabled_mods_dir: folder holding active mods
    :param disabled_mods_dir: folder holding inactive mods
    :return: the number of files moved
    """
    if not mods:
        return 0

    enabled_mods_dir.mkdir(parents=True, exist_ok=True)
    disabled_mods_dir.mkdir(parents=True, exist_ok=True)

    moved = 0
    for mod in mods:
        file_path = Path(mod.file_path)

        if not file_path.exists():
            logger.warning(f"Mod at '{file_path}' does not exist!")
            continue

        target_dir = enabled_mods_dir if mod.active else disabled_mods_dir
        if _is_inside(file_path, target_dir):
            continue

        destination = target_dir / file_path.name
        if destination.exists():
            logger.debug(f"Overwriting existing mod file {destination}")
            destination.unlink()

        logger.info(f"Moving mod {file_path.name} to {target_dir}")
        mod.file_path = str(shutil.move(file_path, destination))
        moved += 1

    return moved
