from pathlib import Path
from unittest.mock import patch

from reachlaunch.models.instance import Mod
from reachlaunch.utils.mod_reconciler import reconcile_mods


def _mod_file(folder: Path, name: str, content: str = "mod") -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / name
    path.write_text(content)
    return path


def test_reconcile_empty_list_is_noop(tmp_path: Path) -> None:
    enabled = tmp_path / "enabled"
    disabled = tmp_path / "disabled"

    assert reconcile_mods([], enabled, disabled) == 0
    assert not enabled.exists()
    assert not disabled.exists()


def test_reconcile_moves_mods_to_matching_folder(tmp_path: Path) -> None:
    enabled = tmp_path / "enabled"
    disabled = tmp_path / "disabled"
    to_disable = Mod(file_path=str(_mod_file(enabled, "a.jar")), active=False)
    to_enable = Mod(file_path=str(_mod_file(disabled, "b.jar")), active=True)
    in_place = Mod(file_path=str(_mod_file(enabled, "c.jar")), active=True)

    moved = reconcile_mods([to_disable, to_enable, in_place], enabled, disabled)

    assert moved == 2
    assert Path(to_disable.file_path) == disabled / "a.jar"
    assert Path(to_enable.file_path) == enabled / "b.jar"
    assert Path(in_place.file_path) == enabled / "c.jar"
    assert (disabled / "a.jar").exists() and not (enabled / "a.jar").exists()
    assert (enabled / "b.jar").exists() and not (disabled / "b.jar").exists()


def test_reconcile_is_idempotent(tmp_path: Path) -> None:
    enabled = tmp_path / "enabled"
    disabled = tmp_path / "disabled"
    mods = [
        Mod(file_path=str(_mod_file(enabled, "a.jar")), active=False),
        Mod(file_path=str(_mod_file(disabled, "b.jar")), active=True),
    ]

    assert reconcile_mods(mods, enabled, disabled) == 2

    with patch("reachlaunch.utils.mod_reconciler.shutil.move") as move:
        assert reconcile_mods(mods, enabled, disabled) == 0
        move.assert_not_called()


def test_reconcile_skips_missing_files(tmp_path: Path) -> None:
    enabled = tmp_path / "enabled"
    disabled = tmp_path / "disabled"
    missing = Mod(file_path=str(tmp_path / "gone.jar"), active=True)
    present = Mod(file_path=str(_mod_file(tmp_path / "elsewhere", "d.jar")), active=True)

    assert reconcile_mods([missing, present], enabled, disabled) == 1
    assert missing.file_path == str(tmp_path / "gone.jar")
    assert Path(present.file_path) == enabled / "d.jar"
    assert disabled.is_dir()


def test_reconcile_overwrites_same_named_file(tmp_path: Path) -> None:
    enabled = tmp_path / "enabled"
    disabled = tmp_path / "disabled"
    _mod_file(enabled, "a.jar", "stale")
    mod = Mod(file_path=str(_mod_file(disabled, "a.jar", "fresh")), active=True)

    reconcile_mods([mod], enabled, disabled)

    assert (enabled / "a.jar").read_text() == "fresh"
    assert not (disabled / "a.jar").exists()
