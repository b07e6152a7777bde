from pathlib import Path

from reachlaunch.utils.generic import (
    delete_directory,
    format_playtime,
    is_version_lower_than,
    sanitize_filename,
    version_artifact_path,
)


def test_sanitize_filename_strips_illegal_characters() -> None:
    assert sanitize_filename('My: "World" / 2') == "My World  2"
    assert sanitize_filename("trailing dots...") == "trailing dots"


def test_sanitize_filename_can_be_empty() -> None:
    assert sanitize_filename("???") == ""
    assert sanitize_filename("   ") == ""


def test_sanitize_filename_reserved_windows_names() -> None:
    assert sanitize_filename("con") == "_con"
    assert sanitize_filename("LPT1") == "_LPT1"


def test_is_version_lower_than() -> None:
    assert is_version_lower_than("0.2.0", "0.3.0") is True
    assert is_version_lower_than("0.2.9", "0.3.0") is True
    assert is_version_lower_than("0.3.0", "0.3.0") is False
    assert is_version_lower_than("0.5.0", "0.3.0") is False


def test_is_version_lower_than_invalid_version() -> None:
    assert is_version_lower_than("pre-alpha-banana", "0.3.0") is False
    assert is_version_lower_than("", "0.3.0") is False


def test_format_playtime() -> None:
    assert format_playtime(0) == ""
    assert format_playtime(42) == "42s"
    assert format_playtime(61) == "1m 1s"
    assert format_playtime(3723) == "1h 2m 3s"
    assert format_playtime(3600) == "1h 0m 0s"


def test_version_artifact_path(tmp_path: Path) -> None:
    assert version_artifact_path(tmp_path, "0.3.2") == (
        tmp_path / "0.3.2" / "0.3.2.jar"
    ).absolute()


def test_delete_directory(tmp_path: Path) -> None:
    target = tmp_path / "a"
    (target / "b").mkdir(parents=True)
    (target / "b" / "c.txt").write_text("c")

    delete_directory(target)
    assert not target.exists()

    # Missing folders are ignored
    delete_directory(target)
