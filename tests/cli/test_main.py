from pathlib import Path

import pytest
from click.testing import CliRunner
from PySide6.QtCore import QCoreApplication

from reachlaunch.cli import main as cli_main
from reachlaunch.cli.main import cli


@pytest.fixture
def runner(qapp: QCoreApplication, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setattr(cli_main, "configure_logging", lambda app_info: None)
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


def invoke(runner: CliRunner, data_dir: Path, *args: str):
    return runner.invoke(cli, ["--data-dir", str(data_dir), *args])


def test_create_and_list(runner: CliRunner, data_dir: Path) -> None:
    result = invoke(runner, data_dir, "create", "Survival", "--version", "0.3.2")
    assert result.exit_code == 0, result.output
    assert "Created Survival" in result.output
    assert (data_dir / "instances" / "Survival" / "instance.json").is_file()

    result = invoke(runner, data_dir, "list")
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "Survival\tCosmic Reach\tvanilla\t0.3.2\tnever played"
    ]


def test_create_duplicate_fails(runner: CliRunner, data_dir: Path) -> None:
    invoke(runner, data_dir, "create", "dup", "--version", "0.3.2")

    result = invoke(runner, data_dir, "create", "dup", "--version", "0.3.2")

    assert result.exit_code == 1
    assert "dup" in result.output


def test_rename_and_remove(runner: CliRunner, data_dir: Path) -> None:
    invoke(runner, data_dir, "create", "old", "--version", "0.3.2")

    result = invoke(runner, data_dir, "rename", "old", "new")
    assert result.exit_code == 0, result.output
    assert "Renamed old to new" in result.output
    assert (data_dir / "instances" / "new").is_dir()

    result = invoke(runner, data_dir, "remove", "new", "--yes")
    assert result.exit_code == 0, result.output
    assert not (data_dir / "instances" / "new").exists()


def test_toggle_mod(runner: CliRunner, data_dir: Path, tmp_path: Path) -> None:
    mod_file = tmp_path / "fast.jar"
    mod_file.write_text("mod")
    invoke(
        runner,
        data_dir,
        "create",
        "fab",
        "--version",
        "0.3.2",
        "--variant",
        "fabric",
    )
    result = invoke(runner, data_dir, "add-mod", "fab", str(mod_file))
    assert result.exit_code == 0, result.output

    result = invoke(runner, data_dir, "toggle-mod", "fab", "fast.jar", "--disable")
    assert result.exit_code == 0, result.output
    assert "fast.jar disabled" in result.output

    result = invoke(runner, data_dir, "toggle-mod", "fab", "missing.jar", "--disable")
    assert result.exit_code == 1


def test_add_mod_to_vanilla_fails(
    runner: CliRunner, data_dir: Path, tmp_path: Path
) -> None:
    mod_file = tmp_path / "fast.jar"
    mod_file.write_text("mod")
    invoke(runner, data_dir, "create", "van", "--version", "0.3.2")

    result = invoke(runner, data_dir, "add-mod", "van", str(mod_file))

    assert result.exit_code == 1
    assert "van" in result.output


def test_launch_unknown_instance(runner: CliRunner, data_dir: Path) -> None:
    result = invoke(runner, data_dir, "launch", "ghost")

    assert result.exit_code == 1
    assert "ghost" in result.output
