"""
Main CLI entry point for ReachLaunch.

This module defines the Click command group and the instance subcommands.
"""

from pathlib import Path
from typing import Optional

import click

from reachlaunch.controllers.app_controller import AppController
from reachlaunch.controllers.instance_controller import InstanceController
from reachlaunch.models.instance import Instance
from reachlaunch.utils.app_info import AppInfo
from reachlaunch.utils.constants import DEFAULT_GROUP_NAME, InstanceVariant
from reachlaunch.utils.exception import (
    InstanceAlreadyExistsError,
    InstanceNotFoundError,
    InvalidArchivePathError,
    UnknownVariantError,
)
from reachlaunch.utils.generic import format_playtime
from reachlaunch.utils.log_setup import configure_logging


def _require_instance(app_controller: AppController, name: str) -> Instance:
    instance = app_controller.instance_controller.get_instance_by_name(name)
    if instance is None:
        raise click.ClickException(f"No instance named {name}")
    return instance


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="REACHLAUNCH_DATA_DIR",
    help="Store instances, versions and logs here instead of the user data folder.",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path]) -> None:
    """ReachLaunch - isolated game instances and their mods"""
    app_info = AppInfo(data_dir)
    configure_logging(app_info)
    ctx.obj = AppController(app_info)


@cli.command("list")
@click.pass_obj
def list_instances(app_controller: AppController) -> None:
    """List the instances."""
    for instance in app_controller.instance_controller.get_instances():
        played = format_playtime(instance.total_playtime_seconds) or "never played"
        click.echo(
            f"{instance.name}\t{instance.group}\t{instance.variant.value}\t"
            f"{instance.target_version}\t{played}"
        )


@cli.command("create")
@click.argument("name")
@click.option("--group", default=DEFAULT_GROUP_NAME, show_default=True)
@click.option("--version", "version", required=True, help="Client version to run.")
@click.option(
    "--variant",
    type=click.Choice([variant.value for variant in InstanceVariant]),
    default=InstanceVariant.VANILLA.value,
    show_default=True,
)
@click.option("--loader-version", default="", help="Mod loader version.")
@click.option("--auto-update/--no-auto-update", default=False, show_default=True)
@click.pass_obj
def create(
    app_controller: AppController,
    name: str,
    group: str,
    version: str,
    variant: str,
    loader_version: str,
    auto_update: bool,
) -> None:
    """Create an instance."""
    try:
        instance = app_controller.instance_controller.create_instance(
            name, group, version, auto_update, variant, loader_version
        )
    except InstanceAlreadyExistsError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created {instance.name} at {instance.work_dir}")


@cli.command("remove")
@click.argument("name")
@click.confirmation_option(prompt="Delete the instance folder and everything in it?")
@click.pass_obj
def remove(app_controller: AppController, name: str) -> None:
    """Delete an instance and its folder."""
    app_controller.instance_controller.remove_instance(name)


@cli.command("rename")
@click.argument("name")
@click.argument("new_name")
@click.pass_obj
def rename(app_controller: AppController, name: str, new_name: str) -> None:
    """Rename an instance."""
    instance = _require_instance(app_controller, name)
    if app_controller.instance_controller.rename_instance(instance, new_name):
        click.echo(f"{new_name} is not usable as a folder name, renamed to {instance.name}")
    else:
        click.echo(f"Renamed {name} to {instance.name}")


@cli.command("launch")
@click.argument("name")
@click.pass_obj
def launch(app_controller: AppController, name: str) -> None:
    """Launch an instance and wait for the game to exit."""
    try:
        exit_code = app_controller.launch_and_wait(name)
    except InstanceNotFoundError as e:
        raise click.ClickException(str(e)) from e
    raise SystemExit(exit_code)


@cli.command("export")
@click.argument("name")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_obj
def export(app_controller: AppController, name: str, output: str) -> None:
    """Compress an instance to a ZIP archive."""
    instance = _require_instance(app_controller, name)
    archive = app_controller.instance_controller.export_instance(instance, output)
    click.echo(f"Exported {name} to {archive}")


@cli.command("import")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def import_(app_controller: AppController, archive: str) -> None:
    """Restore an instance from a ZIP archive."""
    try:
        instance = app_controller.instance_controller.import_instance(archive)
    except (InstanceAlreadyExistsError, InvalidArchivePathError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Imported {instance.name} to {instance.work_dir}")


@cli.command("add-mod")
@click.argument("name")
@click.argument("mod_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def add_mod(app_controller: AppController, name: str, mod_file: Path) -> None:
    """Add a loader mod to an instance."""
    instance = _require_instance(app_controller, name)
    try:
        app_controller.instance_controller.add_mod(instance, mod_file)
    except UnknownVariantError as e:
        raise click.ClickException(str(e)) from e


@cli.command("add-jar-mod")
@click.argument("name")
@click.argument("mod_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def add_jar_mod(app_controller: AppController, name: str, mod_file: Path) -> None:
    """Add a jar mod to an instance."""
    instance = _require_instance(app_controller, name)
    app_controller.instance_controller.add_jar_mod(instance, mod_file)


@cli.command("toggle-mod")
@click.argument("name")
@click.argument("file_name")
@click.option("--enable/--disable", default=True)
@click.pass_obj
def toggle_mod(
    app_controller: AppController, name: str, file_name: str, enable: bool
) -> None:
    """Enable or disable a mod (or jar mod) by file name."""
    instance = _require_instance(app_controller, name)
    if app_controller.instance_controller.set_mod_active(instance, file_name, enable) is None:
        raise click.ClickException(f"No mod named {file_name} in {name}")
    click.echo(
        f"{file_name} {'enabled' if enable else 'disabled'}, "
        f"applied on next launch in {_mods_folder_hint(instance)}"
    )


def _mods_folder_hint(instance: Instance) -> str:
    try:
        return str(InstanceController.get_enabled_mods_path(instance))
    except UnknownVariantError:
        return str(InstanceController.get_jar_mods_path(instance))


if __name__ == "__main__":
    cli()
