import sys

import loguru
from loguru import logger

from reachlaunch.utils.app_info import AppInfo
from reachlaunch.utils.game_output import add_game_output_sinks, is_game_output


def formatter(record: "loguru.Record") -> str:
    """Custom formatter for loguru logger"""
    return (
        "[{level}]"
        "[{time:YYYY-MM-DD HH:mm:ss}]"
        "[{process.id}]"
        "[{thread.name}]"
        "[{module}]"
        "[{function}][{line}]"
        " : "
        "{message}\n{exception}"
    )


def configure_logging(app_info: AppInfo) -> None:
    """
    Set up the launcher log file, the stderr logger and the game output channels.

    The log level comes from the presence (or absence) of a "DEBUG" file in the
    storage folder. The previous log file is kept as <name>.old.log.
    """
    debug_mode = app_info.debug_file.is_file()

    log_file = app_info.user_log_folder / (app_info.app_name + ".log")
    old_log_file = app_info.user_log_folder / (app_info.app_name + ".old.log")
    if old_log_file.is_file():
        old_log_file.unlink()
    if log_file.is_file():
        log_file.rename(old_log_file)

    # Remove the default stderr logger
    logger.remove()

    logger.add(
        log_file,
        level="DEBUG" if debug_mode else "INFO",
        format=formatter,
        filter=lambda record: not is_game_output(record),
    )

    # Add a "WARNING" or higher stderr logger
    logger.add(
        sys.stderr,
        level="WARNING",
        format=formatter,
        colorize=False,
        filter=lambda record: not is_game_output(record),
    )

    add_game_output_sinks(app_info.user_log_folder)
    logger.info(f"Starting {app_info.app_name} {app_info.app_version}")
    logger.debug(
        f"Storage folder: {app_info.app_storage_folder}, logging to {log_file}"
    )
