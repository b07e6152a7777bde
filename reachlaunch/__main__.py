#!/usr/bin/env python3
import sys
from types import TracebackType
from typing import Type

from loguru import logger

from reachlaunch.cli.main import cli


def handle_exception(
    exc_type: Type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    """
    Called (through excepthook) when an exception escapes the application.
    The error is logged to the log file before exiting.
    """

    # Ignore KeyboardInterrupt exceptions, for when running through the terminal
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger.opt(exception=(exc_type, exc_value, exc_traceback)).error(
        "ReachLaunch has failed with an uncaught exception"
    )
    sys.exit(1)


sys.excepthook = handle_exception


if __name__ == "__main__":
    cli()
