"""
Routing of game client output into the two game log channels.

Vanilla and Fabric instances write to the vanilla channel, every other
loader writes to the modded channel. Channels are loguru records bound with
an extra "channel" key so sinks can filter on them.
"""

from pathlib import Path

import loguru
from loguru import logger

from reachlaunch.utils.constants import (
    VANILLA_LIKE_VARIANTS,
    InstanceVariant,
    OutputChannel,
)


def output_channel_for(variant: InstanceVariant) -> OutputChannel:
    if variant in VANILLA_LIKE_VARIANTS:
        return OutputChannel.VANILLA
    return OutputChannel.MODDED


def is_game_output(record: "loguru.Record") -> bool:
    return "channel" in record["extra"]


class GameOutputSink:
    """Forwards client output lines to the channel matching the instance variant."""

    def __init__(self) -> None:
        self._loggers = {
            channel: logger.bind(channel=channel.value) for channel in OutputChannel
        }

    def write(self, variant: InstanceVariant, line: str) -> None:
        self._loggers[output_channel_for(variant)].info(line)


def add_game_output_sinks(log_folder: Path) -> list[int]:
    """
    Add one file sink per game output channel.

    :param log_folder: folder receiving game-vanilla.log and game-modded.log
    :return: the loguru handler ids
    """
    handler_ids = []
    for channel in OutputChannel:
        handler_ids.append(
            logger.add(
                log_folder / f"{channel.value}.log",
                level="INFO",
                format="[{time:YYYY-MM-DD HH:mm:ss}] {message}",
                filter=lambda record, name=channel.value: record["extra"].get(
                    "channel"
                )
                == name,
            )
        )
    return handler_ids
