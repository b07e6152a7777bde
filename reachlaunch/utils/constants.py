from enum import Enum


class InstanceVariant(str, Enum):
    VANILLA = "vanilla"
    FABRIC = "fabric"
    QUILT = "quilt"
    PUZZLE = "puzzle"


class LaunchState(str, Enum):
    IDLE = "Idle"
    UPDATING = "Updating"
    RESOLVING = "Resolving"
    MERGING = "Merging"
    RECONCILING = "Reconciling"
    LAUNCHING = "Launching"
    RUNNING = "Running"
    FINALIZING = "Finalizing"


class OutputChannel(str, Enum):
    VANILLA = "game-vanilla"
    MODDED = "game-modded"


# Variants whose output goes to the vanilla channel
VANILLA_LIKE_VARIANTS = (InstanceVariant.VANILLA, InstanceVariant.FABRIC)

INSTANCE_FILE_NAME = "instance.json"
GAME_FOLDER_NAME = "cosmic-reach"
JAR_MODS_FOLDER_NAME = "jarmods"
MODS_FOLDER_NAME = "mods"
LEGACY_ASSETS_FOLDER_NAME = "assets"
# Holds one extraction folder per jar mod while merging, never part of the layout
JAR_MOD_SCRATCH_FOLDER_NAME = ".jarmod-unpack"
CLIENT_ARTIFACT_EXTENSION = ".jar"

# Versions lower than this still read assets from mods/assets
LEGACY_ASSETS_MAX_VERSION = "0.3.0"

DEFAULT_INSTANCE_NAME_PREFIX = "instance"
DEFAULT_GROUP_NAME = "Cosmic Reach"
MAX_FREE_NAME_ATTEMPTS = 64
RANDOM_NAME_LENGTH = 10

WINDOW_TITLE_PROPERTY = "crloader.windowTitle"
SAVE_LOCATION_ARGUMENT = "--save-location"
