from datetime import datetime
from typing import ClassVar

import msgspec

from reachlaunch.utils.constants import DEFAULT_GROUP_NAME, InstanceVariant

# Runtime-only attributes, never written to instance.json
TRANSIENT_FIELDS = ("work_dir", "running")


class Mod(msgspec.Struct):
    """
    A loader-managed add-on, toggled by moving its file
    between the enabled and disabled mods folders.
    """

    file_path: str
    active: bool = True
    name: str = ""


class JarMod(msgspec.Struct):
    """
    A binary patch archive merged into the client archive at launch time.
    """

    full_path: str
    active: bool = True
    name: str = ""


class VanillaProfile(msgspec.Struct, tag="vanilla"):
    kind: ClassVar[InstanceVariant] = InstanceVariant.VANILLA


class LoaderProfile(msgspec.Struct):
    """
    Shared payload of the mod-loader variants.
    """

    loader_version: str = ""
    mods: list[Mod] = msgspec.field(default_factory=list)

    kind: ClassVar[InstanceVariant]


class FabricProfile(LoaderProfile, tag="fabric"):
    kind: ClassVar[InstanceVariant] = InstanceVariant.FABRIC


class QuiltProfile(LoaderProfile, tag="quilt"):
    kind: ClassVar[InstanceVariant] = InstanceVariant.QUILT


class PuzzleProfile(LoaderProfile, tag="puzzle"):
    kind: ClassVar[InstanceVariant] = InstanceVariant.PUZZLE


Profile = VanillaProfile | FabricProfile | QuiltProfile | PuzzleProfile

PROFILE_TYPES: dict[InstanceVariant, type[Profile]] = {
    InstanceVariant.VANILLA: VanillaProfile,
    InstanceVariant.FABRIC: FabricProfile,
    InstanceVariant.QUILT: QuiltProfile,
    InstanceVariant.PUZZLE: PuzzleProfile,
}


class Instance(msgspec.Struct):
    """
    Data model for a game instance, persisted as the instance manifest.

    Pure data class with no side effects on attribute mutation.
    Directory layout, persistence and launch state are handled by controllers.
    """

    name: str
    group: str = DEFAULT_GROUP_NAME
    target_version: str = ""
    auto_update_to_latest: bool = False
    java_path: str = ""
    last_played: datetime | None = None
    total_playtime_seconds: int = 0
    custom_window_title: str = ""
    profile: Profile = msgspec.field(default_factory=VanillaProfile)
    jar_mods: list[JarMod] = msgspec.field(default_factory=list)
    work_dir: str = ""
    running: bool = False

    @property
    def variant(self) -> InstanceVariant:
        return self.profile.kind

    def to_manifest(self) -> dict[str, object]:
        """Manifest representation, without the transient runtime attributes."""
        return {
            field: getattr(self, field)
            for field in self.__struct_fields__
            if field not in TRANSIENT_FIELDS
        }
