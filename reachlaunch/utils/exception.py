class InstanceAlreadyExistsError(Exception):
    """
    Raised when creating an instance whose name
    is already registered
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Instance already exists: {name}")
        self.name = name


class InstanceNotFoundError(Exception):
    def __init__(self, name: str) -> None:
        super().__init__(f"Instance not found: {name}")
        self.name = name


class UnknownVariantError(Exception):
    """
    Raised when an instance carries a variant payload
    the launcher does not know how to handle
    """

    pass


class RemoteUnavailableError(Exception):
    """
    Raised when the remote version catalog cannot be fetched
    """

    pass


class VersionUnavailableError(Exception):
    pass


class LaunchCancelledError(Exception):
    pass


class InvalidArchivePathError(ValueError):
    """Raised when provided archive path is invalid or not a valid ZIP file."""

    def __init__(self, archive_path: str) -> None:
        super().__init__(f"Invalid archive path: {archive_path}")
