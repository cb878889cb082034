"""Exception types shared across loaders and stores"""


class WorldMediaError(Exception):
    """Base class for library errors."""


class FragmentError(WorldMediaError):
    """A fragment exists but could not be fetched or decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class StateError(WorldMediaError):
    """A persisted document could not be written."""
