"""Error types raised around snapshot persistence."""


class HabitTimerError(Exception):
    """Base class for habit timer errors."""


class DecodeError(HabitTimerError, ValueError):
    """The saved snapshot exists but cannot be read back."""


class StorageError(HabitTimerError, OSError):
    """The snapshot file cannot be opened or written."""
