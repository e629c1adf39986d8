"""Unified exception hierarchy for chat-stats."""


class ChatStatsError(Exception):
    """Base exception for all chat-stats errors."""


class ConfigError(ChatStatsError):
    """Invalid configuration value."""


# Snapshot
class SnapshotError(ChatStatsError):
    """Base exception for snapshot store operations."""


class SnapshotUnavailableError(SnapshotError):
    """The snapshot file does not exist."""


class SnapshotReadError(SnapshotError):
    """The snapshot exists but could not be opened or read."""


class SnapshotCloneError(SnapshotError):
    """Failed to copy the source database into the snapshot location."""


# Lookups
class NotFoundError(ChatStatsError):
    """A referenced chat or handle does not exist in the snapshot."""


class ChatNotFoundError(NotFoundError):
    """No chat row with the requested identifier."""


class MalformedInputError(ChatStatsError):
    """Caller passed an argument the query layer cannot use."""


# Contacts
class ContactsError(ChatStatsError):
    """Base exception for contact directory operations."""


class ContactDirectoryError(ContactsError):
    """Failed to load or save the contact directory."""
