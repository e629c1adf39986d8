"""Display labels and names for handles."""

from chat_stats.contacts.directory import (
    ContactDirectory,
    ContactEntry,
    format_handle,
    normalize_email,
    normalize_phone,
)

__all__ = [
    "ContactDirectory",
    "ContactEntry",
    "format_handle",
    "normalize_email",
    "normalize_phone",
]
