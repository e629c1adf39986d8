"""Pure helpers for timestamps, message text and tapbacks."""
