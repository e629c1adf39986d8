"""Display labels for handles and a name directory loaded from a contacts CSV.

Labels are decoration only: aggregation queries never consult the directory.
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from chat_stats.exceptions import ContactDirectoryError

logger = logging.getLogger(__name__)

CSV_FIELDS = ("name", "phone", "avatar")

_NANP_HANDLE = re.compile(r"^\+?1?(\d{10})$")


def format_handle(handle: str) -> str:
    """Render a 10-digit (optionally +1/1-prefixed) number as ``(XXX) XXX-XXXX``."""
    if not handle:
        return handle
    if _NANP_HANDLE.match(handle):
        digits = re.sub(r"\D", "", handle)[-10:]
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return handle


def normalize_phone(raw: str) -> str:
    """Normalize a phone number to last 10 digits."""
    digits = re.sub(r"\D", "", raw)
    # Strip leading country code (1 for US/CA)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits[-10:] if len(digits) >= 10 else digits


def normalize_email(raw: str) -> str:
    return raw.strip().lower()


def lookup_key(handle: str) -> str:
    if "@" in handle:
        return normalize_email(handle)
    return normalize_phone(handle) or handle.strip()


@dataclass
class ContactEntry:
    """One ``name -> handle`` row of the contacts export."""

    name: str
    handle: str
    avatar: str | None = None


class ContactDirectory:
    """Maps handles to display names; a name may own several handles."""

    def __init__(self, entries: list[ContactEntry] | None = None):
        self.entries: list[ContactEntry] = []
        self._by_key: dict[str, ContactEntry] = {}
        for entry in entries or []:
            self.add(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def add(self, entry: ContactEntry) -> None:
        if not entry.handle:
            return
        self.entries.append(entry)
        key = lookup_key(entry.handle)
        if key:
            self._by_key.setdefault(key, entry)

    def name_for(self, handle: str) -> str | None:
        entry = self._by_key.get(lookup_key(handle)) if handle else None
        return entry.name if entry else None

    def label_for(self, handle: str) -> str:
        return self.name_for(handle) or format_handle(handle)

    def handles_for(self, name: str) -> list[str]:
        """Every handle filed under ``name``, in directory order."""
        seen: list[str] = []
        for entry in self.entries:
            if entry.name == name and entry.handle not in seen:
                seen.append(entry.handle)
        return seen

    @classmethod
    def load_csv(cls, path: Path | str) -> "ContactDirectory":
        """Read a ``name,phone,avatar`` export; a missing file yields an empty directory."""
        csv_path = Path(path)
        if not csv_path.exists():
            logger.info("No contacts CSV at %s", csv_path)
            return cls()
        try:
            with csv_path.open(newline="", encoding="utf-8") as f:
                rows = list(csv.DictReader(f))
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise ContactDirectoryError(f"Failed to read contacts CSV {csv_path}: {e}") from e

        directory = cls()
        for row in rows:
            name = (row.get("name") or "").strip()
            handle = (row.get("phone") or "").strip()
            if not name or not handle:
                continue
            directory.add(ContactEntry(name=name, handle=handle, avatar=row.get("avatar") or None))
        logger.info("Loaded %d contacts from %s", len(directory), csv_path)
        return directory

    def save_csv(self, path: Path | str) -> Path:
        csv_path = Path(path)
        try:
            csv_path.parent.mkdir(parents=True, exist_ok=True)
            with csv_path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, quoting=csv.QUOTE_ALL)
                writer.writerow(CSV_FIELDS)
                for entry in self.entries:
                    writer.writerow([entry.name, entry.handle, entry.avatar or ""])
        except OSError as e:
            raise ContactDirectoryError(f"Failed to write contacts CSV {csv_path}: {e}") from e
        logger.info("Saved %d contacts to %s", len(self.entries), csv_path)
        return csv_path
