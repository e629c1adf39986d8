"""Who-sent-it filter accepted by word, emoji, search and reaction queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from chat_stats.exceptions import MalformedInputError


class SenderKind(Enum):
    EVERYONE = "everyone"
    ME = "me"
    OTHERS = "others"
    HANDLE = "handle"


# Raw values used by callers, mapped onto kinds. Any other string is a handle.
_ALIASES = {
    "both": SenderKind.EVERYONE,
    "you": SenderKind.ME,
    "them": SenderKind.OTHERS,
    "all": SenderKind.OTHERS,
}


@dataclass(frozen=True)
class SenderFilter:
    kind: SenderKind
    handle: str | None = None

    @classmethod
    def everyone(cls) -> "SenderFilter":
        return cls(SenderKind.EVERYONE)

    @classmethod
    def me(cls) -> "SenderFilter":
        return cls(SenderKind.ME)

    @classmethod
    def others(cls) -> "SenderFilter":
        return cls(SenderKind.OTHERS)

    @classmethod
    def from_handle(cls, handle: str) -> "SenderFilter":
        if not handle:
            raise MalformedInputError("Sender handle must be a non-empty string")
        return cls(SenderKind.HANDLE, handle)

    @classmethod
    def parse(cls, value: "SenderFilter | str | None") -> "SenderFilter":
        """Accept a SenderFilter, None, ``both``/``you``/``them``/``all`` or a handle."""
        if isinstance(value, SenderFilter):
            return value
        if value is None or value == "":
            return cls.everyone()
        if not isinstance(value, str):
            raise MalformedInputError(f"Unsupported sender filter: {value!r}")
        kind = _ALIASES.get(value)
        if kind is not None:
            return cls(kind)
        return cls.from_handle(value)

    @property
    def is_everyone(self) -> bool:
        return self.kind is SenderKind.EVERYONE

    @property
    def is_me(self) -> bool:
        return self.kind is SenderKind.ME

    @property
    def is_others(self) -> bool:
        return self.kind is SenderKind.OTHERS

    @property
    def is_handle(self) -> bool:
        return self.kind is SenderKind.HANDLE
