from __future__ import annotations

import enum
from typing import Any


class Channel(enum.Enum):
    """Release track of SDK packages; sdkmanager takes the numeric value."""

    STABLE = (0, "Stable")
    BETA = (1, "Beta")
    DEV = (2, "Dev")
    CANARY = (3, "Canary")

    @property
    def value_id(self) -> int:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    @classmethod
    def from_name(cls, raw: Any) -> "Channel":
        if isinstance(raw, Channel):
            return raw
        text = str(raw or "").strip()
        for ch in cls:
            if text.upper() == ch.name or text == str(ch.value_id):
                return ch
        raise ValueError(f"unknown channel: {raw!r} (expected one of {[c.name.lower() for c in cls]})")
