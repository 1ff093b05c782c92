from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ConversationTurn:
    role: str  # "user" | "assistant"
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unsupported conversation role: {self.role!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversationTurn":
        return cls(role=str(data.get("role", "")), content=str(data.get("content") or ""))

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}
