from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class Quote:
    """One stored quote. `date` is the insert time in UTC."""

    id: int
    date: datetime
    author: str
    quote: str

    @classmethod
    def from_row(cls, row) -> "Quote":
        return cls(
            id=int(row["id"]),
            date=datetime.fromtimestamp(int(row["date"]), tz=timezone.utc),
            author=row["author"],
            quote=row["quote"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "author": self.author,
            "quote": self.quote,
        }
