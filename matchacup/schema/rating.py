# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
RatingRecord: one saved rating, as stored by the ratings datastore.

The analysis core never builds these. Callers combine a DetectionResult
with the user's own score (see ``matchacup.runtime.ratings``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

_FRACTION_RE = re.compile(r"\.(\d+)")
_SHORT_OFFSET_RE = re.compile(r"(:\d{2}(?:\.\d+)?[+-]\d{2})$")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a database timestamp string.

    Accepts what Postgres emits and ``datetime.fromisoformat`` rejects on
    older interpreters: a ``Z`` suffix, an hour-only offset (``+00``) and
    fractional seconds that are not 3 or 6 digits long.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _SHORT_OFFSET_RE.sub(r"\1:00", text)
    text = _FRACTION_RE.sub(
        lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1
    )
    return datetime.fromisoformat(text)


@dataclass(frozen=True, slots=True)
class RatingRecord:
    """
    A user rating attached to an analyzed photo.

    Attributes:
        image_url: Public URL of the uploaded photo
        ai_score: color_score from the DetectionResult
        user_score: The user's own score, same scale as ai_score
        comment: Optional free-text comment
        location: Optional place where the matcha was had
        created_at: Timestamp assigned by the store
        user_id: Id of the signed-in user, if any
    """
    image_url: str
    ai_score: float
    user_score: float
    comment: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.image_url:
            raise ValueError("image_url cannot be empty")
        if self.ai_score < 0:
            raise ValueError(f"ai_score must be >= 0, got {self.ai_score}")
        if self.user_score < 0:
            raise ValueError(f"user_score must be >= 0, got {self.user_score}")

    def with_created_at(self, created_at: datetime) -> RatingRecord:
        """Return a copy stamped with created_at."""
        return replace(self, created_at=created_at)

    def to_row(self) -> dict:
        """Serialize to a ``matcha_ratings`` table row."""
        return {
            "image_url": self.image_url,
            "ai_score": self.ai_score,
            "user_score": self.user_score,
            "comment": self.comment,
            "location": self.location,
            "user_id": self.user_id,
            "created_at": (
                self.created_at.isoformat() if self.created_at is not None else None
            ),
        }

    @classmethod
    def from_row(cls, row: dict) -> RatingRecord:
        """Deserialize from a ``matcha_ratings`` table row."""
        created_at = row.get("created_at")
        if isinstance(created_at, str):
            created_at = parse_timestamp(created_at)
        return cls(
            image_url=row["image_url"],
            ai_score=float(row["ai_score"]),
            user_score=float(row["user_score"]),
            comment=row.get("comment"),
            location=row.get("location"),
            created_at=created_at,
            user_id=row.get("user_id"),
        )
