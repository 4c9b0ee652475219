# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Rating persistence seam.

The detection core does no I/O. Callers pair a DetectionResult with the
user's own score and hand the record to a RatingStore. The remote
datastore is one implementation of the protocol; InMemoryRatingStore is
the reference one.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from matchacup.schema import DetectionResult, RatingRecord

logger = logging.getLogger(__name__)

# Comment box limit in the rating form
MAX_COMMENT_LENGTH = 500

# The star widget rates in half stars
USER_SCORE_STEP = 0.5


class RatingStore(Protocol):
    """Persist and fetch rating records."""

    def insert(self, record: RatingRecord) -> RatingRecord:
        """Store a record and return it as stored (with created_at set)."""
        ...

    def list_recent(self, limit: Optional[int] = None) -> list[RatingRecord]:
        """Return records, newest first."""
        ...


def build_rating_record(
    result: DetectionResult,
    *,
    image_url: str,
    user_score: float,
    comment: Optional[str] = None,
    location: Optional[str] = None,
    user_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> RatingRecord:
    """
    Combine an analysis verdict with the user's rating.

    Args:
        result: The DetectionResult shown to the user
        image_url: Public URL of the uploaded photo
        user_score: User's score on the same scale as ``result.max_score``,
            in half-point steps, greater than 0
        comment: Optional comment, at most 500 characters; blank becomes None
        location: Optional location text; blank becomes None
        user_id: Id of the signed-in user, if any
        created_at: Explicit timestamp; normally left to the store

    Raises:
        ValueError: If the user score or comment is out of bounds
    """
    if not 0 < user_score <= result.max_score:
        raise ValueError(
            f"user_score must be in (0, {result.max_score}], got {user_score}"
        )
    if (user_score / USER_SCORE_STEP) % 1 != 0:
        raise ValueError(
            f"user_score must be a multiple of {USER_SCORE_STEP}, got {user_score}"
        )

    comment = comment.strip() if comment is not None else None
    if comment and len(comment) > MAX_COMMENT_LENGTH:
        raise ValueError(
            f"comment must be at most {MAX_COMMENT_LENGTH} characters, "
            f"got {len(comment)}"
        )
    location = location.strip() if location is not None else None

    return RatingRecord(
        image_url=image_url,
        ai_score=result.color_score,
        user_score=float(user_score),
        comment=comment or None,
        location=location or None,
        created_at=created_at,
        user_id=user_id,
    )


class InMemoryRatingStore:
    """
    RatingStore kept in a Python list.

    Records without ``created_at`` are stamped with the current UTC time
    on insert; naive timestamps are taken to be UTC.
    """

    def __init__(self) -> None:
        self._records: list[RatingRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def insert(self, record: RatingRecord) -> RatingRecord:
        if record.created_at is None:
            record = record.with_created_at(datetime.now(timezone.utc))
        elif record.created_at.tzinfo is None:
            record = record.with_created_at(record.created_at.replace(tzinfo=timezone.utc))
        self._records.append(record)
        logger.info(
            "Stored rating ai_score=%s user_score=%s image=%s",
            record.ai_score,
            record.user_score,
            record.image_url,
        )
        return record

    def list_recent(self, limit: Optional[int] = None) -> list[RatingRecord]:
        # Stable sort keeps insertion order for identical timestamps
        ordered = sorted(
            self._records,
            key=lambda r: r.created_at,
            reverse=True,
        )
        return ordered if limit is None else ordered[:limit]
