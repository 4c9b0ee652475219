# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Capture session: the presentation layer's step machine.

Decides *when* analysis runs; the detection core never sees it.

    IDLE ──start_camera──▶ SCANNING ──capture──▶ PROCESSING ──complete──▶ DONE
      │  ◀──camera_unavailable──┘                    ▲
      └───────────────capture (upload)───────────────┘

``retake`` returns to IDLE from any step. Each capture gets a ticket;
a result that arrives with an outdated ticket (the user retook the
photo meanwhile) is discarded.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from matchacup.errors import InvalidTransitionError
from matchacup.schema import DetectionResult
from matchacup.detect import DetectorConfig, analyze

logger = logging.getLogger(__name__)

CAMERA_UNAVAILABLE_MESSAGE = "Camera access denied or unavailable. Try uploading a photo."


class CaptureStep(Enum):
    """Where the user is in the capture flow."""
    IDLE = "idle"
    SCANNING = "scanning"      # live camera preview
    PROCESSING = "processing"  # image captured, analysis in flight
    DONE = "done"              # result shown


class CaptureSession:
    """State for one user's capture → analyze → rate flow."""

    def __init__(self) -> None:
        self.step = CaptureStep.IDLE
        self.image: Optional[Any] = None
        self.result: Optional[DetectionResult] = None
        self.error: Optional[str] = None
        self._ticket = 0

    @property
    def ticket(self) -> int:
        """Ticket of the current capture."""
        return self._ticket

    def _require(self, *allowed: CaptureStep, action: str) -> None:
        if self.step not in allowed:
            raise InvalidTransitionError(
                f"Cannot {action} while {self.step.value}"
            )

    def start_camera(self) -> None:
        """Open the live preview."""
        self._require(CaptureStep.IDLE, action="start camera")
        self.error = None
        self.step = CaptureStep.SCANNING

    def camera_unavailable(self, message: str = CAMERA_UNAVAILABLE_MESSAGE) -> None:
        """Camera could not be opened; fall back to upload."""
        self._require(CaptureStep.SCANNING, action="report camera failure")
        self.error = message
        self.step = CaptureStep.IDLE
        logger.info("Camera unavailable: %s", message)

    def capture(self, image: Any) -> int:
        """
        Take a photo (from SCANNING) or accept an upload (from IDLE).

        Returns:
            Ticket identifying this capture
        """
        self._require(CaptureStep.IDLE, CaptureStep.SCANNING, action="capture")
        self._ticket += 1
        self.image = image
        self.result = None
        self.error = None
        self.step = CaptureStep.PROCESSING
        return self._ticket

    def complete(self, ticket: int, result: DetectionResult) -> bool:
        """
        Deliver an analysis result.

        Returns:
            True if the result was accepted, False if it belonged to an
            abandoned capture and was dropped
        """
        if ticket != self._ticket or self.step is not CaptureStep.PROCESSING:
            logger.debug("Dropping stale result for ticket %d", ticket)
            return False
        self.result = result
        self.step = CaptureStep.DONE
        return True

    def retake(self) -> None:
        """Discard the current image/result and start over."""
        self._ticket += 1
        self.image = None
        self.result = None
        self.step = CaptureStep.IDLE

    def analyze_current(self, config: Optional[DetectorConfig] = None) -> DetectionResult:
        """Analyze the captured image synchronously and complete the capture."""
        self._require(CaptureStep.PROCESSING, action="analyze")
        ticket = self._ticket
        result = analyze(self.image, config=config)
        self.complete(ticket, result)
        return result
