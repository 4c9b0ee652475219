# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""
Exception hierarchy.

"No cup found" is a valid result, never an exception. These types are
reserved for input the analysis cannot run on at all.
"""


class MatchaCupError(Exception):
    """Base class for all matchacup errors."""


class InvalidImageError(MatchaCupError, ValueError):
    """Image input is missing, empty, zero-sized or has the wrong layout."""


class ImageDecodeError(MatchaCupError):
    """Encoded image data could not be decoded into pixels."""


class InvalidTransitionError(MatchaCupError, RuntimeError):
    """A capture session was asked to move to a step it cannot reach."""
