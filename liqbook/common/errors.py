"""Error taxonomy shared by the math and order book cores."""

from __future__ import annotations


class LiqbookError(ValueError):
    """Base class for rejected inputs. Subclasses ValueError so callers can catch either."""

    kind = "error"


class InvalidRange(LiqbookError):
    """Zero-width or otherwise unusable price bounds."""

    kind = "invalid_range"


class OutOfDomain(LiqbookError):
    """Tick or sqrt price outside the supported envelope."""

    kind = "out_of_domain"


class InvalidInput(LiqbookError):
    """Non-positive price, negative amount or malformed order record."""

    kind = "invalid_input"


__all__ = ["LiqbookError", "InvalidRange", "OutOfDomain", "InvalidInput"]
