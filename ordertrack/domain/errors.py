"""
Domain errors raised by the order state machine and lookup helpers.

Filter, sort and aggregate functions never raise these; empty input
degrades to empty or zero results.
"""

from __future__ import annotations


class OrderTrackError(ValueError):
    """Base class for domain errors."""

    code = "order_track_error"


class InvalidTransitionError(OrderTrackError):
    """Any mutation attempted on an archived order."""

    code = "invalid_transition"


class NotArchivableError(OrderTrackError):
    """Archival requested for an order that is not done or cancelled."""

    code = "not_archivable"


class NotFoundError(OrderTrackError):
    """Order or expense id absent from the supplied collection."""

    code = "not_found"

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")
