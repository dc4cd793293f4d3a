"""Ports for publishing location deltas downstream."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from manifestsync.domain.model import LocationDelta


@runtime_checkable
class LocationSink(Protocol):
    """Apply an additive delta of location pointers. Raises ``SinkError`` on failure.

    Sinks must tolerate receiving a location they already hold.
    """

    def apply_delta(self, delta: LocationDelta) -> None: ...
