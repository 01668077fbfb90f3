"""Closed health enumerations and the derived system health."""

from __future__ import annotations

from enum import Enum

__all__ = ["NodeHealth", "SystemHealth", "system_health"]


class NodeHealth(str, Enum):
    """Liveness reported for a single worker node."""

    ONLINE = "online"
    DEGRADED = "degraded"
    OFFLINE = "offline"

    @classmethod
    def coerce(cls, value: "NodeHealth | str") -> "NodeHealth":
        """Return the member matching ``value`` (case-insensitive for strings)."""

        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class SystemHealth(str, Enum):
    """Aggregate health derived from how many nodes are online."""

    OPTIMAL = "optimal"
    DEGRADED = "degraded"
    CRITICAL = "critical"


def system_health(
    online_count: int, total_count: int, *, degraded_ratio: float = 0.5
) -> SystemHealth:
    """Classify the topology from its online node count.

    All nodes online yields :attr:`SystemHealth.OPTIMAL`; at least
    ``degraded_ratio`` of the topology online yields
    :attr:`SystemHealth.DEGRADED`; anything less is critical.
    """

    if total_count <= 0:
        raise ValueError("total_count must be positive")
    online = max(0, min(int(online_count), int(total_count)))
    if online == total_count:
        return SystemHealth.OPTIMAL
    if online >= float(degraded_ratio) * total_count:
        return SystemHealth.DEGRADED
    return SystemHealth.CRITICAL
