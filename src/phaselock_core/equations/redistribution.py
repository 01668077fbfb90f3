"""Damped load transfer from unhealthy nodes to online ones."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from phaselock_core.equations.angles import clamp_amplitude
from phaselock_core.equations.health import NodeHealth
from phaselock_core.equations.interfaces import SupportsNodeState

__all__ = ["DEFAULT_TRANSFER_DAMPING", "RedistributionResult", "redistribute_load"]


DEFAULT_TRANSFER_DAMPING = 0.1


@dataclass(frozen=True, slots=True)
class RedistributionResult:
    """Amplitudes after a transfer pass and the load that was borrowed."""

    amplitudes: Mapping[str, float]
    torque: float
    per_node: float = 0.0


def redistribute_load(
    nodes: Sequence[SupportsNodeState],
    *,
    damping: float = DEFAULT_TRANSFER_DAMPING,
) -> RedistributionResult:
    """Shift amplitude away from nodes that are not online.

    The summed amplitude of every non-online node is split evenly across the
    online nodes, and each online node receives ``damping`` of its share
    (clamped to ``1.0``).  Without unhealthy nodes the pass is a no-op with
    zero torque.  Without online nodes no amplitude moves but the torque
    still reports the unhealthy load.
    """

    amplitudes = {node.name: float(node.amplitude) for node in nodes}
    online = [node for node in nodes if node.health is NodeHealth.ONLINE]
    unhealthy = [node for node in nodes if node.health is not NodeHealth.ONLINE]

    if not unhealthy:
        return RedistributionResult(MappingProxyType(amplitudes), 0.0)

    degraded_load = float(sum(float(node.amplitude) for node in unhealthy))
    if not online:
        return RedistributionResult(MappingProxyType(amplitudes), degraded_load)

    per_node = degraded_load / len(online)
    for node in online:
        amplitudes[node.name] = clamp_amplitude(
            amplitudes[node.name] + per_node * float(damping)
        )
    return RedistributionResult(MappingProxyType(amplitudes), degraded_load, per_node)
