"""Phase-lock synchroniser: the stateful engine around the node topology.

All reads and writes go through a single re-entrant lock.  A node update and
the coherence recompute it triggers run inside one critical section, so a
concurrent :meth:`PhaseLockSynchronizer.report` never observes one without
the other.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Mapping

from phaselock_core.equations.coherence import angular_momentum, phase_coherence
from phaselock_core.equations.correction import corrective_phase, correction_target
from phaselock_core.equations.drift import WobbleReport, detect_wobble
from phaselock_core.equations.health import NodeHealth, system_health
from phaselock_core.equations.redistribution import RedistributionResult, redistribute_load

from ..errors import UnknownNodeError, build_error_payload, log_error
from .anchor import AnchorState, CoherenceHistory
from .registry import NodeRegistry, NodeState
from .report import PhaseLockReport
from .settings import EngineSettings

__all__ = ["PhaseLockSynchronizer"]


logger = logging.getLogger(__name__)


class PhaseLockSynchronizer:
    """Track node phases against the anchor and keep the topology coherent.

    Parameters
    ----------
    settings:
        Topology and tuning constants.  Defaults to the four-node topology
        with the anchor at 45°.
    clock:
        Callable returning epoch seconds, used for node and anchor
        timestamps.  Tests inject a deterministic clock.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._clock = clock
        self._lock = threading.RLock()
        self._registry = NodeRegistry(self._settings.nodes, clock=clock)
        self._anchor = AnchorState(phase=float(self._settings.anchor_phase), timestamp=clock())
        self._history = CoherenceHistory(self._settings.history_capacity)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any] | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> "PhaseLockSynchronizer":
        return cls(EngineSettings.from_config(config), clock=clock)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def anchor(self) -> AnchorState:
        with self._lock:
            return self._anchor

    def list_nodes(self) -> tuple[NodeState, ...]:
        with self._lock:
            return self._registry.list_nodes()

    def get_node(self, name: str) -> NodeState:
        with self._lock:
            return self._registry.get_node(name)

    def coherence_history(self) -> tuple[float, ...]:
        with self._lock:
            return self._history.values()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def update_node(
        self,
        name: str,
        phase: float,
        amplitude: float,
        health: NodeHealth | str,
    ) -> NodeState:
        """Record a node observation and bring the anchor up to date.

        Raises :class:`~phaselock.errors.UnknownNodeError` for names outside
        the topology and :class:`~phaselock.errors.InvalidInputError` for
        non-finite numbers or unknown health tags, leaving every piece of
        state untouched.
        """

        with self._lock:
            try:
                self._registry.update_node(name, phase, amplitude, health)
            except UnknownNodeError as exc:
                log_error(
                    build_error_payload(str(exc), category=exc.category, context=exc.context),
                    event="phaselock.unknown_node",
                    logger=logger,
                    level=logging.WARNING,
                )
                raise
            self._redistribute_locked()
            self._recompute_locked()
            return self._registry.get_node(name)

    def recompute(self) -> AnchorState:
        """Refresh anchor coherence and angular momentum from current state."""

        with self._lock:
            return self._recompute_locked()

    def detect_wobble(self) -> WobbleReport:
        with self._lock:
            return self._detect_wobble_locked()

    def redistribute(self) -> RedistributionResult:
        """Run one damped load-transfer pass, then recompute."""

        with self._lock:
            result = self._redistribute_locked()
            self._recompute_locked()
            return result

    def self_correct(self) -> WobbleReport:
        """Nudge drifting nodes toward the quadrature target.

        Returns the wobble scan that decided whether a correction ran.  When
        no wobble is detected nothing changes and no recompute happens.
        """

        with self._lock:
            wobble = self._detect_wobble_locked()
            if not wobble.wobble_detected:
                return wobble

            logger.info(
                "Wobble detected (%.1f°). Self-correcting...",
                wobble.magnitude,
                extra={
                    "event": "phaselock.self_correct",
                    "magnitude": wobble.magnitude,
                    "affected_nodes": list(wobble.affected_nodes),
                },
            )
            target = correction_target(
                self._anchor.phase, offset=self._settings.target_offset
            )
            for name in wobble.affected_nodes:
                node = self._registry.get_node(name)
                self._registry.set_phase(
                    name,
                    corrective_phase(node.phase, target, gain=self._settings.correction_gain),
                )
            self._recompute_locked()
            return wobble

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def report(self) -> PhaseLockReport:
        with self._lock:
            nodes = self._registry.list_nodes()
            health = system_health(
                self._registry.online_count(),
                len(nodes),
                degraded_ratio=self._settings.degraded_ratio,
            )
            return PhaseLockReport(
                anchor=self._anchor,
                nodes=nodes,
                system_health=health,
                coherence_score=self._history.mean(),
                wobble=self._detect_wobble_locked(),
            )

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------
    def _recompute_locked(self) -> AnchorState:
        nodes = self._registry.list_nodes()
        coherence = phase_coherence([node.phase for node in nodes], self._anchor.phase)
        self._anchor = replace(
            self._anchor,
            coherence=coherence,
            angular_momentum=angular_momentum(nodes),
            timestamp=self._clock(),
        )
        self._history.push(coherence)
        return self._anchor

    def _detect_wobble_locked(self) -> WobbleReport:
        return detect_wobble(
            [(node.name, node.phase) for node in self._registry.list_nodes()],
            wobble_threshold=self._settings.wobble_threshold,
            node_threshold=self._settings.node_threshold,
        )

    def _redistribute_locked(self) -> RedistributionResult:
        result = redistribute_load(
            self._registry.list_nodes(), damping=self._settings.transfer_damping
        )
        self._registry.set_amplitudes(result.amplitudes)
        self._anchor = replace(self._anchor, torque_redistribution=result.torque)
        if result.torque > 0.0:
            logger.debug(
                "Redistributed %.3f load units (%.3f per online node)",
                result.torque,
                result.per_node,
                extra={"event": "phaselock.redistribute", "torque": result.torque},
            )
        return result
