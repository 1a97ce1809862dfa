"""
timeline.py

Moves tracked entities along a map curve over time.

SIMULATION Layer
----------------
Each tracked entity carries a timeline position ``t`` in the curve's
parameter domain and a traversal ``speed``. Every tick::

    t <- (t + speed * dt * speed_scale) mod domain_end

and the entity's position is the curve evaluated at ``t``.

Notes
-----
- Synchronous stepping only; the caller owns dt.
- An entity whose position cannot be evaluated keeps its previous
  position and is reported in ``last_failures``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Final, Hashable, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from arena_map.core.curve import CubicCurve
from arena_map.core.errors import CurveEvaluationError


logger = logging.getLogger(__name__)

FloatArray = NDArray[np.float64]

# Observed multiplier on speed * dt; kept as a tunable constant.
TIMELINE_SPEED_SCALE: Final[float] = 0.5


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class SamplerConfig:
    """
    Timeline sampler configuration.

    Parameters
    ----------
    speed_scale : float
        Multiplier applied to ``speed * dt`` when advancing ``t``.
    """

    speed_scale: float = TIMELINE_SPEED_SCALE


@dataclass
class TimelinePosition:
    """
    Progress of one entity along the curve.

    Parameters
    ----------
    t : float
        Curve parameter in ``[0, domain_end)``.
    speed : float
        Parameter units per second before scaling. May be negative.
    """

    t: float = 0.0
    speed: float = 1.0


def advance_t(
    t: float,
    speed: float,
    dt: float,
    domain_end: float,
    speed_scale: float = TIMELINE_SPEED_SCALE,
) -> float:
    """
    Pure timeline update rule.

    Raises
    ------
    CurveEvaluationError
        If ``domain_end`` is not positive.
    """
    if domain_end <= 0.0:
        raise CurveEvaluationError("cannot advance along an empty curve domain")
    result = float((t + speed * dt * speed_scale) % domain_end)
    # Float modulo of a tiny negative value rounds up to domain_end.
    if result >= domain_end:
        result = 0.0
    return result


# ================================================================
# SAMPLER
# ================================================================


class TimelineSampler:
    """
    Tracks timeline positions per entity and samples them from a curve.

    Parameters
    ----------
    config : SamplerConfig | None
        Sampler configuration. If None, defaults are used.
    """

    def __init__(self, config: Optional[SamplerConfig] = None) -> None:
        self._config: SamplerConfig = config if config is not None else SamplerConfig()
        self._timelines: Dict[Hashable, TimelinePosition] = {}
        self._positions: Dict[Hashable, FloatArray] = {}
        self._last_failures: Tuple[Hashable, ...] = ()

    @property
    def config(self) -> SamplerConfig:
        return self._config

    @property
    def last_failures(self) -> Tuple[Hashable, ...]:
        """
        Entities whose position could not be evaluated on the last tick.
        """
        return self._last_failures

    # ------------------------------------------------------------

    def track(
        self,
        entity: Hashable,
        timeline: Optional[TimelinePosition] = None,
        position: Optional[FloatArray] = None,
    ) -> None:
        """
        Start tracking ``entity``.

        Parameters
        ----------
        entity : Hashable
            Caller-chosen entity identifier.
        timeline : TimelinePosition | None
            Starting progress and speed; defaults when None.
        position : NDArray[np.float64] | None
            Placement kept until the first successful sample.
        """
        self._timelines[entity] = timeline if timeline is not None else TimelinePosition()
        if position is not None:
            self._positions[entity] = np.asarray(position, dtype=np.float64)

    def untrack(self, entity: Hashable) -> None:
        self._timelines.pop(entity, None)
        self._positions.pop(entity, None)

    def timeline(self, entity: Hashable) -> TimelinePosition:
        return self._timelines[entity]

    def position(self, entity: Hashable) -> Optional[FloatArray]:
        return self._positions.get(entity)

    def __contains__(self, entity: object) -> bool:
        return entity in self._timelines

    def __len__(self) -> int:
        return len(self._timelines)

    # ------------------------------------------------------------

    def tick(self, curve: CubicCurve, dt: float) -> Dict[Hashable, FloatArray]:
        """
        Advance every tracked entity by ``dt`` seconds.

        Parameters
        ----------
        curve : CubicCurve
            Curve of the current map.
        dt : float
            Elapsed time in seconds.

        Returns
        -------
        dict
            Entity id to position for every entity that has one.
        """
        failures = []
        for entity, timeline in self._timelines.items():
            try:
                timeline.t = advance_t(
                    timeline.t,
                    timeline.speed,
                    dt,
                    curve.domain_end,
                    self._config.speed_scale,
                )
                self._positions[entity] = curve.position(timeline.t)
            except CurveEvaluationError as err:
                failures.append(entity)
                logger.warning("Could not sample timeline position for %r: %s", entity, err)

        self._last_failures = tuple(failures)
        return dict(self._positions)
