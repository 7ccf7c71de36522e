"""
No-decompression limit search and decompression stop planning.

Both searches step a private copy of the tissue model forward one minute at a
time. The model passed in is never modified.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .ceiling import STOP_INCREMENT

logger = logging.getLogger(__name__)

# NDL search horizon (minutes); a result equal to the cap reads "60+"
NDL_CAP = 60

# Shallowest decompression stop (m)
LAST_STOP_DEPTH = 3.0

# Bound on a single hold (minutes); a stop still not cleared by then is an error
MAX_STOP_TIME = 1440

# Default travel rates (m/min)
DESCENT_RATE = 20.0
ASCENT_RATE = 9.0


@dataclass
class DecoStop:
    """A single decompression stop."""
    depth: float         # Stop depth in meters
    duration_min: int    # Duration at this stop in minutes


@dataclass
class DecoSchedule:
    """Decompression schedule from the current tissue state."""
    stops: List[DecoStop] = field(default_factory=list)  # Ordered deepest-first
    tts: float = 0.0                    # Total Time to Surface (minutes)
    total_deco_time: int = 0            # Sum of stop durations (minutes)
    leading_compartment: int = 0        # Compartment setting the ceiling at start
    ceiling_at_start: float = 0.0       # Ceiling depth when planning began (meters)

    @property
    def requires_deco(self) -> bool:
        return len(self.stops) > 0


def no_deco_limit(model) -> int:
    """Minutes the diver can stay at the current depth without deco stops.

    Simulates staying at the current depth in one-minute steps on a copy of
    `model` until the ascent ceiling turns positive. Returns the 0-based step
    at which that happens, or NDL_CAP if it does not within NDL_CAP steps.
    A model that has not been exposed yet (no elapsed time) gets NDL_CAP.

    Args:
        model: TissueModel to extrapolate from (not modified)
    """
    if model.elapsed == 0.0:
        return NDL_CAP

    shadow = model.copy()
    for minute in range(NDL_CAP):
        shadow.stop(1.0)
        if shadow.ascent_ceiling() > 0.0:
            logger.debug(f"NDL reached after {minute} min at {model.depth:.1f}m")
            return minute

    return NDL_CAP


def plan_deco(model, ascent_rate: Optional[float] = None) -> DecoSchedule:
    """Decompression schedule if the ascent started now.

    Starting from the first stop, for each stop depth down to
    LAST_STOP_DEPTH in STOP_INCREMENT steps:
    1. Ascend to the stop (tissues keep exchanging gas on the way)
    2. Skip the stop if the ceiling already cleared the next shallower stop
    3. Otherwise hold in one-minute steps until it does

    Args:
        model: TissueModel to plan from (not modified)
        ascent_rate: Ascent rate in m/min; defaults to model.ascent_rate

    Returns:
        DecoSchedule; its stop list is empty when no decompression is owed.

    Raises:
        ValueError: if ascent_rate is zero
        RuntimeError: if a stop does not clear within model.max_stop_time
    """
    if ascent_rate is None:
        ascent_rate = model.ascent_rate
    if ascent_rate == 0:
        raise ValueError("ascent_rate must be non-zero")

    schedule = DecoSchedule(
        leading_compartment=model.leading_compartment(),
        ceiling_at_start=model.ascent_ceiling(),
    )
    depth = max(model.depth, 0.0)

    first_stop = model.first_deco_stop()
    if first_stop < LAST_STOP_DEPTH:
        schedule.tts = depth / abs(ascent_rate)
        return schedule

    # Shallower than the first stop (e.g. surfaced early): go back down to it
    travel = abs(depth - first_stop) + first_stop
    total_ascent_time = travel / abs(ascent_rate)

    working = model.copy()
    current_stop = first_stop
    while current_stop >= LAST_STOP_DEPTH:
        working.transition(current_stop, ascent_rate)
        next_stop = current_stop - STOP_INCREMENT
        ceiling = working.ascent_ceiling()

        # Off-gassed enough on the way up that this stop is not needed
        if ceiling < next_stop:
            logger.debug(f"Skipping {current_stop:.0f}m stop, ceiling {ceiling:.2f}m")
            current_stop = next_stop
            continue

        stop_time = 0
        while ceiling >= next_stop:
            if stop_time >= model.max_stop_time:
                logger.error(
                    f"Stop at {current_stop:.0f}m not cleared after {stop_time} min, "
                    f"ceiling still {ceiling:.2f}m"
                )
                raise RuntimeError(
                    f"Stop at {current_stop:.0f}m exceeds max_stop_time "
                    f"({model.max_stop_time} min)"
                )
            working.stop(1.0)
            ceiling = working.ascent_ceiling()
            stop_time += 1

        schedule.stops.append(DecoStop(depth=current_stop, duration_min=stop_time))
        current_stop = next_stop

    schedule.total_deco_time = sum(s.duration_min for s in schedule.stops)
    schedule.tts = schedule.total_deco_time + total_ascent_time
    logger.info(
        f"Deco plan: {len(schedule.stops)} stops, "
        f"{schedule.total_deco_time} min deco, TTS {schedule.tts:.1f} min"
    )
    return schedule


def deco_stop_lengths(model, ascent_rate: Optional[float] = None) -> List[int]:
    """Minutes owed at each decompression stop, deepest first."""
    return [stop.duration_min for stop in plan_deco(model, ascent_rate).stops]
