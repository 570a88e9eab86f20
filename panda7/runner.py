"""Fixed-step tick loop pairing the sequencer with a steppable simulation."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from panda7 import config as cfg
from panda7.motion.sequencer import (
    BatchFinished,
    Continuing,
    ItemCompleted,
    PickTarget,
    SequenceOutcome,
    Sequencer,
)
from panda7.sim.interface import PhysicsState

logger = logging.getLogger(__name__)


class SteppableSimulation(PhysicsState, Protocol):
    def step(self, dt: float) -> None: ...


@dataclass
class RunReport:
    """What happened during one batch run."""

    events: list[SequenceOutcome] = field(default_factory=list)
    ticks: int = 0
    sim_time: float = 0.0
    started: bool = False

    @property
    def completed_items(self) -> list[int]:
        return [e.item_id for e in self.events if isinstance(e, ItemCompleted)]

    @property
    def finished(self) -> bool:
        return any(isinstance(e, BatchFinished) for e in self.events)


def run_sequence(
    sim: SteppableSimulation,
    sequencer: Sequencer,
    targets: Iterable[int | PickTarget],
    dt: float = cfg.INTERVAL_S,
    max_ticks: int = 1_000_000,
    on_tick: Callable[[int, SequenceOutcome], None] | None = None,
) -> RunReport:
    """
    Start a batch and tick until the sequencer goes idle or ``max_ticks`` is hit.

    Each tick calls ``sequencer.update(dt)`` and then steps the simulation by
    ``dt`` scaled with the sequencer's speed multiplier, so fast-forwarding
    moves the physics and the sequence clock together.
    """
    report = RunReport()
    if not sequencer.start(sim, targets):
        return report
    report.started = True

    while sequencer.running and report.ticks < max_ticks:
        outcome = sequencer.update(dt, sim)
        sim_dt = dt * sequencer.speed_multiplier
        sim.step(sim_dt)
        report.ticks += 1
        report.sim_time += sim_dt
        if not isinstance(outcome, Continuing):
            report.events.append(outcome)
        if on_tick is not None:
            on_tick(report.ticks, outcome)

    if sequencer.running:
        logger.warning("Tick budget of %d exhausted; stopping sequence", max_ticks)
        sequencer.stop()
    logger.info(
        "Run complete: %d item(s) in %d ticks (%.2f s simulated)",
        len(report.completed_items),
        report.ticks,
        report.sim_time,
    )
    return report
