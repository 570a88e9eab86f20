"""
Pick-and-place motion pipeline.

- Phase table: per-phase duration, Cartesian target rule and gripper command
- Sequencer: tick-driven state machine over the phase table
- JointPath: smoothstep interpolation between two joint vectors
"""

from panda7.motion.phases import PHASE_TABLE, Phase, PhaseDescriptor, drop_geometry, stack_cell
from panda7.motion.sequencer import (
    BatchFinished,
    Continuing,
    Idle,
    ItemCompleted,
    PickTarget,
    SequenceOutcome,
    Sequencer,
    SequencerState,
)
from panda7.motion.trajectory import JointPath, ease_out_cubic, smoothstep

__all__ = [
    # Phase table
    "Phase",
    "PhaseDescriptor",
    "PHASE_TABLE",
    "drop_geometry",
    "stack_cell",
    # Sequencer
    "Sequencer",
    "SequencerState",
    "PickTarget",
    "SequenceOutcome",
    "Idle",
    "Continuing",
    "ItemCompleted",
    "BatchFinished",
    # Interpolation
    "JointPath",
    "smoothstep",
    "ease_out_cubic",
]
