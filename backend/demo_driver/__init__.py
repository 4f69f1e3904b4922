from .core.errors import MissingControlError, ReadinessTimeout, SequencerError
from .core.sequencer import DemoSequencer, run_demo, schedule_auto_run
from .models.schemas import (
    NOT_AVAILABLE,
    Algorithm,
    AlgorithmSelection,
    DemoScript,
    Pacing,
    RunResult,
    SchedulingEntityInput,
    TimelineSegment,
)

__all__ = [
    "NOT_AVAILABLE",
    "Algorithm",
    "AlgorithmSelection",
    "DemoScript",
    "DemoSequencer",
    "MissingControlError",
    "Pacing",
    "ReadinessTimeout",
    "RunResult",
    "SchedulingEntityInput",
    "SequencerError",
    "TimelineSegment",
    "run_demo",
    "schedule_auto_run",
]
