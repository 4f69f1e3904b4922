# backend/demo_driver/models/schemas.py
from __future__ import annotations
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, model_validator

# Rendered by the sequencer when a summary display is missing or empty
NOT_AVAILABLE = "n/a"

DEFAULT_QUANTUM = 2

# ---------- Scheduling inputs ----------

class SchedulingEntityInput(BaseModel):
    arrival_time: int = Field(ge=0)
    burst_time: int = Field(ge=1)
    priority: int = 0

    def as_form_values(self) -> Tuple[str, str, str]:
        """String renderings in arrival / burst / priority order."""
        return str(self.arrival_time), str(self.burst_time), str(self.priority)


class Algorithm(str, Enum):
    FCFS = "FCFS"
    SJF = "SJF"
    SRTF = "SRTF"
    PRIORITY = "PRIORITY"
    RR = "RR"

    @property
    def requires_quantum(self) -> bool:
        return self is Algorithm.RR


class AlgorithmSelection(BaseModel):
    algorithm: Algorithm = Algorithm.SRTF
    quantum: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def quantum_only_for_rr(self) -> "AlgorithmSelection":
        # the quantum is only ever written when the selection needs it
        if not self.algorithm.requires_quantum:
            self.quantum = None
        elif self.quantum is None:
            self.quantum = DEFAULT_QUANTUM
        return self


def _reference_entities() -> List[SchedulingEntityInput]:
    return [
        SchedulingEntityInput(arrival_time=0, burst_time=5, priority=2),
        SchedulingEntityInput(arrival_time=2, burst_time=3, priority=1),
        SchedulingEntityInput(arrival_time=4, burst_time=1, priority=3),
        SchedulingEntityInput(arrival_time=6, burst_time=2, priority=1),
    ]


class DemoScript(BaseModel):
    """
    The fixed interaction script played against the visualizer.

    Defaults reproduce the reference demonstration: four processes followed
    by an SRTF run. Callers may swap in their own entities or algorithm when
    using the driver as a parameterized smoke test.
    """
    entities: List[SchedulingEntityInput] = Field(default_factory=_reference_entities)
    selection: AlgorithmSelection = Field(default_factory=AlgorithmSelection)
    reset_first: bool = True


class Pacing(BaseModel):
    """Pauses (seconds) between interactions; see core.sequencer._pause."""
    entity_pause: float = Field(default=0.12, ge=0)
    final_entity_pause: float = Field(default=0.2, ge=0)
    settle_delay: float = Field(default=0.3, ge=0)
    observe_host: bool = True
    settle_timeout: float = Field(default=2.0, ge=0)

    def pause_after(self, index: int, total: int) -> float:
        return self.final_entity_pause if index == total - 1 else self.entity_pause


# ---------- Extraction results ----------

class TimelineSegment(BaseModel):
    text: str
    tooltip: str = ""


class RunResult(BaseModel):
    avg_tat: str = NOT_AVAILABLE
    avg_wt: str = NOT_AVAILABLE
    blocks: List[TimelineSegment] = Field(default_factory=list)
