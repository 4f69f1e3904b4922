# backend/demo_driver/core/errors.py
from __future__ import annotations
from typing import Iterable, List


class SequencerError(Exception):
    """Base class for failures raised by the demo sequence."""


class MissingControlError(SequencerError):
    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = list(missing)
        super().__init__(f"required controls not found: {', '.join(self.missing)}")


class ReadinessTimeout(SequencerError):
    def __init__(self, anchor: str, timeout: float):
        self.anchor = anchor
        self.timeout = timeout
        super().__init__(f"host not ready: #{anchor} did not appear within {timeout:g}s")
