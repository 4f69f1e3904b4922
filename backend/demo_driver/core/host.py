# backend/demo_driver/core/host.py
"""
Contract between the sequencer and the scheduling visualizer page.

The visualizer is a black box: everything goes through the element ids
below and through events dispatched on them, exactly as a user's browser
would deliver them.
"""
from __future__ import annotations
from typing import Any, Callable, List, Optional, Protocol

# Element ids rendered by the visualizer
PROCESS_FORM = "process-form"
ARRIVAL_INPUT = "arrival-time"
BURST_INPUT = "burst-time"
PRIORITY_INPUT = "priority"
ALGORITHM_SELECT = "algorithm-select"
QUANTUM_INPUT = "time-quantum"
SIMULATE_BUTTON = "simulate-btn"
RESET_BUTTON = "reset-btn"
AVG_TAT = "avg-tat"
AVG_WT = "avg-wt"

GANTT_BLOCK_SELECTOR = ".gantt-block"
TOOLTIP_ATTRIBUTE = "data-tooltip"

READY_ANCHOR = PROCESS_FORM
READY_EVENT = "DOMContentLoaded"

# Checked together before the first interaction; reset is optional.
REQUIRED_CONTROLS = (
    PROCESS_FORM,
    ARRIVAL_INPUT,
    BURST_INPUT,
    PRIORITY_INPUT,
    ALGORITHM_SELECT,
    QUANTUM_INPUT,
    SIMULATE_BUTTON,
)

Listener = Callable[..., Any]


class HostElement(Protocol):
    async def set_value(self, value: str) -> None: ...

    async def get_value(self) -> str: ...

    async def dispatch_event(self, event_type: str, bubbles: bool = True, cancelable: bool = False) -> None: ...

    async def click(self) -> None: ...

    async def text_content(self) -> Optional[str]: ...

    async def get_attribute(self, name: str) -> Optional[str]: ...


class HostDocument(Protocol):
    async def get_element_by_id(self, element_id: str) -> Optional[HostElement]: ...

    async def query_selector_all(self, selector: str) -> List[HostElement]: ...

    async def settled(self) -> bool:
        """True once the host's pending async work is observed complete, False if it cannot tell."""
        ...

    def add_event_listener(self, event_type: str, listener: Listener, once: bool = True) -> None: ...

    def remove_event_listener(self, event_type: str, listener: Listener) -> None: ...
