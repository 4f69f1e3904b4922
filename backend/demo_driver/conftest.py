# backend/demo_driver/conftest.py
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pytest

from .core import host
from .models.schemas import Algorithm, Pacing


@dataclass
class DispatchedEvent:
    target: str
    event_type: str
    bubbles: bool
    cancelable: bool


class FakeElement:
    def __init__(self, page: "FakeVisualizer", element_id: str, text: Optional[str] = None,
                 attributes: Optional[Dict[str, str]] = None, options: Optional[Iterable[str]] = None):
        self.page = page
        self.id = element_id
        self.value = ""
        self.text = text
        self.attributes = dict(attributes or {})
        self.options = list(options) if options is not None else None

    async def set_value(self, value: str) -> None:
        # a <select> silently refuses values it has no option for
        if self.options is not None and value not in self.options:
            value = ""
        self.value = value
        self.page.log.append(("set", self.id, value))

    async def get_value(self) -> str:
        return self.value

    async def dispatch_event(self, event_type: str, bubbles: bool = True, cancelable: bool = False) -> None:
        self.page.events.append(DispatchedEvent(self.id, event_type, bubbles, cancelable))
        self.page.log.append(("event", self.id, event_type))
        self.page.handle(self, event_type)

    async def click(self) -> None:
        self.page.log.append(("click", self.id))
        self.page.handle(self, "click")

    async def text_content(self) -> Optional[str]:
        return self.text

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)


class FakeVisualizer:
    """
    In-memory stand-in for the scheduling visualizer page.

    Submitting the form adds a process, reset clears them and simulate
    renders one first-come-first-served block per process.
    """

    def __init__(self, loaded: bool = True, omit: Iterable[str] = (), algorithms: Optional[Iterable[str]] = None,
                 render: bool = True, fail_on: Optional[str] = None):
        self.loaded = loaded
        self.omit = set(omit)
        self.render = render
        self.fail_on = fail_on
        self.settle_result = False
        self.settle_hangs = False
        self.settle_calls = 0

        self.log: List[Tuple[Any, ...]] = []
        self.events: List[DispatchedEvent] = []
        self.listeners: Dict[str, List[Tuple[Callable[..., Any], bool]]] = {}

        self.processes: List[Tuple[int, int, int]] = []
        self.submissions: List[Tuple[int, Tuple[int, int, int]]] = []
        self.blocks: List[FakeElement] = []

        options = list(algorithms) if algorithms is not None else [a.value for a in Algorithm]
        self.elements: Dict[str, FakeElement] = {}
        for element_id in (*host.REQUIRED_CONTROLS, host.RESET_BUTTON, host.AVG_TAT, host.AVG_WT):
            if element_id in self.omit:
                continue
            el = FakeElement(self, element_id, options=options if element_id == host.ALGORITHM_SELECT else None)
            self.elements[element_id] = el

    # ---------- host contract ----------

    async def get_element_by_id(self, element_id: str) -> Optional[FakeElement]:
        if not self.loaded:
            return None
        return self.elements.get(element_id)

    async def query_selector_all(self, selector: str) -> List[FakeElement]:
        assert selector == host.GANTT_BLOCK_SELECTOR
        return list(self.blocks)

    async def settled(self) -> bool:
        self.settle_calls += 1
        if self.settle_hangs:
            await asyncio.sleep(3600)
        return self.settle_result

    def add_event_listener(self, event_type: str, listener: Callable[..., Any], once: bool = True) -> None:
        self.listeners.setdefault(event_type, []).append((listener, once))

    def remove_event_listener(self, event_type: str, listener: Callable[..., Any]) -> None:
        self.listeners[event_type] = [(cb, once) for cb, once in self.listeners.get(event_type, []) if cb is not listener]

    # ---------- page behaviour ----------

    def listener_count(self, event_type: str) -> int:
        return len(self.listeners.get(event_type, []))

    def finish_loading(self) -> None:
        self.loaded = True
        for cb, once in list(self.listeners.get(host.READY_EVENT, [])):
            if once:
                self.remove_event_listener(host.READY_EVENT, cb)
            cb()

    def handle(self, el: FakeElement, event_type: str) -> None:
        if self.fail_on == el.id:
            raise RuntimeError(f"visualizer crashed handling {event_type} on #{el.id}")
        if el.id == host.PROCESS_FORM and event_type == "submit":
            entity = (
                int(self.elements[host.ARRIVAL_INPUT].value),
                int(self.elements[host.BURST_INPUT].value),
                int(self.elements[host.PRIORITY_INPUT].value),
            )
            self.submissions.append((len(self.processes), entity))
            self.processes.append(entity)
        elif el.id == host.RESET_BUTTON and event_type == "click":
            self.processes.clear()
            self.blocks = []
        elif el.id == host.SIMULATE_BUTTON and event_type == "click" and self.render:
            self._render()

    def _render(self) -> None:
        now, tat, wt = 0, [], []
        self.blocks = []
        order = sorted(enumerate(self.processes, start=1), key=lambda item: item[1][0])
        for pid, (arrival, burst, _priority) in order:
            start = max(now, arrival)
            now = start + burst
            tat.append(now - arrival)
            wt.append(start - arrival)
            self.blocks.append(FakeElement(self, f"block-{pid}", text=f" P{pid} ",
                                           attributes={host.TOOLTIP_ATTRIBUTE: f"P{pid}: {start}-{now}"}))
        if host.AVG_TAT in self.elements and tat:
            self.elements[host.AVG_TAT].text = f"{sum(tat) / len(tat):.2f}"
        if host.AVG_WT in self.elements and wt:
            self.elements[host.AVG_WT].text = f"{sum(wt) / len(wt):.2f}"


@pytest.fixture
def visualizer() -> FakeVisualizer:
    return FakeVisualizer()


@pytest.fixture
def record_sleep(visualizer):
    async def _sleep(seconds: float) -> None:
        visualizer.log.append(("sleep", seconds))

    return _sleep


@pytest.fixture
def no_pauses() -> Pacing:
    return Pacing(entity_pause=0, final_entity_pause=0, settle_delay=0, observe_host=False)
