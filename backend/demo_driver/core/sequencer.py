# backend/demo_driver/core/sequencer.py
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from ..models.schemas import (
    DEFAULT_QUANTUM,
    NOT_AVAILABLE,
    Algorithm,
    DemoScript,
    Pacing,
    RunResult,
    SchedulingEntityInput,
    TimelineSegment,
)
from . import host
from .errors import MissingControlError, ReadinessTimeout
from .host import HostDocument, HostElement

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_READY_TIMEOUT = 10.0


# =============================================================
# Readiness Gate
# =============================================================

async def wait_until_ready(document: HostDocument, timeout: float = DEFAULT_READY_TIMEOUT) -> None:
    """
    Return once the visualizer's form exists, or after the page reports
    DOMContentLoaded. Raises ReadinessTimeout when neither happens in time.
    """
    loop = asyncio.get_running_loop()
    loaded = loop.create_future()

    def _on_loaded(*_args) -> None:
        if not loaded.done():
            loaded.set_result(None)

    # listen first so a load firing during the anchor lookup is not missed
    document.add_event_listener(host.READY_EVENT, _on_loaded, once=True)
    try:
        if await document.get_element_by_id(host.READY_ANCHOR) is not None:
            return
        try:
            await asyncio.wait_for(loaded, timeout)
        except asyncio.TimeoutError:
            raise ReadinessTimeout(host.READY_ANCHOR, timeout) from None
    finally:
        document.remove_event_listener(host.READY_EVENT, _on_loaded)


# =============================================================
# Controls
# =============================================================

@dataclass
class Controls:
    form: HostElement
    arrival: HostElement
    burst: HostElement
    priority: HostElement
    algorithm: HostElement
    quantum: HostElement
    simulate: HostElement
    reset: Optional[HostElement] = None


async def resolve_controls(document: HostDocument) -> Controls:
    found: Dict[str, Optional[HostElement]] = {}
    for element_id in host.REQUIRED_CONTROLS:
        found[element_id] = await document.get_element_by_id(element_id)

    missing = [element_id for element_id, el in found.items() if el is None]
    if missing:
        logger.warning("Demo: required elements not found: %s", ", ".join(missing))
        raise MissingControlError(missing)

    return Controls(
        form=found[host.PROCESS_FORM],
        arrival=found[host.ARRIVAL_INPUT],
        burst=found[host.BURST_INPUT],
        priority=found[host.PRIORITY_INPUT],
        algorithm=found[host.ALGORITHM_SELECT],
        quantum=found[host.QUANTUM_INPUT],
        simulate=found[host.SIMULATE_BUTTON],
        reset=await document.get_element_by_id(host.RESET_BUTTON),
    )


# =============================================================
# Sequencer
# =============================================================

class DemoSequencer:
    """Plays a DemoScript against the visualizer and reads the results back."""

    def __init__(
        self,
        document: HostDocument,
        script: Optional[DemoScript] = None,
        pacing: Optional[Pacing] = None,
        ready_timeout: float = DEFAULT_READY_TIMEOUT,
        sleep: Sleep = asyncio.sleep,
    ):
        self.document = document
        self.script = script or DemoScript()
        self.pacing = pacing or Pacing()
        self.ready_timeout = ready_timeout
        self._sleep = sleep

    async def _pause(self, seconds: float) -> None:
        # prefer an observed completion from the host, the fixed pause is the fallback
        if self.pacing.observe_host:
            try:
                if await asyncio.wait_for(self.document.settled(), self.pacing.settle_timeout):
                    return
            except asyncio.TimeoutError:
                logger.debug("host did not report settled within %.2fs", self.pacing.settle_timeout)
        await self._sleep(seconds)

    # ---------- Interaction Driver ----------

    async def add_entity(self, controls: Controls, entity: SchedulingEntityInput) -> None:
        arrival, burst, priority = entity.as_form_values()
        await controls.arrival.set_value(arrival)
        await controls.burst.set_value(burst)
        await controls.priority.set_value(priority)
        await controls.form.dispatch_event("submit", bubbles=True, cancelable=True)

    async def select_algorithm(self, controls: Controls) -> None:
        selection = self.script.selection
        await controls.algorithm.set_value(selection.algorithm.value)
        await controls.algorithm.dispatch_event("change", bubbles=True)

        # the host may refuse an option, so trust what the select now holds
        if await controls.algorithm.get_value() == Algorithm.RR.value:
            await controls.quantum.set_value(str(selection.quantum or DEFAULT_QUANTUM))
            await controls.quantum.dispatch_event("input", bubbles=True)

    async def drive(self, controls: Controls) -> None:
        if self.script.reset_first and controls.reset is not None:
            await controls.reset.click()

        entities = self.script.entities
        for index, entity in enumerate(entities):
            await self.add_entity(controls, entity)
            await self._pause(self.pacing.pause_after(index, len(entities)))

        await self.select_algorithm(controls)

    # ---------- Run Trigger ----------

    async def trigger(self, controls: Controls) -> None:
        await controls.simulate.click()
        await self._pause(self.pacing.settle_delay)

    # ---------- Result Extractor ----------

    async def _summary_text(self, element_id: str) -> str:
        el = await self.document.get_element_by_id(element_id)
        if el is None:
            return NOT_AVAILABLE
        return await el.text_content() or NOT_AVAILABLE

    async def extract(self) -> RunResult:
        avg_tat = await self._summary_text(host.AVG_TAT)
        avg_wt = await self._summary_text(host.AVG_WT)
        logger.info("Demo: Simulation complete. Avg TAT: %s Avg WT: %s", avg_tat, avg_wt)

        blocks: List[TimelineSegment] = []
        for block in await self.document.query_selector_all(host.GANTT_BLOCK_SELECTOR):
            text = (await block.text_content() or "").strip()
            tooltip = await block.get_attribute(host.TOOLTIP_ATTRIBUTE) or ""
            blocks.append(TimelineSegment(text=text, tooltip=tooltip))
        logger.debug("Demo: Gantt blocks: %s", [b.model_dump() for b in blocks])

        return RunResult(avg_tat=avg_tat, avg_wt=avg_wt, blocks=blocks)

    async def run(self) -> RunResult:
        await wait_until_ready(self.document, self.ready_timeout)
        controls = await resolve_controls(self.document)
        await self.drive(controls)
        await self.trigger(controls)
        return await self.extract()


# =============================================================
# Entry Point / Auto-run Hook
# =============================================================

async def run_demo(
    document: HostDocument,
    script: Optional[DemoScript] = None,
    pacing: Optional[Pacing] = None,
    ready_timeout: float = DEFAULT_READY_TIMEOUT,
    sleep: Sleep = asyncio.sleep,
) -> RunResult:
    """Run the whole demo sequence once; failures are logged and re-raised."""
    sequencer = DemoSequencer(document, script=script, pacing=pacing, ready_timeout=ready_timeout, sleep=sleep)
    try:
        result = await sequencer.run()
    except Exception:
        logger.exception("Demo failed")
        raise
    logger.info("Demo finished: %s", result.model_dump())
    return result


def schedule_auto_run(
    invoke: Callable[[], Awaitable[object]],
    enabled: bool,
    delay: float = 0.3,
    sleep: Sleep = asyncio.sleep,
) -> Optional[asyncio.Task]:
    """
    Fire ``invoke`` once after ``delay`` seconds when ``enabled``.

    Nobody awaits the result, so failures are logged and dropped here.
    Must be called from inside a running event loop.
    """
    if not enabled:
        return None

    async def _auto_run() -> None:
        await sleep(delay)
        try:
            await invoke()
        except Exception as exc:
            logger.warning("Auto-run demo failed: %s", exc)

    return asyncio.get_running_loop().create_task(_auto_run())
