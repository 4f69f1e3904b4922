# backend/demo_driver/core/playwright_host.py
"""
Host contract backed by a real browser page (Playwright, async API).

Values are assigned straight to ``el.value`` in page context and events
are delivered with ``dispatch_event`` so the visualizer's own handlers do
the work, the same as when a person fills in the form.
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Tuple

from playwright.async_api import ElementHandle, Page, async_playwright

from ..models.schemas import DemoScript, Pacing, RunResult
from .config import DemoSettings, strip_demo_flag
from .host import Listener
from .sequencer import run_demo

logger = logging.getLogger(__name__)

# Playwright's page event names differ from the DOM ones
_PAGE_EVENTS = {
    "DOMContentLoaded": "domcontentloaded",
    "load": "load",
}


class PlaywrightElement:
    def __init__(self, handle: ElementHandle):
        self.handle = handle

    async def set_value(self, value: str) -> None:
        await self.handle.evaluate("(el, v) => { el.value = v; }", value)

    async def get_value(self) -> str:
        return await self.handle.evaluate("(el) => el.value ?? ''")

    async def dispatch_event(self, event_type: str, bubbles: bool = True, cancelable: bool = False) -> None:
        await self.handle.dispatch_event(event_type, {"bubbles": bubbles, "cancelable": cancelable})

    async def click(self) -> None:
        # the element's own click(), not a pointer click: no actionability waits
        await self.handle.evaluate("(el) => el.click()")

    async def text_content(self) -> Optional[str]:
        return await self.handle.text_content()

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.handle.get_attribute(name)


class PlaywrightDocument:
    def __init__(self, page: Page, settle_expression: Optional[str] = None):
        self.page = page
        self.settle_expression = settle_expression
        self._handlers: Dict[Tuple[str, Listener], Listener] = {}

    async def get_element_by_id(self, element_id: str) -> Optional[PlaywrightElement]:
        handle = await self.page.query_selector(f"[id='{element_id}']")
        return PlaywrightElement(handle) if handle is not None else None

    async def query_selector_all(self, selector: str) -> List[PlaywrightElement]:
        return [PlaywrightElement(h) for h in await self.page.query_selector_all(selector)]

    async def settled(self) -> bool:
        if not self.settle_expression:
            return False
        # unbounded here; the sequencer cancels it after Pacing.settle_timeout
        await self.page.wait_for_function(self.settle_expression, timeout=0)
        return True

    def add_event_listener(self, event_type: str, listener: Listener, once: bool = True) -> None:
        name = _PAGE_EVENTS.get(event_type, event_type)

        def _handler(*args) -> None:
            if once:
                self.remove_event_listener(event_type, listener)
            listener(*args)

        self._handlers[(name, listener)] = _handler
        self.page.on(name, _handler)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        name = _PAGE_EVENTS.get(event_type, event_type)
        handler = self._handlers.pop((name, listener), None)
        if handler is not None:
            self.page.remove_listener(name, handler)


@asynccontextmanager
async def open_visualizer(settings: DemoSettings) -> AsyncIterator[PlaywrightDocument]:
    """Launch Chromium on the visualizer page; the browser is always closed on exit."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=settings.headless)
        try:
            page = await browser.new_page()
            # the page must not start its own demo next to ours
            url = strip_demo_flag(settings.visualizer_url)
            logger.info("opening visualizer at %s", url)
            # "commit" hands control back early; the readiness gate covers the rest
            await page.goto(url, wait_until="commit")
            yield PlaywrightDocument(page, settle_expression=settings.settle_expression)
        finally:
            await browser.close()


async def run_against_visualizer(
    settings: DemoSettings,
    script: Optional[DemoScript] = None,
    pacing: Optional[Pacing] = None,
) -> RunResult:
    async with open_visualizer(settings) as document:
        return await run_demo(document, script=script, pacing=pacing, ready_timeout=settings.ready_timeout)
