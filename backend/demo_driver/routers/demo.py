# backend/demo_driver/routers/demo.py
from __future__ import annotations
import asyncio
import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import DemoSettings, get_settings
from ..core.errors import MissingControlError, ReadinessTimeout
from ..core.host import HostDocument
from ..core.playwright_host import open_visualizer
from ..core.sequencer import run_demo
from ..models.schemas import DemoScript, Pacing, RunResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/demo", tags=["Demo"])

# The sequence assumes it owns the page; one run at a time per process.
_run_lock = asyncio.Lock()


async def claim_run_slot() -> AsyncIterator[None]:
    if _run_lock.locked():
        raise HTTPException(status_code=409, detail="A demo run is already in progress")
    async with _run_lock:
        yield


async def get_document(settings: DemoSettings = Depends(get_settings)) -> AsyncIterator[HostDocument]:
    async with open_visualizer(settings) as document:
        yield document


def get_pacing() -> Pacing:
    return Pacing()


@router.get("/script", response_model=DemoScript)
def default_script():
    return DemoScript()


@router.post("/run", response_model=RunResult)
async def run(
    script: Optional[DemoScript] = None,
    _slot: None = Depends(claim_run_slot),
    document: HostDocument = Depends(get_document),
    pacing: Pacing = Depends(get_pacing),
    settings: DemoSettings = Depends(get_settings),
):
    """
    Play the demo script against the visualizer and return what it rendered.

    Without a body the reference script (four processes, SRTF) is used.
    """
    try:
        return await run_demo(document, script=script, pacing=pacing, ready_timeout=settings.ready_timeout)
    except MissingControlError as exc:
        raise HTTPException(status_code=422, detail={"message": str(exc), "missing": exc.missing})
    except ReadinessTimeout as exc:
        raise HTTPException(status_code=504, detail=str(exc))
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Demo run failed: {exc}")
