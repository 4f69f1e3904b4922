# backend/demo_driver/main.py
from __future__ import annotations
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.playwright_host import run_against_visualizer
from .core.sequencer import schedule_auto_run
from .routers import demo

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Scheduler Visualizer Demo Driver", version="1.0.0")


@app.on_event("startup")
async def on_startup() -> None:
    # AUTO_DEMO / ?demo=1 -> one unsolicited run shortly after startup
    app.state.auto_run = schedule_auto_run(
        lambda: run_against_visualizer(settings),
        settings.auto_demo,
        delay=settings.auto_run_delay,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    task = getattr(app.state, "auto_run", None)
    if task is not None and not task.done():
        task.cancel()


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(demo.router)


@app.get("/")
def root():
    return {"message": "Scheduler visualizer demo driver is running!", "visualizer": settings.visualizer_url}


# Optional: allow running via `python -m demo_driver.main` for local dev
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("demo_driver.main:app", host="0.0.0.0", port=8000, reload=True)
