# backend/demo_driver/cli.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from .core.config import get_settings
from .core.errors import SequencerError
from .core.playwright_host import run_against_visualizer
from .models.schemas import Algorithm, AlgorithmSelection, DemoScript


def _cmd_run(args: argparse.Namespace) -> int:
    settings = get_settings()
    overrides = {}
    if args.url:
        overrides["visualizer_url"] = args.url
    if args.headed:
        overrides["headless"] = False
    if overrides:
        settings = settings.model_copy(update=overrides)

    script = DemoScript(
        selection=AlgorithmSelection(algorithm=Algorithm(args.algorithm), quantum=args.quantum),
        reset_first=not args.no_reset,
    )
    try:
        result = asyncio.run(run_against_visualizer(settings, script=script))
    except SequencerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(result.model_dump(), indent=2))
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("demo_driver.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="demo-driver",
        description="Drive the CPU scheduling visualizer through a scripted demo run.",
    )
    sp = p.add_subparsers(dest="command", required=True)

    run_p = sp.add_parser("run", help="Run the demo once and print the results as JSON")
    run_p.add_argument("--url", help="Visualizer URL (defaults to VISUALIZER_URL)")
    run_p.add_argument("--headed", action="store_true", help="Show the browser window")
    run_p.add_argument(
        "--algorithm",
        choices=[a.value for a in Algorithm],
        default=Algorithm.SRTF.value,
        help="Algorithm to select (default: SRTF)",
    )
    run_p.add_argument("--quantum", type=int, help="Time quantum, only used with RR")
    run_p.add_argument("--no-reset", action="store_true", help="Keep processes already in the visualizer")
    run_p.set_defaults(func=_cmd_run)

    serve_p = sp.add_parser("serve", help="Start the HTTP API")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)
    serve_p.set_defaults(func=_cmd_serve)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
