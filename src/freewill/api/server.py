"""FastAPI server for programmatic priority scoring."""

from __future__ import annotations

import time
from typing import Any

import click
from fastapi import FastAPI, HTTPException

from freewill import __version__
from freewill.colony.snapshot import snapshot_from_dict
from freewill.scoring.considerations import consideration_name
from freewill.scoring.dispatch import DISPATCH_TABLE, considerations_for
from freewill.scoring.pipeline import ScoringPipeline
from freewill.scoring.quantizer import OFF, PriorityScale
from freewill.scoring.settings import DEFAULT_SETTINGS_PATH, load_settings

app = FastAPI(
    title="freewill API",
    version=__version__,
    description="Autonomous work priorities for colony agents",
)

_start_time = time.monotonic()


@app.get("/api/health")
async def health() -> dict[str, Any]:
    """Health check."""
    uptime = time.monotonic() - _start_time
    return {"status": "ok", "version": __version__, "uptime_seconds": round(uptime, 1)}


@app.post("/api/priorities")
async def priorities(request: dict[str, Any]) -> dict[str, Any]:
    """Score every agent in a colony snapshot."""
    snapshot = request.get("snapshot")
    if snapshot is None:
        raise HTTPException(status_code=422, detail="snapshot is required")
    try:
        colony = snapshot_from_dict(snapshot)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err

    settings = load_settings(DEFAULT_SETTINGS_PATH)
    settings.verbose = bool(request.get("verbose", False))
    pipeline = ScoringPipeline(colony.world, settings)
    results = pipeline.evaluate_batch(colony.agents, colony.tasks)

    return {
        "priority_levels": settings.priority_levels,
        "count": len(results),
        "results": [
            {
                "agent_id": r.agent_id,
                "task": r.task,
                "value": round(r.value, 4),
                "level": r.level,
                "enabled": r.enabled,
                "disabled": r.disabled,
                "autonomous": r.autonomous,
                "log": list(r.log),
            }
            for r in results
        ],
    }


@app.get("/api/dispatch/{task}")
async def dispatch(task: str) -> dict[str, Any]:
    """Ordered considerations applied to a task category."""
    return {
        "task": task,
        "default": task not in DISPATCH_TABLE,
        "considerations": [
            {"name": consideration_name(rule), "breaker": getattr(rule, "breaker", None)}
            for rule in considerations_for(task)
        ],
    }


@app.get("/api/levels")
async def levels(levels: int = 4) -> dict[str, Any]:
    """Score bands for each priority level."""
    try:
        scale = PriorityScale(levels)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err
    return {
        "levels": scale.levels,
        "cutoff": scale.cutoff,
        "step_width": scale.step_width,
        "bands": [
            {"level": level, "low": low, "high": high}
            for level in (*range(1, scale.levels + 1), OFF)
            for low, high in (scale.band(level),)
        ],
    }


@click.command()
@click.option("--port", default=3848, help="Port to listen on")
@click.option("--host", default="127.0.0.1", help="Host to bind to")
def main(port: int, host: str) -> None:
    """Start the freewill API server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)
