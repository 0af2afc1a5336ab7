"""streambound FastAPI server: REST API over the fusion checker."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from streambound.api.dispatch import dispatch as api_dispatch

app = FastAPI(title="streambound", version="0.1.0")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class CheckRequest(BaseModel):
    upstream: str
    downstream: str

class OptimizeRequest(BaseModel):
    operators: list[str] = Field(default_factory=list)

class BoundRequest(BaseModel):
    bounds: list[int | str] = Field(default_factory=list)


def _respond(result: dict):
    if "error" in result:
        return JSONResponse(status_code=400, content=result)
    return result


# ---------------------------------------------------------------------------
# API endpoints
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def api_health():
    return {"status": "ok"}


@app.get("/api/operators")
async def api_operators():
    return _respond(api_dispatch({"action": "list_ops"}))


@app.post("/api/check")
async def api_check(req: CheckRequest):
    return _respond(api_dispatch({
        "action": "check",
        "upstream": req.upstream,
        "downstream": req.downstream,
    }))


@app.post("/api/optimize")
async def api_optimize(req: OptimizeRequest):
    return _respond(api_dispatch({"action": "optimize", "operators": req.operators}))


@app.post("/api/bound")
async def api_bound(req: BoundRequest):
    return _respond(api_dispatch({"action": "bound", "bounds": req.bounds}))
