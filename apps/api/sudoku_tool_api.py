# sudoku_tool_api.py
# Optional FastAPI wrapper for the tool functions.
# Run with: uvicorn apps.api.sudoku_tool_api:app --reload
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import List, Optional

from sudoku_workers.config import SolverConfig
from sudoku_workers.sudoku_tools import sanity_check, compute_candidates_tool, solve_tool

app = FastAPI(title="Sudoku Unit-Worker Solver API")

class GridModel(BaseModel):
    grid: List[List[int]]

class SolveRequest(BaseModel):
    grid: List[List[int]]
    transport: Optional[str] = None
    sync: Optional[str] = None
    timeout: Optional[float] = None
    max_passes: Optional[int] = None

@app.post("/sanity_check")
def api_sanity(payload: GridModel):
    return sanity_check(payload.grid)

@app.post("/compute_candidates")
def api_cands(payload: GridModel):
    return compute_candidates_tool(payload.grid)

@app.post("/solve")
def api_solve(req: SolveRequest):
    try:
        config = SolverConfig.from_env().replace(
            transport=req.transport,
            sync=req.sync,
            message_timeout=req.timeout,
            barrier_timeout=req.timeout,
            max_passes=req.max_passes,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return solve_tool(req.grid, config)
