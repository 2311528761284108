"""FastAPI web adapter for the CHIP-8 virtual machine."""

import base64
import binascii
import os
import sys
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chip8 import run_rom, RunOptions, Quirks
from chip8.loader import MAX_ROM_SIZE


# Request/Response models
class QuirksModel(BaseModel):
    shift_uses_vy: bool = False
    load_store_increments_i: bool = False
    jump_uses_vx: bool = False
    logic_resets_vf: bool = False


class RunOptionsModel(BaseModel):
    max_steps: int = Field(default=10000, ge=1, le=1000000)
    cycles_per_frame: int = Field(default=10, ge=1, le=10000)
    keys: list[int] = Field(default_factory=list)
    quirks: QuirksModel = Field(default_factory=QuirksModel)
    seed: Optional[int] = None


class RunRequest(BaseModel):
    rom: str = Field(description="Base64-encoded ROM image")
    options: Optional[RunOptionsModel] = None


class RunResponse(BaseModel):
    status: str
    steps_executed: int
    frames: int
    final_state: dict
    display: list[list[int]]
    display_text: str
    tone_active: bool
    awaiting_key: bool
    diagnostics: list[str]
    error: Optional[dict] = None


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Virtual Machine",
    description="Web API for running CHIP-8 ROMs headlessly",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.post("/api/run", response_model=RunResponse)
async def run_code(request: RunRequest):
    """Execute a CHIP-8 ROM for a bounded number of cycles.

    Args:
        request: Base64 ROM image and execution options

    Returns:
        Final registers, framebuffer, tone state and error, if any
    """
    try:
        rom = base64.b64decode(request.rom, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="ROM is not valid base64")

    # Validate ROM size
    if len(rom) > MAX_ROM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"ROM size exceeds limit of {MAX_ROM_SIZE} bytes",
        )

    opts = request.options or RunOptionsModel()
    for key in opts.keys:
        if not 0 <= key <= 0xF:
            raise HTTPException(status_code=400, detail=f"Invalid key index: {key}")

    run_opts = RunOptions(
        max_steps=opts.max_steps,
        cycles_per_frame=opts.cycles_per_frame,
        keys=opts.keys,
        quirks=Quirks(**opts.quirks.model_dump()),
        seed=opts.seed,
    )

    result = run_rom(rom, options=run_opts)
    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
