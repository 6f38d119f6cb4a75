# ecg_engine/api.py
import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .constants import CORS_ORIGINS, DEFAULT_CHUNK_SEC, MAX_REQUEST_SEC, MAX_SESSIONS
from .engine import RhythmEngine
from .errors import ConfigError, UsageError
from .presets import get_preset, get_preset_document, list_presets
from .rhythm_logic import describe_rhythm

logger = logging.getLogger(__name__)

app = FastAPI(title="ECG Rhythm Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One engine per session; sessions never share a cursor.
app.state.sessions = {}


@app.exception_handler(ConfigError)
async def handle_config_error(request: Request, exc: ConfigError):
    return JSONResponse(status_code=422, content={"error": "ConfigError", "detail": str(exc)})


@app.exception_handler(UsageError)
async def handle_usage_error(request: Request, exc: UsageError):
    return JSONResponse(status_code=409, content={"error": "UsageError", "detail": str(exc)})


def _get_engine(session_id: str) -> RhythmEngine:
    engine = app.state.sessions.get(session_id)
    if engine is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return engine


@app.get("/rhythms")
def get_rhythms():
    return {"rhythms": list_presets()}


@app.get("/rhythms/{preset_id}")
def get_rhythm(preset_id: str):
    try:
        return get_preset_document(preset_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown rhythm preset: {preset_id}")


@app.post("/sessions", status_code=201)
async def create_session(body: Dict[str, Any] = Body(...)):
    """Start a session from a rhythm spec body, or from {"preset": "<id>"}."""
    if len(app.state.sessions) >= MAX_SESSIONS:
        raise HTTPException(status_code=429, detail=f"Session limit reached ({MAX_SESSIONS}); delete a session first")

    if "preset" in body:
        preset_id = body["preset"]
        if not isinstance(preset_id, str):
            raise HTTPException(status_code=422, detail="preset must be a string id")
        try:
            spec = get_preset(preset_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown rhythm preset: {preset_id}")
    else:
        spec = body

    engine = RhythmEngine()
    engine.load(spec)
    session_id = uuid.uuid4().hex
    app.state.sessions[session_id] = engine
    logger.info("Session %s started (%s)", session_id, engine.spec.id or engine.spec.mode.value)
    return {
        "session_id": session_id,
        "mode": engine.spec.mode.value,
        "sample_rate_hz": engine.spec.generator.sample_rate_hz,
        "rhythm_description": describe_rhythm(engine.spec),
    }


@app.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    engine = _get_engine(session_id)
    engine.reset()
    return {"session_id": session_id, "t": engine.t}


@app.get("/sessions/{session_id}/samples")
async def get_samples(
    session_id: str,
    seconds: float = Query(DEFAULT_CHUNK_SEC, gt=0, le=MAX_REQUEST_SEC),
):
    engine = _get_engine(session_id)
    return engine.sample(seconds).to_dict()


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    _get_engine(session_id)
    del app.state.sessions[session_id]
    logger.info("Session %s closed", session_id)
    return Response(status_code=204)


@app.websocket("/sessions/{session_id}/stream")
async def stream_session(
    websocket: WebSocket,
    session_id: str,
    chunk_sec: float = Query(DEFAULT_CHUNK_SEC, gt=0, le=MAX_REQUEST_SEC),
    max_chunks: Optional[int] = Query(None, ge=1),
):
    """Push one chunk every chunk_sec until max_chunks is reached or the client goes away."""
    engine = app.state.sessions.get(session_id)
    if engine is None:
        await websocket.close(code=1008)
        return

    await websocket.accept()
    sent = 0
    try:
        while max_chunks is None or sent < max_chunks:
            await websocket.send_json(engine.sample(chunk_sec).to_dict())
            sent += 1
            if max_chunks is None or sent < max_chunks:
                await asyncio.sleep(chunk_sec)
    except WebSocketDisconnect:
        logger.info("Session %s stream closed by client after %d chunks", session_id, sent)
        return
    await websocket.close()
