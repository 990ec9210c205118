import logging
import threading
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from blink_gate.app.config import LivenessConfig, load_config
from blink_gate.models import FrameResult, SessionAlreadyTerminal
from blink_gate.pipeline.liveness_pipeline import LivenessSession


logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory sessions keyed by id. Idle sessions expire after `ttl_s`."""

    def __init__(self, cfg: LivenessConfig):
        self.cfg = cfg
        self.ttl_s = float(cfg.api.session_ttl_s)
        self.max_sessions = int(cfg.api.max_sessions)
        self._sessions: Dict[str, LivenessSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge(self, now: float) -> None:
        expired = [sid for sid, ts in self._last_seen.items() if now - ts >= self.ttl_s]
        for sid in expired:
            logger.info("Session %s expired", sid)
            self._sessions.pop(sid).abort()
            self._last_seen.pop(sid, None)

    def create(self) -> Tuple[str, LivenessSession]:
        now = time.monotonic()
        with self._lock:
            self._purge(now)
            if len(self._sessions) >= self.max_sessions:
                raise HTTPException(status_code=503, detail="Too many active sessions")
            sid = uuid.uuid4().hex
            sess = LivenessSession(self.cfg)
            self._sessions[sid] = sess
            self._last_seen[sid] = now
        logger.info("Session %s created", sid)
        return sid, sess

    def get(self, sid: str) -> LivenessSession:
        now = time.monotonic()
        with self._lock:
            self._purge(now)
            sess = self._sessions.get(sid)
            if sess is None:
                raise HTTPException(status_code=404, detail="Unknown session")
            self._last_seen[sid] = now
            return sess

    def drop(self, sid: str) -> None:
        with self._lock:
            sess = self._sessions.pop(sid, None)
            self._last_seen.pop(sid, None)
        if sess is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        sess.abort()


class FaceIn(BaseModel):
    left_eye: List[Any]
    right_eye: List[Any]
    nose: List[Any]


class FrameIn(BaseModel):
    faces: List[FaceIn] = []
    timestamp_ms: Optional[float] = None


class FrameOut(BaseModel):
    verdict: str
    blink_count: int
    is_facing_camera: bool
    state: str

    @classmethod
    def of(cls, res: FrameResult) -> "FrameOut":
        return cls(
            verdict=res.verdict.value,
            blink_count=res.blink_count,
            is_facing_camera=res.is_facing_camera,
            state=res.state.value,
        )


class SessionOut(BaseModel):
    session_id: str
    state: str


def create_app(cfg: Optional[LivenessConfig] = None) -> FastAPI:
    cfg = cfg or load_config()
    app = FastAPI(title="Blink Gate API", version="0.1.0")
    store = SessionStore(cfg)
    app.state.store = store

    @app.get("/health")
    def health():
        return {"ok": True, "sessions": len(store)}

    @app.post("/sessions", response_model=SessionOut)
    def create_session():
        sid, sess = store.create()
        return SessionOut(session_id=sid, state=sess.state.value)

    @app.post("/sessions/{session_id}/frames", response_model=FrameOut)
    def submit_frame(session_id: str, frame: FrameIn):
        sess = store.get(session_id)
        raw = [f.model_dump() for f in frame.faces]
        try:
            res = sess.process_raw(raw, frame.timestamp_ms)
        except SessionAlreadyTerminal as e:
            raise HTTPException(status_code=409, detail=str(e))
        return FrameOut.of(res)

    @app.get("/sessions/{session_id}", response_model=FrameOut)
    def session_status(session_id: str):
        return FrameOut.of(store.get(session_id).snapshot())

    @app.delete("/sessions/{session_id}")
    def abort_session(session_id: str):
        store.drop(session_id)
        return {"session_id": session_id, "state": "ABORTED"}

    return app
