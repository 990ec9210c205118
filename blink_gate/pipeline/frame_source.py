import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional

from blink_gate.models import TraceFormatError, Verdict, FrameResult
from blink_gate.pipeline.liveness_pipeline import LivenessSession


logger = logging.getLogger(__name__)


@dataclass
class Frame:
    timestamp_ms: float
    faces: List[Any] = field(default_factory=list)


def read_trace(path: str, interval_ms: float = 100.0) -> Iterator[Frame]:
    """
    Read a JSON-Lines landmark trace.
    - One object per line: {"t": ms, "faces": [{"left_eye": [...], "right_eye": [...], "nose": [...]}]}
    - "t" is optional; frames without it are spaced `interval_ms` apart.
    - Blank lines are skipped.
    """
    with open(path, "r", encoding="utf-8") as f:
        index = 0
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                raise TraceFormatError(f"{path}:{lineno}: invalid JSON ({e.msg})") from e
            if not isinstance(obj, dict):
                raise TraceFormatError(f"{path}:{lineno}: expected an object, got {type(obj).__name__}")
            t = obj.get("t")
            try:
                ts = float(t) if t is not None else index * float(interval_ms)
            except (TypeError, ValueError) as e:
                raise TraceFormatError(f"{path}:{lineno}: invalid timestamp {t!r}") from e
            faces = obj.get("faces") or []
            if not isinstance(faces, list):
                raise TraceFormatError(f"{path}:{lineno}: 'faces' must be a list")
            yield Frame(ts, faces)
            index += 1


def run_session(session: LivenessSession, frames: Iterable[Frame]) -> Iterator[FrameResult]:
    """Feed frames into the session, stopping at the first LIVE verdict."""
    for frame in frames:
        res = session.process_raw(frame.faces, frame.timestamp_ms)
        yield res
        if res.verdict == Verdict.LIVE:
            logger.info("Liveness confirmed at t=%.0f ms; stopping frame source", frame.timestamp_ms)
            return


def final_verdict(session: LivenessSession, frames: Iterable[Frame]) -> Optional[FrameResult]:
    last = None
    for last in run_session(session, frames):
        pass
    return last
