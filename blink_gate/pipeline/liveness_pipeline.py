import logging
import threading
from typing import Any, Callable, Optional, Sequence

from blink_gate.app.config import LivenessConfig
from blink_gate.app.utils import now_ms as wall_clock_ms
from blink_gate.models import (
    BlinkDetector,
    DegenerateGeometry,
    FaceLandmarks,
    FrameResult,
    MalformedLandmarks,
    SessionAlreadyTerminal,
    SessionState,
    Verdict,
    calculate_ear,
    is_facing_camera,
)


logger = logging.getLogger(__name__)


class LivenessSession:
    """
    Per-attempt liveness state machine.

    AWAITING_FACE -> TRACKING on the first usable face, TRACKING -> LIVE once
    the subject has blinked `required_blinks` times, the latest blink is
    recent and the face is frontal in the same frame. LIVE is terminal; so is
    ABORTED. There is no spoof state: a session that never qualifies simply
    stays in TRACKING until the caller gives up.

    Frames without a usable face leave all accumulated state untouched.
    """

    def __init__(self, cfg: Optional[LivenessConfig] = None, clock: Callable[[], float] = wall_clock_ms):
        self.cfg = (cfg or LivenessConfig()).validate()
        self.clock = clock
        b = self.cfg.blink
        self.blink = BlinkDetector(
            blink_threshold=b.blink_threshold,
            rolling_average_count=b.rolling_average_count,
            blink_duration_ms=b.blink_duration_ms,
            exclude_current_from_baseline=b.exclude_current_from_baseline,
        )
        self.required_blinks = int(b.required_blinks)
        self.facing_threshold = float(self.cfg.pose.facing_threshold)
        self.state = SessionState.AWAITING_FACE
        self.is_facing_camera = False
        self.last_ear: Optional[float] = None
        self.frames_processed = 0
        # frames, snapshots and aborts on one session are serialized
        self._lock = threading.Lock()

    @property
    def blink_count(self) -> int:
        return self.blink.blink_count

    @property
    def is_terminal(self) -> bool:
        return self.state in (SessionState.LIVE, SessionState.ABORTED)

    def abort(self) -> None:
        with self._lock:
            if not self.is_terminal:
                logger.info("Liveness session aborted after %d frames", self.frames_processed)
                self.state = SessionState.ABORTED

    def snapshot(self) -> FrameResult:
        """Current state without consuming a frame.

        An aborted session never went live, so it reports TRACKING with
        `state` ABORTED.
        """
        with self._lock:
            if self.state == SessionState.LIVE:
                verdict = Verdict.LIVE
            elif self.state == SessionState.AWAITING_FACE:
                verdict = Verdict.NO_FACE
            else:
                verdict = Verdict.TRACKING
            return self._result(verdict)

    def _result(self, verdict: Verdict) -> FrameResult:
        return FrameResult(verdict, self.blink.blink_count, self.is_facing_camera, self.state, self.last_ear)

    def process_frame(self, faces: Sequence[FaceLandmarks], now_ms: Optional[float] = None) -> FrameResult:
        with self._lock:
            return self._process_frame(faces, now_ms)

    def _process_frame(self, faces: Sequence[FaceLandmarks], now_ms: Optional[float]) -> FrameResult:
        if self.is_terminal:
            raise SessionAlreadyTerminal(f"Session is {self.state.value}; stop submitting frames")
        now = self.clock() if now_ms is None else float(now_ms)

        if not faces:
            return self._result(Verdict.NO_FACE)

        # Multi-face scenes are not disambiguated: first detection wins
        face = faces[0]
        try:
            face.validate()
        except MalformedLandmarks as e:
            logger.warning("Malformed landmarks, treating frame as no face: %s", e)
            return self._result(Verdict.NO_FACE)

        self.frames_processed += 1
        if self.state == SessionState.AWAITING_FACE:
            self.state = SessionState.TRACKING

        try:
            left_ear = calculate_ear(face.left_eye)
            right_ear = calculate_ear(face.right_eye)
        except DegenerateGeometry as e:
            logger.debug("Skipping blink update: %s", e)
            self.last_ear = None
        else:
            self.blink.update(left_ear, right_ear, now)
            self.last_ear = (left_ear + right_ear) / 2.0

        self.is_facing_camera = is_facing_camera(
            face.nose_tip, face.left_eye[0], face.right_eye[0], self.facing_threshold
        )

        is_live = (
            self.blink.is_recent(now)
            and self.is_facing_camera
            and self.blink.blink_count >= self.required_blinks
        )
        logger.debug(
            "live=%s since_last_blink=%s facing=%s blinks=%d",
            is_live,
            self.blink.ms_since_last_blink(now),
            self.is_facing_camera,
            self.blink.blink_count,
        )
        if is_live:
            self.state = SessionState.LIVE
            logger.info("Live face detected after %d blinks", self.blink.blink_count)
            return self._result(Verdict.LIVE)
        return self._result(Verdict.TRACKING)

    def process_raw(self, raw_faces: Optional[Sequence[Any]], now_ms: Optional[float] = None) -> FrameResult:
        """Like process_frame, for collaborator payloads (dicts of [x, y] lists)."""
        faces = []
        if raw_faces:
            try:
                faces = [FaceLandmarks.from_dict(raw_faces[0])]
            except MalformedLandmarks as e:
                logger.warning("Unparseable landmarks, treating frame as no face: %s", e)
        return self.process_frame(faces, now_ms)
