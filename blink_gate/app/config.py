import logging
import os
import yaml
from dataclasses import asdict, dataclass, field

from blink_gate.models.base import ConfigError


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATHS = [
    os.environ.get("BLINK_GATE_CONFIG", ""),
    ".blink-gate.yaml",
    "./config.yaml",
    "/etc/blink-gate/config.yaml",
]


@dataclass
class BlinkConfig:
    blink_threshold: float = 0.12  # relative drop below the rolling baseline
    rolling_average_count: int = 50  # frames
    blink_duration_ms: float = 3000.0  # a blink stays "recent" this long
    required_blinks: int = 3
    exclude_current_from_baseline: bool = False


@dataclass
class PoseConfig:
    facing_threshold: float = 0.35  # nose offset / eye span


@dataclass
class FrameSourceConfig:
    interval_ms: float = 100.0


@dataclass
class ApiConfig:
    host: str = "127.0.0.1"
    port: int = 8000
    session_ttl_s: float = 60.0
    max_sessions: int = 256


@dataclass
class LivenessConfig:
    blink: BlinkConfig = field(default_factory=BlinkConfig)
    pose: PoseConfig = field(default_factory=PoseConfig)
    frames: FrameSourceConfig = field(default_factory=FrameSourceConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"

    def validate(self) -> "LivenessConfig":
        try:
            self._check_ranges()
        except TypeError as e:
            # e.g. a quoted number in YAML
            raise ConfigError(f"Config value has the wrong type: {e}") from e
        return self

    def _check_ranges(self) -> None:
        b = self.blink
        if not 0.0 < b.blink_threshold < 1.0:
            raise ConfigError(f"blink.blink_threshold must be in (0, 1), got {b.blink_threshold}")
        if b.rolling_average_count < 1:
            raise ConfigError(f"blink.rolling_average_count must be >= 1, got {b.rolling_average_count}")
        if b.blink_duration_ms <= 0:
            raise ConfigError(f"blink.blink_duration_ms must be > 0, got {b.blink_duration_ms}")
        if b.required_blinks < 1:
            raise ConfigError(f"blink.required_blinks must be >= 1, got {b.required_blinks}")
        if self.pose.facing_threshold <= 0:
            raise ConfigError(f"pose.facing_threshold must be > 0, got {self.pose.facing_threshold}")
        if self.frames.interval_ms <= 0:
            raise ConfigError(f"frames.interval_ms must be > 0, got {self.frames.interval_ms}")
        if self.api.max_sessions < 1:
            raise ConfigError(f"api.max_sessions must be >= 1, got {self.api.max_sessions}")
        if logging.getLevelName(str(self.log_level).upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
        ):
            raise ConfigError(f"Unknown log_level {self.log_level!r}")

    def to_dict(self) -> dict:
        return asdict(self)


def _merge_dict(d: dict, u: dict) -> dict:
    for k, v in u.items():
        if isinstance(v, dict) and isinstance(d.get(k), dict):
            d[k] = _merge_dict(d[k], v)
        else:
            d[k] = v
    return d


def config_from_dict(data: dict) -> LivenessConfig:
    merged = _merge_dict(LivenessConfig().to_dict(), data or {})
    return LivenessConfig(
        blink=BlinkConfig(**merged.get("blink", {})),
        pose=PoseConfig(**merged.get("pose", {})),
        frames=FrameSourceConfig(**merged.get("frames", {})),
        api=ApiConfig(**merged.get("api", {})),
        log_level=str(merged.get("log_level", "INFO")),
    )


def load_config(path: str = "") -> LivenessConfig:
    """Load the first existing config file, falling back to defaults.

    An explicit `path` is tried before the default lookup list. Files that
    fail to parse are skipped with a warning; values out of range raise
    ConfigError.
    """
    cfg = LivenessConfig()
    for p in [p for p in [path, *DEFAULT_CONFIG_PATHS] if p]:
        if not os.path.exists(p):
            continue
        try:
            with open(p, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise TypeError(f"top level must be a mapping, got {type(data).__name__}")
            cfg = config_from_dict(data)
        except (yaml.YAMLError, TypeError, ValueError) as e:
            logger.warning("Ignoring config file %s: %s", p, e)
            continue
        logger.debug("Loaded config from %s", p)
        break
    return cfg.validate()
