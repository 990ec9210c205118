import logging
import time


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def now_ms() -> float:
    return time.time() * 1000.0


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
