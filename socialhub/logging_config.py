import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    # uvicorn --reload and repeated create_app() calls must not stack handlers
    if any(getattr(h, "_socialhub", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._socialhub = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    for noisy in ("pymongo", "websockets"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
