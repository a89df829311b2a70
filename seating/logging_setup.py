import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level="INFO"):
    root = logging.getLogger()
    if not any(getattr(h, "_seating", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._seating = True
        root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
