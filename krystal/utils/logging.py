import logging
import sys

HANDLER_NAME = "krystal"


def setup_logging(level: str = "WARNING") -> None:
    # stdout carries command output (JSON, CSV), so logs go to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level.upper())
    # Replace rather than stack handlers on repeated CLI invocations in one process
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(root.level, logging.WARNING))
