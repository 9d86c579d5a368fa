"""Logging setup shared by the frigo entry points."""

import logging
from typing import Iterable, Optional

# HTTP, MQTT and Firestore client libraries are chatty at INFO
QUIET_LOGGERS = ("aiohttp", "asyncio", "paho", "google", "urllib3")


def setup_logging(
    level: str = "INFO",
    service: Optional[str] = None,
    quiet: Iterable[str] = (),
) -> None:
    """Configure the root logger once per process.

    Args:
        level: Level name; unknown names fall back to INFO.
        service: Entry point name (poller, display, live) prefixed to every line,
            so the output of services sharing a journal can be told apart.
        quiet: Extra logger names held at WARNING.
    """
    prefix = f"[{service}] " if service else ""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=f"%(asctime)s {prefix}%(levelname)s %(name)s: %(message)s",
    )

    for name in (*QUIET_LOGGERS, *quiet):
        logging.getLogger(name).setLevel(logging.WARNING)
