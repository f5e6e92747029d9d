import logging
import sys
from collections.abc import Iterable


def setup_logger(
    level: int = logging.INFO,
    name: str = "photo_session",
    categories: Iterable[str] | None = None,
) -> logging.Logger:
    """Create or update the project logger.

    - Safe to call repeatedly: there is exactly one StreamHandler on the base
      logger, pointed at the current sys.stderr, and its formatter/filters are
      refreshed on every call.
    - ``categories`` restricts output to child loggers whose last dotted name
      component is listed (e.g. ``{"history", "crop"}``). ``None`` shows all.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if getattr(h, "_photo_session_handler", False):
            stream_handler = h
            break

    if stream_handler is None:
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        stream_handler._photo_session_handler = True  # type: ignore[attr-defined]
        logger.addHandler(stream_handler)
    elif stream_handler.stream is not sys.stderr:
        # sys.stderr may have been swapped (test capture, embedding hosts)
        stream_handler.stream = sys.stderr

    # Do not include the full logger name in messages to keep output concise
    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    stream_handler.setFormatter(fmt)

    stream_handler.filters.clear()
    if categories is not None:
        allowed = {c.strip() for c in categories if c and c.strip()}

        class _CategoryFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                # record.name like: photo_session.session, photo_session.history
                parts = (record.name or "").split(".")
                suffix = parts[-1] if parts else record.name
                return suffix in allowed

        stream_handler.addFilter(_CategoryFilter())

    # Do not propagate beyond the project logger
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger("photo_session")
    if not any(getattr(h, "_photo_session_handler", False) for h in base.handlers):
        base = setup_logger()
    return base if not name else base.getChild(name)
