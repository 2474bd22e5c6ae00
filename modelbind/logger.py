import logging
import os
import sys

_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_qt_handler_installed = False


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    return _LEVEL_MAP.get((name or "").strip().lower(), default)


def setup_logger(level: int = logging.INFO, name: str = "modelbind") -> logging.Logger:
    """Create or update the project logger.

    - Respects env overrides MODELBIND_LOG_LEVEL/MODELBIND_LOG_CATS on every call
      (so late configuration can still take effect).
    - Ensures there is exactly one StreamHandler on the base logger and updates
      its formatter/filters instead of bailing out early.
    """
    logger = logging.getLogger(name)

    env_level = os.getenv("MODELBIND_LOG_LEVEL")
    if env_level:
        level = level_from_name(env_level, level)
    logger.setLevel(level)

    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            stream_handler = h

    if stream_handler is None:
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(stream_handler)

    # Do not include the full logger name in messages to keep output concise
    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    stream_handler.setFormatter(fmt)

    stream_handler.filters.clear()
    cats = (os.getenv("MODELBIND_LOG_CATS") or "").strip()
    if cats:
        allowed = {c.strip() for c in cats.split(",") if c.strip()}

        class _CategoryFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                # record.name like: modelbind.binding, modelbind.watch
                parts = (record.name or "").split(".")
                suffix = parts[-1] if parts else record.name
                return suffix in allowed

        stream_handler.addFilter(_CategoryFilter())

    # Do not propagate beyond the project logger
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)


def install_qt_message_handler() -> bool:
    """Route Qt's own diagnostics into the ``modelbind.qt`` logger.

    Known noisy 'FIXME qt_isinstance' lines are demoted to DEBUG. Returns False
    when the handler was already installed.
    """
    global _qt_handler_installed
    if _qt_handler_installed:
        return False

    from PySide6.QtCore import QtMsgType, qInstallMessageHandler  # noqa: PLC0415

    qt_logger = get_logger("qt")
    levels = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }

    def _handler(msg_type, context, message: str) -> None:  # noqa: ARG001
        level = levels.get(msg_type, logging.WARNING)
        if "FIXME qt_isinstance" in message:
            level = logging.DEBUG
        qt_logger.log(level, "%s", message)

    qInstallMessageHandler(_handler)
    _qt_handler_installed = True
    return True
