from __future__ import annotations
import logging, logging.handlers
from app_config import APP_NAME, COMPANY_NAME, LOG_DIR

LOG_FILE = LOG_DIR / f"{APP_NAME.lower()}.log"


def _qt_message_handler(mode, context, message) -> None:
    # Qt image plugins report through qWarning (e.g. "libpng warning: ...").
    from spritr.qt import QtCore
    levels = {
        QtCore.QtMsgType.QtDebugMsg: logging.DEBUG,
        QtCore.QtMsgType.QtInfoMsg: logging.INFO,
        QtCore.QtMsgType.QtWarningMsg: logging.WARNING,
        QtCore.QtMsgType.QtCriticalMsg: logging.ERROR,
        QtCore.QtMsgType.QtFatalMsg: logging.CRITICAL,
    }
    logging.getLogger("qt").log(levels.get(mode, logging.WARNING), "%s", message)


def install_qt_message_handler() -> None:
    from spritr.qt import QtCore
    QtCore.qInstallMessageHandler(_qt_message_handler)


def setup_logging(level: int = logging.INFO, *, to_file: bool = True, route_qt: bool = True) -> logging.Logger:
    logger = logging.getLogger()  # root
    logger.setLevel(level)

    # Clear duplicate handlers if reinit
    for h in list(logger.handlers):
        logger.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            LOG_FILE, maxBytes=10_000_000, backupCount=5, encoding="utf-8"
        )
        fh.setFormatter(fmt)
        fh.setLevel(level)
        logger.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.setLevel(level)
    logger.addHandler(ch)

    if route_qt:
        install_qt_message_handler()

    logger.info("%s logging initialised • %s • %s", APP_NAME, COMPANY_NAME,
                LOG_FILE if to_file else "console only")
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a child logger of the root configured by setup_logging().
    Usage: from spritr.core.logging import get_logger; log = get_logger(__name__)
    """
    return logging.getLogger(name or APP_NAME)
