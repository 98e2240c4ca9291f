"""
Logging Configuration
Sets up the 'keymatrix' logger for a host application (layout editor).

Gestures log at INFO. The per-gesture traces (captured keys, skipped keys,
pointer-on-line hits, abandoned renumber buffers) are DEBUG records of the
engine modules below and can be switched on without turning the rest of the
host's logging to DEBUG.
"""
import logging
import sys
from typing import Optional

LOGGER_NAME = "keymatrix"

GESTURE_TRACE_LOGGERS = (
    "keymatrix.controller.annotation",
    "keymatrix.controller.capture",
    "keymatrix.controller.hit_testing",
    "keymatrix.controller.renumber",
    "keymatrix.controller.sequence",
)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    trace_gestures: bool = False
) -> logging.Logger:
    """
    Configures the 'keymatrix' namespace.

    Args:
        level: Logging level of the engine (e.g. logging.INFO).
        log_file: Optional path to save logs to a file.
        trace_gestures: Emit the DEBUG traces of capture, sequencing,
            hit testing and renumbering regardless of `level`.

    Returns:
        The configured 'keymatrix' logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    # Records stay inside the namespace; the host keeps its own root handlers
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    handler_level = min(level, logging.DEBUG) if trace_gestures else level
    for name in GESTURE_TRACE_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if trace_gestures else logging.NOTSET)

    # 1. Console Handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(handler_level)

    # Format: Time - Module - Level - Message
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. File Handler (Optional)
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(handler_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info(f"Logging initialized (level {logging.getLevelName(level)}, gesture traces {'on' if trace_gestures else 'off'}).")
    return logger
