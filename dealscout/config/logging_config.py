# dealscout/config/logging_config.py

"""Per-run timestamped logging configuration for dealscout.

Each launch writes a dedicated log file inside ``logs/`` named after
the launch time (e.g. ``logs/run_20261017_153045.log``). Isolated
browser workers are separate processes, so they log to their own
``worker_<pid>_<timestamp>.log`` file next to the parent's.

The console threshold comes from ``Settings.CONSOLE_LOG_LEVEL``
(``DEALSCOUT_LOG_LEVEL`` in the environment) unless the caller passes
one, as ``main.py --verbose`` does.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from dealscout.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(process)d | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: int | str | None) -> int:
    """Turn a level name or number into a ``logging`` level.

    ``None`` and unrecognised names fall back to WARNING.
    """
    if level is None:
        return logging.WARNING
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(
    console_level: int | str | None = None,
    prefix: str = "run",
) -> Path:
    """Initialise the root ``dealscout`` logger for the current process.

    Args:
        console_level: Threshold for the stderr handler. Defaults to
            ``Settings.CONSOLE_LOG_LEVEL``.
        prefix: Log file name prefix, ``"run"`` for the CLI and
            ``"worker_<pid>"`` for isolated render workers.

    Returns:
        The :class:`~pathlib.Path` to the log file for this process.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{prefix}_{timestamp}.log"

    root_logger = logging.getLogger("dealscout")
    root_logger.setLevel(logging.DEBUG)

    level = resolve_level(
        console_level
        if console_level is not None
        else Settings.CONSOLE_LOG_LEVEL
    )

    # Repeated calls only retune the console threshold
    if root_logger.handlers:
        for handler in root_logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
