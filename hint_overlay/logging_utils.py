from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

LOGGER_NAME = "HintOverlay.Core"
LOG_FILENAME = "hint-overlay.log"
PROPAGATE_ENV_VAR = "HINT_OVERLAY_PROPAGATE_LOGS"
LOG_DIR_ENV_VAR = "HINT_OVERLAY_LOG_DIR"

_TRUTHY = {"1", "true", "yes", "on"}


def _log_dir_candidates() -> Iterator[Path]:
    override = os.environ.get(LOG_DIR_ENV_VAR, "").strip()
    if override:
        yield Path(override).expanduser()
    for env_name, fallback in (("XDG_STATE_HOME", ".local/state"), ("XDG_CACHE_HOME", ".cache")):
        root = os.environ.get(env_name) or str(Path.home() / fallback)
        yield Path(root) / "hint-overlay"
    yield Path(tempfile.gettempdir()) / "hint-overlay"


def resolve_logs_dir(log_dir_name: str = "HintOverlay") -> Path:
    """Return the first writable ``<base>/<log_dir_name>``, creating it.

    ``HINT_OVERLAY_LOG_DIR`` wins when set; otherwise the XDG state and cache
    homes are tried before the temp directory. Raises ``OSError`` when none
    of them can be created.
    """
    failure: Optional[OSError] = None
    for base in _log_dir_candidates():
        target = base / log_dir_name
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            failure = exc
            continue
        return target
    assert failure is not None
    raise failure


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def propagation_requested() -> bool:
    return os.environ.get(PROPAGATE_ENV_VAR, "").strip().lower() in _TRUTHY


def configure_logging(
    debug_enabled: bool,
    *,
    log_dir: Optional[Path] = None,
    retention: int = 5,
) -> logging.Logger:
    """Attach a rotating file handler to the package logger (idempotent per log path)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    logger.propagate = propagation_requested()
    target_dir = log_dir if log_dir is not None else resolve_logs_dir()
    target_path = os.path.abspath(target_dir / LOG_FILENAME)
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and existing.baseFilename == target_path:
            return logger
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    handler = build_rotating_file_handler(target_dir, LOG_FILENAME, retention=retention, formatter=formatter)
    logger.addHandler(handler)
    logger.debug("Hint overlay logging to %s (retention=%d)", target_path, retention)
    return logger
