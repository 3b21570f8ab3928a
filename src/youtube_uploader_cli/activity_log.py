"""
Activity log for youtube-uploader-cli.

Appends one line per event to ./logs/youtube-uploader-YYYY-MM-DD.log:

    [2024-05-01T10:00:00.000Z] [INFO] Video upload started {"file_path": "..."}

Errors carry their traceback on the following lines. Writing never raises:
failures are reported on stderr by logging.Handler.handleError.
"""

import json
import logging
import os
import platform
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

LOG_FILE_PREFIX = "youtube-uploader-"
ARCHIVE_DIR_NAME = "archive"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}
_LEVEL_NAMES = {logging.WARNING: "WARN"}

Metadata = Optional[Dict[str, Any]]


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


def _utc_day(timestamp: Optional[float] = None) -> str:
    if timestamp is None:
        timestamp = time.time()
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


class ActivityFormatter(logging.Formatter):
    """Render records as ``[timestamp] [LEVEL] message {json-metadata}``."""

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(record.msecs):03d}Z"

    def format(self, record):
        level = _LEVEL_NAMES.get(record.levelno, record.levelname)
        line = f"[{self.formatTime(record)}] [{level}] {record.getMessage()}"

        metadata = getattr(record, "metadata", None)
        if metadata:
            line += " " + json.dumps(metadata, default=str, ensure_ascii=False)

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class DailyFileHandler(logging.FileHandler):
    """FileHandler writing to one file per UTC calendar day."""

    def __init__(self, logs_dir: Union[str, Path], prefix: str = LOG_FILE_PREFIX):
        self.logs_dir = Path(logs_dir)
        self.prefix = prefix
        self._day = _utc_day()
        super().__init__(self.path_for(self._day), encoding="utf-8", delay=True)

    def path_for(self, day: str) -> Path:
        return self.logs_dir / f"{self.prefix}{day}.log"

    def _open(self):
        Path(self.baseFilename).parent.mkdir(parents=True, exist_ok=True)
        return super()._open()

    def reset_stream(self):
        """Close the open stream; the next record reopens (and recreates) the file."""
        self.acquire()
        try:
            if self.stream is not None:
                self.stream.close()
                self.stream = None
        finally:
            self.release()

    def emit(self, record):
        try:
            day = _utc_day(record.created)
            if day != self._day:
                self._day = day
                self.reset_stream()
                self.baseFilename = os.path.abspath(self.path_for(day))
            super().emit(record)
        except Exception:
            self.handleError(record)


class ActivityLogger:
    """
    Structured activity log for auth and upload lifecycle events.

    Constructed once per session and passed to the components that log.
    Call close() at shutdown to flush and release the file.

    Example:
        >>> activity = ActivityLogger("./logs", level="DEBUG")
        >>> activity.log_upload_success("abc123", "/videos/clip.mp4")
        >>> activity.close()
    """

    def __init__(self, logs_dir: Union[str, Path], level: Union[str, int] = "INFO"):
        self.logs_dir = Path(logs_dir)
        self.archive_dir = self.logs_dir / ARCHIVE_DIR_NAME

        try:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"Failed to create logs directory {self.logs_dir}: {e}", file=sys.stderr)

        self._handler = DailyFileHandler(self.logs_dir)
        self._handler.setFormatter(ActivityFormatter())

        # private to this instance, not registered with logging.getLogger
        self._logger = logging.Logger(__name__)
        self._logger.propagate = False
        self._logger.setLevel(_to_level(level))
        self._logger.addHandler(self._handler)

    @property
    def current_log_file(self) -> Path:
        return self._handler.path_for(_utc_day())

    @property
    def level(self) -> str:
        levelno = self._logger.level
        return _LEVEL_NAMES.get(levelno, logging.getLevelName(levelno))

    def set_level(self, level: Union[str, int]):
        self._logger.setLevel(_to_level(level))
        self.debug(f"Log level set to {self.level}")

    def close(self):
        self._logger.removeHandler(self._handler)
        self._handler.close()

    # -- core -------------------------------------------------------------

    def log(
        self,
        level: Union[str, int],
        message: str,
        metadata: Metadata = None,
        error: Optional[BaseException] = None,
    ):
        exc_info = None
        if error is not None:
            exc_info = (type(error), error, error.__traceback__)
        self._logger.log(
            _to_level(level),
            message,
            exc_info=exc_info,
            extra={"metadata": metadata or None},
        )

    def debug(self, message: str, metadata: Metadata = None):
        self.log(logging.DEBUG, message, metadata)

    def info(self, message: str, metadata: Metadata = None):
        self.log(logging.INFO, message, metadata)

    def warn(self, message: str, metadata: Metadata = None):
        self.log(logging.WARNING, message, metadata)

    def error(
        self,
        message: str,
        error: Optional[BaseException] = None,
        metadata: Metadata = None,
    ):
        metadata = dict(metadata or {})
        if error is not None:
            metadata["error_type"] = type(error).__name__
            metadata["error_message"] = str(error)
        self.log(logging.ERROR, message, metadata, error=error)

    # -- domain records ---------------------------------------------------

    def log_auth_start(self):
        self.info("Authentication process started")

    def log_auth_success(self, user_email: Optional[str] = None):
        self.info("Authentication successful", {"user_email": user_email})

    def log_auth_error(self, error: BaseException):
        self.error("Authentication failed", error)

    def log_upload_start(self, file_path: str, metadata: Metadata = None):
        try:
            file_size = os.path.getsize(file_path)
        except OSError:
            file_size = None
        self.info(
            "Video upload started",
            {
                "file_path": file_path,
                "file_name": os.path.basename(file_path),
                "file_size": file_size,
                **(metadata or {}),
            },
        )

    def log_upload_progress(self, progress: float, file_path: str):
        self.debug(
            "Upload progress",
            {"progress": f"{round(progress * 100)}%", "file_path": file_path},
        )

    def log_upload_success(self, video_id: str, file_path: str):
        self.info(
            "Video upload completed successfully",
            {
                "video_id": video_id,
                "file_path": file_path,
                "video_url": f"https://youtu.be/{video_id}",
            },
        )

    def log_upload_error(
        self, error: BaseException, file_path: Optional[str], metadata: Metadata = None
    ):
        self.error(
            "Video upload failed", error, {"file_path": file_path, **(metadata or {})}
        )

    def log_file_validation(
        self, file_path: str, is_valid: bool, reason: Optional[str] = None
    ):
        details = {"file_path": file_path, "file_name": os.path.basename(file_path)}
        if is_valid:
            self.info("File validation passed", details)
        else:
            self.warn("File validation failed", {**details, "reason": reason})

    def log_metadata_validation(
        self,
        metadata: Dict[str, Any],
        is_valid: bool,
        errors: Optional[List[str]] = None,
    ):
        if is_valid:
            self.info(
                "Metadata validation passed",
                {
                    "title": metadata.get("title"),
                    "has_description": bool(metadata.get("description")),
                    "tag_count": len(metadata.get("tags") or []),
                },
            )
        else:
            self.warn("Metadata validation failed", {"errors": errors})

    def log_session_start(self):
        self.info(
            "YouTube Uploader CLI session started",
            {
                "platform": sys.platform,
                "python_version": platform.python_version(),
                "cwd": os.getcwd(),
            },
        )

    def log_session_end(self, exit_code: int = 0):
        self.info("YouTube Uploader CLI session ended", {"exit_code": exit_code})

    # -- file maintenance -------------------------------------------------

    def tail(self, lines: int = 100) -> str:
        """Return the last ``lines`` non-empty lines of today's log file."""
        try:
            content = self.current_log_file.read_text(encoding="utf-8")
        except (OSError, ValueError):
            return "Error reading log file"
        log_lines = [line for line in content.splitlines() if line.strip()]
        if lines <= 0:
            return ""
        return "\n".join(log_lines[-lines:])

    def clear(self):
        """Delete today's log file."""
        self._handler.reset_stream()
        try:
            self.current_log_file.unlink()
        except OSError as e:
            self.error("Failed to clear log file", e)
            return
        self.info("Log file cleared")

    def archive_old_logs(self, days_to_keep: int = 7) -> List[Path]:
        """Move log files last modified more than ``days_to_keep`` days ago to archive/."""
        archived = []
        now = time.time()
        try:
            candidates = sorted(self.logs_dir.glob(f"{LOG_FILE_PREFIX}*"))
            for path in candidates:
                if not path.is_file():
                    continue
                age_days = (now - path.stat().st_mtime) / 86400
                if age_days <= days_to_keep:
                    continue
                self.archive_dir.mkdir(parents=True, exist_ok=True)
                target = self.archive_dir / path.name
                os.replace(path, target)
                archived.append(target)
                self.debug("Archived old log file", {"file": path.name})
        except OSError as e:
            self.error("Failed to archive old logs", e)
        return archived
