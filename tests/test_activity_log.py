import json
import logging
import os
import re
import time
from datetime import datetime, timezone

from youtube_uploader_cli.activity_log import ActivityLogger, LOG_FILE_PREFIX

LINE_RE = re.compile(
    r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\] \[(DEBUG|INFO|WARN|ERROR)\] (.*)$"
)


def read_lines(activity):
    return activity.current_log_file.read_text(encoding="utf-8").splitlines()


def test_log_file_is_named_by_day(activity, logs_dir):
    activity.info("hello")
    path = activity.current_log_file
    assert path.parent == logs_dir
    assert re.match(rf"{LOG_FILE_PREFIX}\d{{4}}-\d{{2}}-\d{{2}}\.log$", path.name)
    assert path.exists()


def test_line_format_with_metadata(activity):
    activity.info("Video upload started", {"file_path": "/tmp/a.mp4", "size": 3})

    (line,) = read_lines(activity)
    match = LINE_RE.match(line)
    assert match
    assert match.group(1) == "INFO"
    message, _, payload = match.group(2).partition(" {")
    assert message == "Video upload started"
    assert json.loads("{" + payload) == {"file_path": "/tmp/a.mp4", "size": 3}


def test_line_without_metadata_has_no_json(activity):
    activity.info("plain")
    (line,) = read_lines(activity)
    assert line.endswith("] [INFO] plain")


def test_warn_level_is_written_as_warn(activity):
    activity.warn("careful")
    assert "[WARN] careful" in read_lines(activity)[0]


def test_error_appends_traceback(activity):
    try:
        raise ValueError("boom")
    except ValueError as e:
        activity.error("Something failed", e, {"operation": "upload"})

    lines = read_lines(activity)
    assert "[ERROR] Something failed" in lines[0]
    payload = json.loads(lines[0][lines[0].index("{"):])
    assert payload == {
        "operation": "upload",
        "error_type": "ValueError",
        "error_message": "boom",
    }
    assert lines[1].startswith("Traceback")
    assert lines[-1] == "ValueError: boom"


def test_threshold_suppresses_lower_levels(logs_dir):
    activity = ActivityLogger(logs_dir)
    try:
        activity.debug("hidden")
        activity.info("shown")
        activity.set_level("WARN")
        activity.info("hidden too")
        activity.warn("shown too")
        content = activity.current_log_file.read_text(encoding="utf-8")
    finally:
        activity.close()

    assert "hidden" not in content
    assert "shown" in content
    assert "shown too" in content
    assert activity.level == "WARN"


def test_write_failure_does_not_raise(tmp_path, capsys):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    activity = ActivityLogger(blocker / "logs")
    try:
        activity.info("goes nowhere")
        activity.log_upload_success("abc123", "/tmp/a.mp4")
    finally:
        activity.close()

    assert "logs" in capsys.readouterr().err


def test_domain_records(activity, video_file):
    activity.log_auth_start()
    activity.log_upload_start(str(video_file), {"title": "Clip"})
    activity.log_upload_progress(0.5, str(video_file))
    activity.log_upload_success("abc123", str(video_file))
    activity.log_file_validation(str(video_file), False, "File not found")
    activity.log_metadata_validation({"title": "Clip", "tags": ["a"]}, True)
    activity.log_session_end(0)

    content = activity.current_log_file.read_text(encoding="utf-8")
    assert "[INFO] Authentication process started" in content
    assert '"file_size": 1000' in content
    assert '"progress": "50%"' in content
    assert "https://youtu.be/abc123" in content
    assert "[WARN] File validation failed" in content
    assert '"tag_count": 1' in content
    assert '"exit_code": 0' in content


def test_tail_returns_last_lines(activity):
    for i in range(5):
        activity.info(f"line {i}")

    tail = activity.tail(2).splitlines()
    assert len(tail) == 2
    assert tail[0].endswith("line 3")
    assert tail[1].endswith("line 4")


def test_tail_without_file(tmp_path):
    activity = ActivityLogger(tmp_path / "logs")
    try:
        assert activity.tail() == "Error reading log file"
    finally:
        activity.close()


def test_clear_removes_previous_entries(activity):
    activity.info("old entry")
    activity.clear()
    activity.info("new entry")

    content = activity.current_log_file.read_text(encoding="utf-8")
    assert "old entry" not in content
    assert "Log file cleared" in content
    assert "new entry" in content


def test_archive_moves_only_old_log_files(activity, logs_dir):
    old = logs_dir / f"{LOG_FILE_PREFIX}2020-01-01.log"
    recent = logs_dir / f"{LOG_FILE_PREFIX}2020-01-09.log"
    unrelated = logs_dir / "other.log"
    for path in (old, recent, unrelated):
        path.write_text("x\n")
    ten_days_ago = time.time() - 10 * 86400
    os.utime(old, (ten_days_ago, ten_days_ago))
    os.utime(unrelated, (ten_days_ago, ten_days_ago))

    archived = activity.archive_old_logs(days_to_keep=7)

    assert archived == [logs_dir / "archive" / old.name]
    assert (logs_dir / "archive" / old.name).exists()
    assert not old.exists()
    assert recent.exists()
    assert unrelated.exists()


def test_tail_with_undecodable_bytes(activity):
    activity.current_log_file.parent.mkdir(parents=True, exist_ok=True)
    activity.current_log_file.write_bytes(b"[x] [INFO] ok\n\xff\xfe broken\n")

    assert activity.tail() == "Error reading log file"


def test_records_roll_over_to_next_day_file(activity, logs_dir):
    activity.info("today")
    record = activity._logger.makeRecord(
        activity._logger.name,
        logging.INFO,
        __file__,
        0,
        "tomorrow",
        None,
        None,
        extra={"metadata": None},
    )
    record.created += 86400
    activity._handler.handle(record)

    today = datetime.now(timezone.utc)
    tomorrow = datetime.fromtimestamp(record.created, tz=timezone.utc)
    today_file = logs_dir / f"{LOG_FILE_PREFIX}{today:%Y-%m-%d}.log"
    tomorrow_file = logs_dir / f"{LOG_FILE_PREFIX}{tomorrow:%Y-%m-%d}.log"

    assert sorted(logs_dir.glob(f"{LOG_FILE_PREFIX}*.log")) == sorted(
        [today_file, tomorrow_file]
    )
    assert "today" in today_file.read_text(encoding="utf-8")
    assert "tomorrow" not in today_file.read_text(encoding="utf-8")
    assert tomorrow_file.read_text(encoding="utf-8").rstrip().endswith("tomorrow")


def test_loggers_are_independent(logs_dir):
    first = ActivityLogger(logs_dir)
    second = ActivityLogger(logs_dir)
    try:
        first.info("from first")
        second.info("from second")
    finally:
        first.close()
        second.close()

    assert first._logger not in logging.Logger.manager.loggerDict.values()
    content = first.current_log_file.read_text(encoding="utf-8")
    assert content.count("from first") == 1
    assert content.count("from second") == 1
