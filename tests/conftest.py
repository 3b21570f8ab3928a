import pytest

from youtube_uploader_cli.activity_log import ActivityLogger
from youtube_uploader_cli.config import Settings


@pytest.fixture
def logs_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def activity(logs_dir):
    logger = ActivityLogger(logs_dir, level="DEBUG")
    yield logger
    logger.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        tokens_path=tmp_path / "home" / "youtube-tokens.json",
        client_secrets_path=tmp_path / "credentials.json",
        logs_dir=tmp_path / "logs",
    )


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 1000)
    return path
