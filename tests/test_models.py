import dataclasses

import pytest

from youtube_uploader_cli.models import Privacy, UploadJob, VideoMetadata, parse_tags


@pytest.mark.parametrize(
    "text, expected",
    [
        ("a, b ,c", ["a", "b", "c"]),
        ("", []),
        (" , ,", []),
        ("music,music, live ", ["music", "music", "live"]),
    ],
)
def test_parse_tags(text, expected):
    assert parse_tags(text) == expected


def test_metadata_is_frozen():
    metadata = VideoMetadata(title="Clip")
    with pytest.raises(dataclasses.FrozenInstanceError):
        metadata.title = "Other"


@pytest.mark.parametrize("title, valid", [("Clip", True), ("", False), ("   ", False)])
def test_metadata_validate(title, valid):
    assert (VideoMetadata(title=title).validate() == []) is valid


def test_request_body():
    body = VideoMetadata(
        title="Clip", tags=("x",), privacy=Privacy.PUBLIC, category_id="20"
    ).to_request_body()
    assert body["snippet"]["categoryId"] == "20"
    assert body["snippet"]["tags"] == ["x"]
    assert body["status"] == {"privacyStatus": "public"}


def test_upload_job_progress_is_monotonic_and_clamped():
    job = UploadJob(file_path="/x.mp4", metadata=VideoMetadata(title="Clip"), file_size=200)
    assert job.advance(50) == 0.25
    assert job.advance(20) == 0.25
    assert job.advance(500) == 1.0
