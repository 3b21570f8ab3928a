"""
YouTube video uploader module.

Uploads a single video with metadata in one resumable insert request and
reports progress after every chunk.
"""

import json
import mimetypes
import os
import stat
from typing import Callable, Optional

import httplib2
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from ..activity_log import ActivityLogger
from ..errors import (
    ApiError,
    AuthError,
    NoVideoIdReturnedError,
    PathIsDirectoryError,
    PathNotRegularFileError,
    VideoFileNotFoundError,
)
from ..models import UploadJob, VideoMetadata
from .auth import build_service

DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


def _error_status(error: HttpError) -> Optional[str]:
    """Canonical status (e.g. ``PERMISSION_DENIED``) from the JSON error body."""
    try:
        return json.loads(error.content.decode("utf-8"))["error"].get("status")
    except (ValueError, KeyError, TypeError, AttributeError):
        return None


ProgressCallback = Callable[[float], None]


def watch_url(video_id: str) -> str:
    return f"https://youtu.be/{video_id}"


class YouTubeUploader:
    """
    YouTube video uploader class.

    Example:
        >>> uploader = YouTubeUploader(credentials, activity)
        >>> video_id = uploader.upload_video(
        ...     "/path/to/video.mp4",
        ...     VideoMetadata(title="My Video", tags=("tag1", "tag2")),
        ...     on_progress=lambda fraction: print(f"{fraction:.0%}"),
        ... )
    """

    def __init__(
        self,
        credentials,
        activity: ActivityLogger,
        service=None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Args:
            credentials: Authorized google credentials
            activity: Activity log for validation and upload records
            service: Prebuilt YouTube service (built from credentials if None)
            chunk_size: Bytes sent per resumable chunk
        """
        if not credentials:
            raise AuthError("No valid credentials found. Run auth flow first.")
        self.credentials = credentials
        self.activity = activity
        self.chunk_size = chunk_size
        self.youtube = service

    def _service(self):
        if self.youtube is None:
            self.youtube = build_service(self.credentials)
        return self.youtube

    def validate_file(self, file_path: str) -> os.stat_result:
        """
        Check that file_path is an existing regular file.

        Raises:
            VideoFileNotFoundError, PathIsDirectoryError, PathNotRegularFileError
        """
        if not os.path.exists(file_path):
            error = VideoFileNotFoundError(f"File not found: {file_path}", file_path)
        else:
            info = os.stat(file_path)
            if stat.S_ISDIR(info.st_mode):
                error = PathIsDirectoryError(
                    f"Path is a directory, not a file: {file_path}", file_path
                )
            elif not stat.S_ISREG(info.st_mode):
                error = PathNotRegularFileError(
                    f"Path is not a regular file: {file_path}", file_path
                )
            else:
                self.activity.log_file_validation(file_path, True)
                return info

        self.activity.log_file_validation(file_path, False, str(error))
        raise error

    def upload_video(
        self,
        file_path: str,
        metadata: VideoMetadata,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Upload a video to YouTube.

        Args:
            file_path: Path to the video file to upload
            metadata: Title, description, tags, privacy and category
            on_progress: Called with the uploaded fraction (0.0-1.0) after
                         every chunk; never decreases

        Returns:
            str: The new video's ID

        Raises:
            UploadError: Invalid file, API rejection or missing video ID
        """
        info = self.validate_file(file_path)
        job = UploadJob(file_path=file_path, metadata=metadata, file_size=info.st_size)

        def report(bytes_sent: int):
            fraction = job.advance(bytes_sent)
            self.activity.log_upload_progress(fraction, file_path)
            if on_progress:
                on_progress(fraction)

        youtube = self._service()
        self.activity.log_upload_start(file_path, metadata.summary())

        mimetype = mimetypes.guess_type(file_path)[0] or "application/octet-stream"
        media = MediaFileUpload(
            file_path, mimetype=mimetype, chunksize=self.chunk_size, resumable=True
        )

        try:
            insert_request = youtube.videos().insert(
                part="snippet,status",
                body=metadata.to_request_body(),
                media_body=media,
            )

            response = None
            while response is None:
                status, response = insert_request.next_chunk()
                if status:
                    report(status.resumable_progress)
        except HttpError as e:
            raise ApiError(
                f"Upload failed: {e.reason}",
                code=e.resp.status,
                status=_error_status(e),
                details=e.error_details,
                file_path=file_path,
            ) from e
        except (OSError, httplib2.HttpLib2Error) as e:
            raise ApiError(f"Upload failed: {e}", file_path=file_path) from e
        finally:
            media.stream().close()

        report(job.file_size)

        video_id = (response or {}).get("id")
        if not video_id:
            raise NoVideoIdReturnedError(
                "Upload failed: No video ID returned", file_path
            )

        job.video_id = video_id
        self.activity.log_upload_success(video_id, file_path)
        return video_id


def upload_video(
    file_path: str,
    metadata: VideoMetadata,
    credentials,
    on_progress: Optional[ProgressCallback],
    activity: ActivityLogger,
    service=None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """
    Convenience function to upload one video.

    Example:
        >>> video_id = upload_video(
        ...     "/path/to/video.mp4",
        ...     VideoMetadata(title="My Video", privacy=Privacy.UNLISTED),
        ...     credentials,
        ...     on_progress=None,
        ...     activity=activity,
        ... )
        >>> print(watch_url(video_id))
    """
    uploader = YouTubeUploader(
        credentials, activity, service=service, chunk_size=chunk_size
    )
    return uploader.upload_video(file_path, metadata, on_progress)
