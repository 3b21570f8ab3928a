"""
YouTube module for youtube-uploader-cli.

Example usage:
    >>> from youtube_uploader_cli.activity_log import ActivityLogger
    >>> from youtube_uploader_cli.models import VideoMetadata, Privacy
    >>> from youtube_uploader_cli.youtube import authorize, upload_video
    >>>
    >>> activity = ActivityLogger("./logs")
    >>> credentials = authorize(activity)
    >>> video_id = upload_video(
    ...     "/path/to/video.mp4",
    ...     VideoMetadata(title="My Video", privacy=Privacy.UNLISTED),
    ...     credentials,
    ...     on_progress=None,
    ...     activity=activity,
    ... )

Required setup:
    1. Create a project at https://console.cloud.google.com/
    2. Enable YouTube Data API v3
    3. Create OAuth 2.0 credentials (Desktop app)
    4. Download the client secrets file and save it as ./credentials.json
    5. Log in once - the token is cached in ~/youtube-tokens.json
"""

from .auth import authorize, build_service
from .uploader import YouTubeUploader, upload_video, watch_url

__all__ = [
    # Authentication
    "authorize",
    "build_service",
    # Uploading
    "YouTubeUploader",
    "upload_video",
    "watch_url",
]
