"""Exceptions raised by youtube-uploader-cli."""

from typing import Any, Optional


class UploaderError(Exception):
    """Base class for every error the uploader reports to the user."""

    pass


class ConfigError(UploaderError):
    """Raised when the settings file cannot be read or is invalid."""

    pass


class AuthError(UploaderError):
    """Raised when authentication with YouTube fails."""

    pass


class ValidationError(UploaderError):
    """Raised when user input (file path, metadata) is rejected."""

    pass


class UploadError(UploaderError):
    """Raised when video upload to YouTube fails."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message)
        self.file_path = file_path


class VideoFileNotFoundError(UploadError):
    pass


class PathIsDirectoryError(UploadError):
    pass


class PathNotRegularFileError(UploadError):
    pass


class ApiError(UploadError):
    """The YouTube API (or the transport underneath it) rejected the upload."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status: Optional[str] = None,
        details: Any = None,
        file_path: Optional[str] = None,
    ):
        super().__init__(message, file_path=file_path)
        self.code = code
        self.status = status
        self.details = details


class NoVideoIdReturnedError(UploadError):
    pass
