"""Data model shared by the wizard and the upload client."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple


class Privacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


@dataclass(frozen=True)
class VideoMetadata:
    """Metadata sent with a video; frozen once the upload begins."""

    title: str
    description: str = ""
    tags: Tuple[str, ...] = ()
    privacy: Privacy = Privacy.PRIVATE
    category_id: str = "22"

    def validate(self) -> List[str]:
        """Return the problems that make this metadata ineligible for upload."""
        errors = []
        if not self.title or not self.title.strip():
            errors.append("title is required")
        return errors

    def to_request_body(self) -> Dict[str, Any]:
        return {
            "snippet": {
                "title": self.title,
                "description": self.description,
                "tags": list(self.tags),
                "categoryId": self.category_id,
            },
            "status": {
                "privacyStatus": Privacy(self.privacy).value,
            },
        }

    def summary(self) -> Dict[str, Any]:
        """Loggable view of the metadata."""
        return {
            "title": self.title,
            "has_description": bool(self.description),
            "tag_count": len(self.tags),
            "privacy": Privacy(self.privacy).value,
            "category_id": self.category_id,
        }


@dataclass
class UploadJob:
    """One upload in flight."""

    file_path: str
    metadata: VideoMetadata
    file_size: int
    progress: float = 0.0
    video_id: str = ""

    def advance(self, bytes_sent: int) -> float:
        """Record bytes sent and return the new (never decreasing) fraction."""
        if self.file_size <= 0:
            fraction = 1.0
        else:
            fraction = min(1.0, max(0.0, bytes_sent / self.file_size))
        self.progress = max(self.progress, fraction)
        return self.progress


def parse_tags(text: str) -> List[str]:
    """Split comma-separated tags, trimming and dropping empty entries.

    >>> parse_tags("a, b ,c")
    ['a', 'b', 'c']
    """
    return [tag.strip() for tag in text.split(",") if tag.strip()]
