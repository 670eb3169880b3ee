from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PhotoRecord:
    """A row of the photos table. ``filename`` is the canonical storage key."""

    filename: str
    image_url: str
    uploader_gamertag: str
    created_at: datetime
