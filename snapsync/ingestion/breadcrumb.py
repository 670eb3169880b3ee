import json
from datetime import datetime, timezone
from pathlib import Path

from snapsync.logging.logger import Log


class RateLimitBreadcrumb:
    """Writes the last observed rate-limit event to a small JSON file.

    The file is for operators only; nothing in the pipeline reads it back.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    def record(self, reason: str, filename: str, when: datetime | None = None) -> None:
        data = {
            "timestamp": (when or datetime.now(timezone.utc)).isoformat(),
            "reason": reason,
            "filename": filename,
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            Log.warning(f"Could not write breadcrumb {self._path}: {exc}", component="RateLimit")
