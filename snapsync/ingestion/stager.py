from pathlib import Path

import httpx

from snapsync.ingestion.exceptions import EmptyPayloadError, TransientSourceError
from snapsync.ingestion.models import StagedFile
from snapsync.logging.logger import Log


def staged_file_path(temp_dir: Path, staged_name: str) -> Path:
    """Build path to a scratch file: {temp_dir}/{staged_name}"""
    return temp_dir / staged_name


class Stager:
    """Downloads image bytes into scratch storage."""

    def __init__(self, temp_dir: Path, http_client: httpx.Client) -> None:
        self._temp_dir = temp_dir
        self._http = http_client

    def stage(self, url: str, staged_name: str) -> StagedFile:
        """Return the staged file for ``staged_name``, downloading it if absent.

        A file left behind by an earlier pass is reused as is.

        Raises:
            EmptyPayloadError: if the source returned zero bytes.
            TransientSourceError: if the download failed.
        """
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        path = staged_file_path(self._temp_dir, staged_name)

        if path.exists():
            Log.info(f"Skipped existing: {staged_name}", component="Download")
            return StagedFile(path=path, size=path.stat().st_size)

        try:
            response = self._http.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransientSourceError(f"Download failed for {url}: {exc}") from exc

        payload = response.content
        if not payload:
            raise EmptyPayloadError(f"Empty payload from {url}")

        # Rename into place so a crash never leaves a truncated file to reuse.
        partial = path.with_name(path.name + ".part")
        partial.write_bytes(payload)
        partial.replace(path)
        Log.info(f"Saved: {staged_name} ({len(payload)} bytes)", component="Download")
        return StagedFile(path=path, size=len(payload))
