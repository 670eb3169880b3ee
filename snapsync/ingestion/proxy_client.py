from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class UploadResponse:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ProxyClient:
    """Client for the rotating-credential proxy's write endpoint."""

    def __init__(self, http_client: httpx.Client, base_url: str) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    def upload(self, key: str, content: bytes) -> UploadResponse:
        """POST raw bytes to ``/upload?path=<key>``.

        Raises:
            httpx.HTTPError: on transport failures.
        """
        response = self._http.post(
            f"{self._base_url}/upload",
            params={"path": key},
            content=content,
            headers={"Content-Type": "application/octet-stream"},
        )
        return UploadResponse(status_code=response.status_code, text=response.text)
