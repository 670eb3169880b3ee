from urllib.parse import quote

import httpx

RAW_MEDIA_TYPE = "application/vnd.github.raw"
JSON_MEDIA_TYPE = "application/vnd.github+json"


class GitHubContentsBackend:
    """Storage backend: one repository branch accessed through the contents API.

    Every call takes the credential to use, so the caller decides routing.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        owner: str,
        repo: str,
        branch: str = "master",
        user_agent: str = "snapsync-proxy",
    ) -> None:
        self._client = client
        self._owner = owner
        self._repo = repo
        self._branch = branch
        self._user_agent = user_agent

    def _headers(self, token: str, accept: str = JSON_MEDIA_TYPE) -> dict[str, str]:
        return {
            "Authorization": f"token {token}",
            "User-Agent": self._user_agent,
            "Accept": accept,
        }

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self._owner}/{self._repo}/contents/{quote(path, safe='/')}"

    async def get_contents(self, token: str, path: str, raw: bool = False) -> httpx.Response:
        """Fetch a file or directory listing. ``raw`` asks for the file bytes."""
        return await self._client.get(
            self._contents_url(path),
            params={"ref": self._branch},
            headers=self._headers(token, RAW_MEDIA_TYPE if raw else JSON_MEDIA_TYPE),
        )

    async def get_sha(self, token: str, path: str) -> tuple[str | None, httpx.Response]:
        """Return the blob sha of an existing file (None when absent) and the response."""
        response = await self.get_contents(token, path)
        if response.status_code == 200:
            data = response.json()
            if isinstance(data, dict):
                return data.get("sha"), response
        return None, response

    async def put_contents(
        self, token: str, path: str, content_b64: str, sha: str | None = None
    ) -> httpx.Response:
        """Create or update a file. ``sha`` is required to update an existing one."""
        payload: dict[str, str] = {
            "message": f"Upload {path}",
            "content": content_b64,
            "branch": self._branch,
        }
        if sha:
            payload["sha"] = sha
        return await self._client.put(
            self._contents_url(path),
            json=payload,
            headers=self._headers(token),
        )

    async def rate_limit(self, token: str) -> httpx.Response:
        """Quota status for a credential. Does not consume quota."""
        return await self._client.get("/rate_limit", headers=self._headers(token))

    async def aclose(self) -> None:
        await self._client.aclose()
