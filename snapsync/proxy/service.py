import base64
import mimetypes
import re
from datetime import datetime, timezone
from typing import Any

import httpx

from snapsync.logging.logger import Log
from snapsync.proxy.cache import ProxyResponse, ResponseCache
from snapsync.proxy.github_backend import GitHubContentsBackend
from snapsync.proxy.quota import CredentialQuotaState, QuotaTracker, obscure

IMAGE_PATH = re.compile(r"\.(jpg|jpeg|png|webp|gif)$", re.IGNORECASE)

DEFAULT_RETRY_SECONDS = 60


def is_image_path(path: str) -> bool:
    return bool(IMAGE_PATH.search(path))


def cache_control(path: str, image_seconds: int, listing_seconds: int) -> tuple[str, int]:
    """Return the Cache-Control header value and TTL for a read of ``path``.

    Image payloads are immutable per path; listings and metadata change.
    """
    if is_image_path(path):
        return f"public, max-age={image_seconds}, immutable", image_seconds
    return f"public, max-age={listing_seconds}", listing_seconds


def _reset_iso(reset: float) -> str:
    return datetime.fromtimestamp(reset, tz=timezone.utc).isoformat()


def _text_response(status_code: int, text: str) -> ProxyResponse:
    return ProxyResponse(status_code, text.encode("utf-8"), "text/plain")


class RotatingProxy:
    """One logical read/write interface over a pool of upstream credentials."""

    def __init__(
        self,
        tokens: list[str],
        backend: GitHubContentsBackend,
        quota: QuotaTracker,
        cache: ResponseCache,
        *,
        image_cache_seconds: int = 60 * 60 * 24 * 365,
        listing_cache_seconds: int = 300,
    ) -> None:
        self._tokens = list(tokens)
        self._backend = backend
        self._quota = quota
        self._cache = cache
        self._image_cache_seconds = image_cache_seconds
        self._listing_cache_seconds = listing_cache_seconds

    @property
    def tokens(self) -> list[str]:
        return list(self._tokens)

    @property
    def quota(self) -> QuotaTracker:
        return self._quota

    async def close(self) -> None:
        await self._backend.aclose()

    def _rate_limited(self, token: str, response: httpx.Response) -> bool:
        """Record quota from ``response``; True when this credential is now unusable."""
        state = self._quota.observe(token, response)
        if response.status_code == 429:
            if not self._quota.is_exhausted(token):
                retry_after = response.headers.get("Retry-After", "")
                delay = int(retry_after) if retry_after.isdigit() else DEFAULT_RETRY_SECONDS
                self._quota.mark_exhausted(token, self._quota.now() + delay)
            return True
        return state is not None and state.remaining <= 0 and response.status_code == 403

    def _exhausted_message(self, token: str) -> str:
        reset = self._quota.exhausted_until(token) or 0
        return f"Token {obscure(token)} exhausted, resets at {_reset_iso(reset)}"

    async def read(self, path: str, cache_key: str) -> ProxyResponse:
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        image = is_image_path(path)
        header, ttl = cache_control(
            path, self._image_cache_seconds, self._listing_cache_seconds
        )
        last_error: str | None = None
        for token in self._quota.usable(self._tokens):
            try:
                upstream = await self._backend.get_contents(token, path, raw=image)
            except httpx.HTTPError as exc:
                last_error = f"Upstream error: {exc}"
                Log.warning(f"Read via {obscure(token)} failed: {exc}", component="Proxy")
                continue

            if self._rate_limited(token, upstream):
                last_error = self._exhausted_message(token)
                continue

            if upstream.is_error:
                return ProxyResponse(
                    upstream.status_code,
                    upstream.content,
                    upstream.headers.get("Content-Type", "application/json"),
                )

            if image:
                media_type = mimetypes.guess_type(path)[0] or "image/jpeg"
            else:
                media_type = "application/json"
            response = ProxyResponse(
                upstream.status_code,
                upstream.content,
                media_type,
                headers={"Cache-Control": header},
            )
            self._cache.put(cache_key, response, ttl)
            return response

        return _text_response(
            429,
            f"All tokens are rate limited. Try again after reset. Last error: {last_error}",
        )

    async def write(self, path: str, body: bytes) -> ProxyResponse:
        content = base64.b64encode(body).decode("ascii")
        last_error: str | None = None

        for token in self._quota.usable(self._tokens):
            try:
                sha, lookup = await self._backend.get_sha(token, path)
                if self._rate_limited(token, lookup):
                    last_error = self._exhausted_message(token)
                    continue
                upstream = await self._backend.put_contents(token, path, content, sha)
            except httpx.HTTPError as exc:
                last_error = f"Upstream error: {exc}"
                Log.warning(f"Write via {obscure(token)} failed: {exc}", component="Proxy")
                continue

            if upstream.status_code in (200, 201):
                self._quota.observe(token, upstream)
                Log.info(f"Stored {path} via {obscure(token)}", component="Proxy")
                return ProxyResponse(upstream.status_code, upstream.content, "application/json")

            if self._rate_limited(token, upstream):
                last_error = self._exhausted_message(token)
            else:
                last_error = upstream.text
            Log.warning(
                f"Write of {path} via {obscure(token)} failed with "
                f"{upstream.status_code}",
                component="Proxy",
            )

        return _text_response(429, f"All tokens failed. Last error: {last_error}")

    async def stats(self) -> dict[str, Any]:
        total_remaining = 0
        total_limit = 0
        details: list[dict[str, Any]] = []

        for token in self._tokens:
            state = self._quota.fresh_state(token)
            if state is None:
                state = await self._refresh_quota(token)
            if state is None:
                details.append({"token": obscure(token), "error": "quota unavailable"})
                continue
            total_remaining += state.remaining
            total_limit += state.limit
            details.append(
                {
                    "token": obscure(token),
                    "remaining": state.remaining,
                    "limit": state.limit,
                    "reset": state.reset,
                }
            )

        percent = (total_remaining / total_limit * 100) if total_limit else 0.0
        return {
            "totalRemaining": total_remaining,
            "totalLimit": total_limit,
            "percent": f"{percent:.2f}%",
            "details": details,
        }

    async def _refresh_quota(self, token: str) -> CredentialQuotaState | None:
        try:
            response = await self._backend.rate_limit(token)
            response.raise_for_status()
            core = response.json()["resources"]["core"]
            return self._quota.record(
                token, int(core["remaining"]), int(core["limit"]), int(core["reset"])
            )
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            Log.warning(f"Quota lookup for {obscure(token)} failed: {exc}", component="Stats")
            return self._quota.state(token)
