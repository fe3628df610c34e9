"""
Memo API Client

Async httpx wrapper around the HTTP API for programmatic clients (editor
integrations, scripts). Authenticates with the bearer token issued at
login.
"""

from __future__ import annotations

from typing import Any

import httpx

from ai_memo.schemas.ai import AutocompleteResult, GenerateSummaryResult, GenerateTagsResult
from ai_memo.schemas.notes import CreateNoteResult, GetNotesResult

DEFAULT_TIMEOUT = 30.0


class MemoApiClient:
    """
    Thin client for the ``/api/v1`` endpoints.

    Usage:
        async with MemoApiClient("http://localhost:8000", token) as api:
            result = await api.autocomplete("오늘 회의에서")
    """

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/api/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> MemoApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        Raises:
            httpx.HTTPStatusError: On 4xx/5xx responses (e.g. 422 validation).
            httpx.RequestError: On network errors.
        """
        response = await self._client.request(method, url, **kwargs)
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result

    async def autocomplete(self, input_text: str, context: str = "") -> AutocompleteResult:
        data = await self._request(
            "POST", "/ai/autocomplete", json={"input": input_text, "context": context}
        )
        return AutocompleteResult.model_validate(data)

    async def create_note(self, title: str, content: str) -> CreateNoteResult:
        data = await self._request("POST", "/notes/", json={"title": title, "content": content})
        return CreateNoteResult.model_validate(data)

    async def get_notes(self, page: int = 1, sort: str = "newest") -> GetNotesResult:
        data = await self._request("GET", "/notes/", params={"page": page, "sort": sort})
        return GetNotesResult.model_validate(data)

    async def generate_summary(self, note_id: str) -> GenerateSummaryResult:
        data = await self._request("POST", f"/notes/{note_id}/summary")
        return GenerateSummaryResult.model_validate(data)

    async def generate_tags(self, note_id: str, count: int = 6) -> GenerateTagsResult:
        data = await self._request("POST", f"/notes/{note_id}/tags", params={"count": count})
        return GenerateTagsResult.model_validate(data)
