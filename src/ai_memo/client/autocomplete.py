"""
Autocomplete Session

Client-side driver for editor autocomplete: debounces keystrokes, serves
repeated inputs from a short-lived cache and makes sure only the latest
request's response is ever applied.

State (``suggestions``, ``is_loading``, ``is_visible``, ``error``,
``selected_index``) is read by the editor after each call.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ai_memo.schemas.ai import AutocompleteResult, AutocompleteSuggestion

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60
MSG_FETCH_FAILED = "제안을 불러오는 중 오류가 발생했습니다."
MSG_NO_SUGGESTIONS = "제안을 생성할 수 없습니다."

Fetcher = Callable[[str, str], Awaitable[AutocompleteResult]]


@dataclass
class _CacheEntry:
    suggestions: list[AutocompleteSuggestion]
    stored_at: float


class SuggestionCache:
    """
    In-memory TTL cache keyed by normalized input and context.

    Args:
        ttl_seconds: Entry lifetime.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    @staticmethod
    def key(input_text: str, context: str) -> str:
        return f"{input_text.strip().lower()}_{context.strip().lower()}"

    def get(self, input_text: str, context: str) -> list[AutocompleteSuggestion] | None:
        """Cached suggestions, or None. Expired entries are evicted on read."""
        key = self.key(input_text, context)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.suggestions

    def set(
        self,
        input_text: str,
        context: str,
        suggestions: list[AutocompleteSuggestion],
    ) -> None:
        self._entries[self.key(input_text, context)] = _CacheEntry(
            suggestions=suggestions,
            stored_at=self._clock(),
        )

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Shared across sessions, like a page-lifetime cache
default_cache = SuggestionCache()


class AutocompleteSession:
    """
    Debounced, cancellable autocomplete for one editor.

    Args:
        fetcher: Coroutine function ``(input, context) -> AutocompleteResult``,
            typically ``MemoApiClient.autocomplete``.
        debounce_ms: Pause after the last keystroke before requesting.
        max_suggestions: Upper bound on displayed suggestions.
        min_input_length: Shorter inputs never trigger a request.
        enabled: Initial on/off state.
        cache: Suggestion cache (defaults to the module-wide cache).
    """

    def __init__(
        self,
        fetcher: Fetcher,
        debounce_ms: int = 500,
        max_suggestions: int = 3,
        min_input_length: int = 2,
        enabled: bool = True,
        cache: SuggestionCache | None = None,
    ) -> None:
        self._fetcher = fetcher
        self.debounce_ms = debounce_ms
        self.max_suggestions = max_suggestions
        self.min_input_length = min_input_length
        self.is_enabled = enabled
        self.cache = cache if cache is not None else default_cache

        self.suggestions: list[AutocompleteSuggestion] = []
        self.is_loading = False
        self.is_visible = False
        self.error: str | None = None
        self.selected_index = 0

        self._debounce_task: asyncio.Task[None] | None = None
        self._request_task: asyncio.Future[AutocompleteResult] | None = None
        self._request_id = 0

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input_change(self, value: str, context: str = "") -> None:
        """
        Register a keystroke.

        Hides current suggestions and restarts the debounce timer; the
        request fires only once the input has been stable for
        ``debounce_ms``. Must be called from a running event loop.
        """
        self.error = None
        self._hide()
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(
            self._debounced(value, context)
        )

    async def wait(self) -> None:
        """Wait until the pending debounce (and its request) has finished."""
        if self._debounce_task is not None:
            await asyncio.gather(self._debounce_task, return_exceptions=True)

    async def _debounced(self, value: str, context: str) -> None:
        await asyncio.sleep(self.debounce_ms / 1000)
        if value:
            await self._generate(value, context)
        else:
            self._hide()

    async def _generate(self, value: str, context: str) -> None:
        if not self.is_enabled or len(value) < self.min_input_length:
            self._hide()
            return

        cached = self.cache.get(value, context)
        if cached is not None:
            self._show(cached)
            return

        if self._request_task is not None and not self._request_task.done():
            self._request_task.cancel()

        self._request_id += 1
        request_id = self._request_id
        request = asyncio.ensure_future(self._fetcher(value, context))
        self._request_task = request

        self.is_loading = True
        self.error = None
        try:
            result = await request
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return
        except Exception:
            if request_id != self._request_id:
                return
            logger.exception("Autocomplete request failed")
            self.error = MSG_FETCH_FAILED
            self._hide()
            return
        finally:
            if request_id == self._request_id:
                self.is_loading = False

        # Superseded by a newer request
        if request_id != self._request_id:
            return

        if result.success and result.suggestions:
            suggestions = result.suggestions[: self.max_suggestions]
            self.cache.set(value, context, suggestions)
            self._show(suggestions)
        else:
            self.error = result.error or MSG_NO_SUGGESTIONS
            self._hide()

    # ------------------------------------------------------------------
    # Selection and navigation
    # ------------------------------------------------------------------

    def select_suggestion(self, suggestion: AutocompleteSuggestion) -> str:
        """Accept a suggestion; returns the text to insert."""
        self._hide()
        self.error = None
        return suggestion.text

    def dismiss(self) -> None:
        self.is_visible = False
        self.error = None

    def navigate(self, key: str) -> None:
        """Move the highlighted suggestion with ArrowDown / ArrowUp (wrapping)."""
        if not self.is_visible or not self.suggestions:
            return
        count = len(self.suggestions)
        if key == "ArrowDown":
            self.selected_index = (self.selected_index + 1) % count
        elif key == "ArrowUp":
            self.selected_index = (self.selected_index - 1 + count) % count

    def clear_error(self) -> None:
        self.error = None

    def set_enabled(self, enabled: bool) -> None:
        self.is_enabled = enabled
        if not enabled:
            self._cancel_all()
            self._hide()
            self.is_loading = False
            self.error = None

    async def aclose(self) -> None:
        """Cancel the pending debounce and any in-flight request."""
        self._cancel_all()
        pending = [t for t in (self._debounce_task, self._request_task) if t is not None]
        await asyncio.gather(*pending, return_exceptions=True)
        self.is_loading = False

    # ------------------------------------------------------------------
    # Internal state helpers
    # ------------------------------------------------------------------

    def _show(self, suggestions: list[AutocompleteSuggestion]) -> None:
        self.suggestions = suggestions[: self.max_suggestions]
        self.is_visible = bool(self.suggestions)
        self.selected_index = 0

    def _hide(self) -> None:
        self.suggestions = []
        self.is_visible = False
        self.selected_index = 0

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()

    def _cancel_all(self) -> None:
        self._cancel_debounce()
        if self._request_task is not None and not self._request_task.done():
            self._request_task.cancel()
        # Invalidate any response still on its way
        self._request_id += 1
