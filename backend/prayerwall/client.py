"""
Prayer Wall — API Client (page widget data layer)
===================================================

What:  Async client that does what the memorial page's prayer form does:
       load the list, submit prayers, retry on demand, refresh periodically.
How:   httpx.AsyncClient for HTTP, an in-memory cache keyed by prayer id,
       and an asyncio task for the periodic refresh.
Who:   Scripts, kiosks and tests that need the page's behaviour without a
       browser.

Cache coherency:
    Every listing is merged into the cache instead of replacing it:
    - the server copy of a prayer replaces the cached one (last writer wins)
    - prayers missing from a listing are evicted, EXCEPT prayers this client
      submitted after that listing was requested (the listing could not
      have seen them yet)
    - a listing requested before an already-applied listing is discarded,
      so overlapping refreshes cannot roll the view back

Usage:
    async with PrayerWallClient("https://example.org") as wall:
        await wall.submit("Ya Rab", name="Sara")
        for prayer in wall.prayers:
            print(prayer.timestamp, prayer.text)
"""

import asyncio
import itertools
import logging
import time
from typing import Dict, Iterable, List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from prayerwall.schemas.prayer import PrayerResponse

logger = logging.getLogger(__name__)

PRAYERS_PATH = "/api/prayers"

# Refresh every 5 minutes to pick up prayers from other visitors
DEFAULT_POLL_INTERVAL = 5 * 60.0

NO_CACHE_REQUEST_HEADERS = {
    "Pragma": "no-cache",
    "Cache-Control": "no-cache, no-store, must-revalidate",
}

LOAD_FAILED_MESSAGE = "Failed to load prayers. Please try again."
SUBMIT_FAILED_MESSAGE = "Failed to submit your prayer. Please try again."
DELETE_FAILED_MESSAGE = "Failed to remove the prayer. Please try again."

TRACKING_PARAMS = ("fbclid",)


class PrayerWallAPIError(Exception):
    """A non-success HTTP status from the prayers API."""

    def __init__(self, status_code: int, message: str, details: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(message)


def strip_tracking_params(url: str, params: Iterable[str] = TRACKING_PARAMS) -> str:
    """
    Return `url` without the given tracking query parameters.

    Other parameters keep their order; the URL is returned unchanged when
    none of `params` is present.
    """
    parts = urlsplit(url)
    drop = set(params)
    query = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(key, value) for key, value in query if key not in drop]
    if len(kept) == len(query):
        return url
    return urlunsplit(parts._replace(query=urlencode(kept)))


def _debug_info(exc: Exception) -> str:
    return f"Error type: {type(exc).__name__}, Message: {exc}"


def _api_error(response: httpx.Response) -> PrayerWallAPIError:
    """Build the error for a failed response; the body may not be JSON."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    error = body.get("error")
    details = body.get("details")
    return PrayerWallAPIError(
        status_code=response.status_code,
        message=str(details or error or response.reason_phrase),
        details=details,
    )


# Failures the widget shows to the user instead of raising
CLIENT_ERRORS = (PrayerWallAPIError, httpx.HTTPError, ValueError)


class PrayerWallClient:
    """
    Client-side state for the prayer list.

    State (read by a UI):
        prayers:        cached prayers, newest first
        is_loading:     a listing request is in flight
        is_retrying:    a manual retry is in flight
        is_submitting:  a submission is in flight (submit button disabled)
        error:          last user-facing error message, or None
        debug_info:     exception type and message behind `error`

    Args:
        base_url:       Root URL of the backend
        http_client:    Optional pre-built httpx.AsyncClient (not closed by us)
        poll_interval:  Seconds between background refreshes
        timeout:        Per-request timeout when we build the httpx client
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: Optional[httpx.AsyncClient] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = 10.0,
    ):
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.poll_interval = poll_interval

        self._cache: Dict[str, PrayerResponse] = {}
        self._order: List[str] = []
        # id → listing sequence number current when the submission landed
        self._pending: Dict[str, int] = {}

        self._seq = 0
        self._applied_seq = 0
        self._in_flight = 0
        self._buster = itertools.count()
        self._poll_task: Optional[asyncio.Task] = None

        self.is_retrying = False
        self.is_submitting = False
        self.error: Optional[str] = None
        self.debug_info: Optional[str] = None

    # ── Context manager: mount / unmount ──────────────────────────────────

    async def __aenter__(self) -> "PrayerWallClient":
        await self.load()
        self.start_polling()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.stop_polling()
        if self._owns_http:
            await self._http.aclose()

    # ── Cached view ───────────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def prayers(self) -> List[PrayerResponse]:
        """Locally submitted prayers not yet listed, then the server order."""
        ids = list(reversed(list(self._pending)))
        ids.extend(pid for pid in self._order if pid not in self._pending)
        return [self._cache[pid] for pid in ids if pid in self._cache]

    # ── Raw API calls ─────────────────────────────────────────────────────

    def _cache_buster(self) -> str:
        return f"{int(time.time() * 1000)}-{next(self._buster)}"

    async def fetch_prayers(self) -> List[PrayerResponse]:
        """
        GET /api/prayers with a unique `_` parameter and no-cache headers.

        Raises:
            PrayerWallAPIError on a non-success status, httpx.HTTPError on
            transport failures, ValueError on an unreadable body.
        """
        buster = self._cache_buster()
        logger.debug("Fetching prayers with cache buster %s", buster)
        response = await self._http.get(
            PRAYERS_PATH,
            params={"_": buster},
            headers=NO_CACHE_REQUEST_HEADERS,
        )
        if not response.is_success:
            error = _api_error(response)
            raise PrayerWallAPIError(
                status_code=error.status_code,
                message=f"Failed to fetch prayers: {error.status_code} {error.message}",
                details=error.details,
            )
        data = response.json()
        if not isinstance(data, list):
            raise ValueError("Prayer listing is not a JSON array")
        prayers = [PrayerResponse.model_validate(item) for item in data]
        logger.info("Fetched %d prayers from API", len(prayers))
        return prayers

    async def save_prayer(self, text: str, name: Optional[str] = None) -> PrayerResponse:
        """POST /api/prayers; returns the stored record."""
        payload = {"text": text}
        if name:
            payload["name"] = name
        response = await self._http.post(PRAYERS_PATH, json=payload)
        if not response.is_success:
            raise _api_error(response)
        return PrayerResponse.model_validate(response.json())

    async def remove_prayer(self, prayer_id: str) -> None:
        """DELETE /api/prayers?id=..."""
        response = await self._http.delete(PRAYERS_PATH, params={"id": prayer_id})
        if not response.is_success:
            raise _api_error(response)

    # ── Widget actions ────────────────────────────────────────────────────

    async def load(self) -> bool:
        """
        Fetch the listing and merge it into the cache.

        Returns True on success. On failure the cached prayers stay as they
        were, `error`/`debug_info` are set, and False is returned.
        """
        self._seq += 1
        seq = self._seq
        self._in_flight += 1
        self.error = None
        self.debug_info = None

        try:
            fetched = await self.fetch_prayers()
        except CLIENT_ERRORS as e:
            logger.error("Failed to fetch prayers: %s", e)
            self.error = str(e) or LOAD_FAILED_MESSAGE
            self.debug_info = _debug_info(e)
            return False
        finally:
            self._in_flight -= 1
            if not self._in_flight:
                self.is_retrying = False

        self._merge(fetched, seq)
        return True

    async def retry(self) -> bool:
        """Manual retry after a failed load."""
        self.is_retrying = True
        return await self.load()

    async def submit(self, text: str, name: Optional[str] = None) -> Optional[PrayerResponse]:
        """
        Share a prayer and put the stored record at the top of the list.

        Returns the record, or None when nothing was sent (blank text, a
        submission already in flight) or the request failed. The caller
        clears its input only when a record comes back.
        """
        if not text or not text.strip():
            return None
        if self.is_submitting:
            return None

        self.is_submitting = True
        self.error = None
        try:
            prayer = await self.save_prayer(text, (name or "").strip() or None)
        except CLIENT_ERRORS as e:
            logger.error("Failed to submit prayer: %s", e)
            self.error = SUBMIT_FAILED_MESSAGE
            self.debug_info = _debug_info(e)
            return None
        finally:
            self.is_submitting = False

        self._cache[prayer.id] = prayer
        self._pending.pop(prayer.id, None)
        self._pending[prayer.id] = self._seq
        return prayer

    async def delete(self, prayer_id: str) -> bool:
        """Remove a prayer on the server and from the cache."""
        self.error = None
        try:
            await self.remove_prayer(prayer_id)
        except CLIENT_ERRORS as e:
            logger.error("Failed to delete prayer %s: %s", prayer_id, e)
            self.error = DELETE_FAILED_MESSAGE
            self.debug_info = _debug_info(e)
            return False

        self._cache.pop(prayer_id, None)
        self._pending.pop(prayer_id, None)
        if prayer_id in self._order:
            self._order.remove(prayer_id)
        return True

    def _merge(self, fetched: List[PrayerResponse], seq: int) -> None:
        if seq < self._applied_seq:
            logger.debug("Discarding stale listing %d (applied %d)", seq, self._applied_seq)
            return
        self._applied_seq = seq

        listed_ids = [prayer.id for prayer in fetched]
        listed = set(listed_ids)

        for pid, submitted_at in list(self._pending.items()):
            # Listed: the server view now covers it. Requested after the
            # submission yet absent: it has been removed since.
            if pid in listed or seq > submitted_at:
                del self._pending[pid]

        for prayer in fetched:
            self._cache[prayer.id] = prayer
        for pid in list(self._cache):
            if pid not in listed and pid not in self._pending:
                del self._cache[pid]

        self._order = listed_ids

    # ── Background refresh ────────────────────────────────────────────────

    def start_polling(self, interval: Optional[float] = None) -> None:
        """Start the periodic refresh task (no-op if already running)."""
        if self._poll_task is not None and not self._poll_task.done():
            return
        self._poll_task = asyncio.create_task(
            self._poll_loop(interval if interval is not None else self.poll_interval)
        )

    async def stop_polling(self) -> None:
        """Cancel the periodic refresh task and wait for it to finish."""
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def _poll_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            logger.info("Auto-refreshing prayers")
            try:
                await self.load()
            except Exception:
                # unexpected errors are logged; the loop keeps running
                logger.exception("Auto-refresh failed")
