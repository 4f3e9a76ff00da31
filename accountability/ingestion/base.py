"""
Base source adapter with HTTP client, pagination and credential handling.

Every adapter fetches raw records from one upstream and turns each into
exactly one normalized fact. Adapters share no mutable state, so several can
run concurrently on one event loop.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import (
    Any,
    AsyncGenerator,
    Awaitable,
    Callable,
    Generic,
    List,
    NamedTuple,
    Optional,
    TypeVar,
)

import httpx

from accountability.config.settings import SourceConfig
from accountability.exceptions import MissingCredential, SourceUnavailable
from accountability.models.facts import SourceKind
from accountability.models.report import MalformedRecord
from accountability.storage.normalization import parse_number

T = TypeVar('T')

# Awaitable sleep; tests pass a no-op to skip rate limiting
DelayStrategy = Callable[[float], Awaitable[None]]


class Page(NamedTuple):
    """One page of upstream results."""
    items: List[dict]
    has_next: bool


async def no_delay(seconds: float) -> None:
    """Delay strategy that never waits."""
    return None


class BaseSourceAdapter(ABC, Generic[T]):
    """
    Base class for all source adapters.

    Subclasses implement ``fetch_data`` (an async generator of raw records)
    and ``transform`` (raw record -> fact). Callers use ``fetch``.
    """

    name: str = "source"
    source_kind: SourceKind
    requires_credential: bool = True

    def __init__(
        self,
        config: SourceConfig,
        client: Optional[httpx.AsyncClient] = None,
        delay: Optional[DelayStrategy] = None,
    ):
        """
        Args:
            config: Base URL, credential, congress and paging for this upstream
            client: Shared HTTP client; when None the adapter opens its own
                    for the duration of each fetch
            delay: Inter-page sleep, defaults to asyncio.sleep
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.client = client
        self._owns_client = False
        self._delay = delay or asyncio.sleep
        self.anomalies: List[MalformedRecord] = []
        self.reset_stats()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self):
        """Open an HTTP client unless one was injected."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True

    async def disconnect(self):
        """Close the HTTP client if this adapter opened it."""
        if self._owns_client and self.client is not None:
            await self.client.aclose()
            self.client = None
            self._owns_client = False

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def check_credential(self):
        """
        Raises:
            MissingCredential: If this source needs a key and has none
        """
        if self.requires_credential and not self.config.credential():
            raise MissingCredential(
                message="no API key configured",
                source=self.name,
            )

    def auth_params(self) -> dict:
        """Query parameters carrying the credential (if the source uses them)."""
        return {}

    def auth_headers(self) -> dict:
        """Headers carrying the credential (if the source uses them)."""
        return {}

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def get(
        self,
        url: str,
        params: Optional[dict] = None,
        *,
        not_found_ok: bool = False,
    ) -> Optional[httpx.Response]:
        """
        GET with credentials attached.

        Args:
            url: Endpoint without query string (safe to log)
            params: Extra query parameters
            not_found_ok: Return None on 404 instead of failing

        Returns:
            The response, or None for an accepted 404

        Raises:
            SourceUnavailable: On transport errors, timeouts and non-2xx statuses
        """
        request_params = {**self.auth_params(), **(params or {})}
        try:
            response = await self.client.get(
                url,
                params=request_params,
                headers=self.auth_headers(),
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            raise SourceUnavailable(
                message=f"timed out after {self.config.timeout}s",
                source=self.name,
                endpoint=url,
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailable(
                message=f"{e.__class__.__name__}: {e}",
                source=self.name,
                endpoint=url,
            ) from e

        if response.status_code == 404 and not_found_ok:
            self.logger.debug(f"Not found: {url}")
            return None

        if not response.is_success:
            raise SourceUnavailable(
                message=response.reason_phrase or "request failed",
                source=self.name,
                endpoint=url,
                status_code=response.status_code,
            )
        return response

    async def get_json(
        self,
        url: str,
        params: Optional[dict] = None,
        *,
        not_found_ok: bool = False,
        expect: Optional[type] = None,
    ) -> Optional[Any]:
        """
        GET and decode JSON; None for an accepted 404.

        Args:
            expect: Required top-level type (dict or list); anything else
                    means the upstream answered with something we cannot read

        Raises:
            SourceUnavailable: On request failure, undecodable JSON or a
                               payload that is not of the expected type
        """
        response = await self.get(url, params, not_found_ok=not_found_ok)
        if response is None:
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise SourceUnavailable(
                message=f"invalid JSON: {e}",
                source=self.name,
                endpoint=url,
                status_code=response.status_code,
            ) from e

        if expect is not None and not isinstance(data, expect):
            raise SourceUnavailable(
                message=(
                    f"unexpected payload shape: expected {expect.__name__}, "
                    f"got {type(data).__name__}"
                ),
                source=self.name,
                endpoint=url,
                status_code=response.status_code,
            )
        return data

    async def get_text(self, url: str, params: Optional[dict] = None) -> str:
        """GET and return the body as text (CSV sources)."""
        response = await self.get(url, params)
        return response.text

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    async def sleep(self):
        """Rate-limit pause between pages."""
        if self.config.rate_limit_delay > 0:
            await self._delay(self.config.rate_limit_delay)

    async def paginate(
        self,
        fetch_page: Callable[[int], Awaitable[Page]],
        max_pages: Optional[int] = None,
    ) -> AsyncGenerator[dict, None]:
        """
        Request pages in order until the upstream runs out.

        Stops when a page reports no next page OR returns fewer items than
        the configured page size. Page N+1 is only requested after every item
        of page N has been consumed.

        Args:
            fetch_page: Coroutine taking the 0-based page index
            max_pages: Optional hard cap on pages requested

        Yields:
            Raw records, in upstream order
        """
        page_size = self.config.page_size
        index = 0

        while True:
            page = await fetch_page(index)
            self.stats["pages"] += 1

            if not isinstance(page.items, list):
                raise SourceUnavailable(
                    message=f"unexpected page shape: {type(page.items).__name__} instead of a list",
                    source=self.name,
                    endpoint=self.config.base_url,
                )

            for item in page.items:
                yield item

            if not page.has_next or len(page.items) < page_size:
                break

            index += 1
            if max_pages is not None and index >= max_pages:
                self.logger.info(f"Reached max_pages limit ({max_pages})")
                break

            await self.sleep()

    # ------------------------------------------------------------------
    # Record-level helpers
    # ------------------------------------------------------------------

    def record_malformed(self, field: str, value: Any, fallback):
        """Note a field that could not be parsed; the fallback is used instead."""
        self.stats["malformed"] += 1
        self.anomalies.append(
            MalformedRecord(source=self.name, field=field, value=str(value), fallback=fallback)
        )
        self.logger.debug(f"Malformed {field}={value!r}, using {fallback!r}")

    def coerce_number(self, raw: dict, field: str, fallback=None, cast=float):
        """
        Read a numeric-as-string field.

        Missing or blank values become ``fallback`` silently; unparseable
        values become ``fallback`` and are recorded as malformed.
        """
        value = raw.get(field)
        try:
            number = parse_number(value, cast)
        except ValueError:
            self.record_malformed(field, value, fallback)
            return fallback
        return fallback if number is None else number

    # ------------------------------------------------------------------
    # ETL
    # ------------------------------------------------------------------

    @abstractmethod
    async def fetch_data(self, **kwargs) -> AsyncGenerator[dict, None]:
        """
        Fetch raw records from the upstream.

        Yields:
            Raw data dictionaries from the source
        """
        yield {}

    @abstractmethod
    def transform(self, raw: dict) -> T:
        """
        Transform one raw record into one fact.

        Raises:
            ValueError: If the record cannot produce a fact at all
        """

    async def fetch(self, **kwargs) -> List[T]:
        """
        Fetch and transform every record.

        Args:
            **kwargs: Passed to fetch_data()

        Returns:
            Facts in upstream order

        Raises:
            MissingCredential: Before any network call, if a key is required and absent
            SourceUnavailable: If any request fails; facts already built are discarded
                               with the invocation, never half-returned
        """
        self.check_credential()
        self.reset_stats()

        self.logger.info(f"Starting {self.name}...")
        self.stats["started_at"] = datetime.now(timezone.utc)
        facts: List[T] = []

        try:
            await self.connect()

            async for raw in self.fetch_data(**kwargs):
                self.stats["fetched"] += 1
                if not isinstance(raw, dict):
                    self.stats["skipped"] += 1
                    self.record_malformed("record", raw, None)
                    self.logger.warning(f"Skipping non-object record: {raw!r}")
                    continue
                try:
                    facts.append(self.transform(raw))
                except ValueError as e:
                    self.stats["skipped"] += 1
                    self.record_malformed("record", raw, None)
                    self.logger.warning(f"Skipping unusable record: {e}")

        finally:
            self.stats["completed_at"] = datetime.now(timezone.utc)
            duration = self.stats["completed_at"] - self.stats["started_at"]
            self.logger.info(
                f"{self.name} complete. "
                f"Fetched: {self.stats['fetched']}, "
                f"Facts: {len(facts)}, "
                f"Malformed: {self.stats['malformed']}, "
                f"Pages: {self.stats['pages']}, "
                f"Duration: {duration}"
            )
            await self.disconnect()

        return facts

    def reset_stats(self):
        """Reset statistics counters"""
        self.stats = {
            "fetched": 0,
            "malformed": 0,
            "skipped": 0,
            "pages": 0,
            "started_at": None,
            "completed_at": None
        }
        self.anomalies = []
