"""Request lifecycle for the product listing and the category list.

Each logical stream issues requests under a RequestToken. Issuing a new
request supersedes the current one: its task is cancelled and, should its
result still arrive, it is discarded because its token is no longer current.
Only the current token may write to visible state.

Entry points: FetchCoordinator.issue(), FetchCoordinator.load_categories()
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .client import AbstractCatalogClient, CatalogError
from .config import FETCH_ERROR_MESSAGE
from .models import Category, ListingView, QueryDescriptor, ResultPage

logger = logging.getLogger(__name__)

ViewListener = Callable[[ListingView], None]


class StreamState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class RequestToken:
    stream: str
    serial: int


class RequestStream:
    """Token bookkeeping for one stream: at most one current token at a time."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.state = StreamState.IDLE
        # Outcome of the most recent finished request, for diagnostics.
        self.last_outcome: Optional[StreamState] = None
        self.current: Optional[RequestToken] = None
        self._serials = itertools.count(1)
        self._task: Optional[asyncio.Task] = None

    def begin(self) -> RequestToken:
        self.cancel()
        token = RequestToken(stream=self.name, serial=next(self._serials))
        self.current = token
        self.state = StreamState.PENDING
        return token

    def attach(self, token: RequestToken, task: asyncio.Task) -> None:
        if token == self.current:
            self._task = task

    def is_current(self, token: RequestToken) -> bool:
        return token == self.current

    def finish(self, token: RequestToken, outcome: StreamState) -> bool:
        """Close out `token`; returns False if it had already been superseded."""
        if not self.is_current(token):
            return False
        self.current = None
        self._task = None
        self.last_outcome = outcome
        self.state = StreamState.IDLE
        return True

    def cancel(self) -> None:
        """Supersede whatever is in flight."""
        if self.current is not None:
            logger.debug("Superseding %s request #%d", self.name, self.current.serial)
            self.last_outcome = StreamState.SUPERSEDED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.current = None
        self._task = None
        self.state = StreamState.IDLE

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task


class FetchCoordinator:
    """Owns listing/category fetches and the state they produce."""

    def __init__(self, client: AbstractCatalogClient) -> None:
        self._client = client
        self.listing = RequestStream("listing")
        self.category_stream = RequestStream("categories")
        self.view = ListingView()
        self.categories: Tuple[Category, ...] = ()
        self.descriptor: Optional[QueryDescriptor] = None
        self._listeners: List[ViewListener] = []
        self._closed = False

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register a view listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, view: ListingView) -> None:
        self.view = view
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                # Listener errors never reach the fetch task.
                logger.exception("View listener %r failed", listener)

    def issue(self, descriptor: QueryDescriptor, force: bool = False) -> Optional[RequestToken]:
        """Start fetching `descriptor`, superseding any listing request in flight.

        Re-issuing the descriptor already in effect is a no-op unless `force` is set.
        """
        if self._closed:
            logger.debug("Coordinator closed, ignoring %s", descriptor)
            return None
        if not force and descriptor == self.descriptor:
            return None

        self.descriptor = descriptor
        token = self.listing.begin()
        logger.debug("Issuing listing request #%d: %s", token.serial, descriptor)
        # Loading on and error off in the same write.
        self._publish(replace(self.view, loading=True, error=None))
        task = asyncio.get_running_loop().create_task(self._run_listing(token, descriptor))
        self.listing.attach(token, task)
        return token

    def refresh(self) -> Optional[RequestToken]:
        if self.descriptor is None:
            return None
        return self.issue(self.descriptor, force=True)

    async def _run_listing(self, token: RequestToken, descriptor: QueryDescriptor) -> None:
        try:
            page = await self._client.fetch_page(descriptor)
        except CatalogError as e:
            self._fail_listing(token, e)
            return
        except asyncio.CancelledError:
            # Superseded or torn down; nothing to apply.
            raise
        except Exception as e:
            logger.exception("Unexpected error fetching %s", descriptor)
            self._fail_listing(token, e)
            return
        self._apply_listing(token, page)

    def _apply_listing(self, token: RequestToken, page: ResultPage) -> None:
        if not self.listing.finish(token, StreamState.SUCCEEDED):
            logger.debug("Discarding stale listing response #%d", token.serial)
            return
        logger.info("Applied listing page: %d items of %d", len(page.items), page.total)
        self._publish(ListingView(products=page.items, total=page.total, loading=False, error=None))

    def _fail_listing(self, token: RequestToken, error: Exception) -> None:
        if not self.listing.finish(token, StreamState.FAILED):
            logger.debug("Discarding stale listing failure #%d: %s", token.serial, error)
            return
        logger.warning("Listing fetch failed: %s", error)
        self._publish(ListingView(products=(), total=0, loading=False, error=FETCH_ERROR_MESSAGE))

    def load_categories(self) -> Optional[RequestToken]:
        """One-shot category fetch; failures leave the category list empty."""
        if self._closed:
            return None
        token = self.category_stream.begin()
        task = asyncio.get_running_loop().create_task(self._run_categories(token))
        self.category_stream.attach(token, task)
        return token

    async def _run_categories(self, token: RequestToken) -> None:
        try:
            categories = await self._client.list_categories()
        except CatalogError as e:
            if self.category_stream.finish(token, StreamState.FAILED):
                logger.warning("Categories fetch failed: %s", e)
                self.categories = ()
            return
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Unexpected error fetching categories")
            if self.category_stream.finish(token, StreamState.FAILED):
                self.categories = ()
            return
        if self.category_stream.finish(token, StreamState.SUCCEEDED):
            self.categories = tuple(categories)

    async def wait(self) -> None:
        """Wait until neither stream has a request in flight."""
        while True:
            tasks = [
                t for t in (self.listing.task, self.category_stream.task)
                if t is not None and not t.done()
            ]
            if not tasks:
                return
            # A cancelled (superseded) task is expected here.
            await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        """Tear down: cancel everything in flight and stop publishing."""
        self._closed = True
        self.listing.cancel()
        self.category_stream.cancel()
        if self.view.loading:
            self.view = replace(self.view, loading=False)
