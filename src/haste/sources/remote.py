"""Marker-paginated listings as lazy key streams."""

from __future__ import annotations

from typing import Callable, Iterator

from haste.errors import ListingError, TransferError
from haste.logging_config import get_logger
from haste.storage.object_store import ObjectStore

logger = get_logger(__name__)

PageFetcher = Callable[[str | None], list[str]]


def iter_listing(fetch_page: PageFetcher, label: str = "listing") -> Iterator[str]:
    """Yield every key of a paginated listing, fetching the next page lazily.

    Page one is requested without a marker, every later page with the last key
    of the page before it. The first empty page ends the listing. A failure on
    page one raises ``ListingError``; a failure on a later page is logged and
    ends the listing with what was produced so far.
    """
    marker: str | None = None
    page_number = 1
    while True:
        try:
            page = fetch_page(marker)
        except TransferError as exc:
            if page_number == 1:
                raise ListingError(f"Unable to list {label}: {exc}") from exc
            logger.error("Listing aborted: source=%s page=%s marker=%s error=%s", label, page_number, marker, exc)
            return
        if not page:
            logger.debug("Listing complete: source=%s pages=%s", label, page_number)
            return
        if page[-1] == marker:
            # loop trap: the server ignored the marker
            logger.error("Listing aborted: source=%s page=%s marker=%s error=marker did not advance", label, page_number, marker)
            return
        yield from page
        marker = page[-1]
        page_number += 1


def iter_remote_keys(store: ObjectStore) -> Iterator[str]:
    return iter_listing(store.list_objects_page, label=f"container {store.container!r}")


def iter_container_names(store: ObjectStore) -> Iterator[str]:
    return iter_listing(store.list_containers_page, label="account")
