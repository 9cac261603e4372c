"""Lazy pagination over server-paginated collections.

Services disagree on how they announce the next page, so a :class:`Pager` is
parameterized by a link extractor:

| Extractor | Scheme | Used by |
|-----------|--------|---------|
| `next_field("next")` | `{"nodegroups": [...], "next": "<url>"}` | Magnum, Ironic |
| `links_rel("servers_links")` | `{"servers_links": [{"rel": "next", "href": "<url>"}]}` | Nova, Cinder |
| `header_link()` | `Link: <url>; rel="next"` | RFC 8288 services |
| `marker("networks")` | `?marker=<last id>` until an empty page | Neutron, Swift-like |

Example:
    ```python
    pager = client.paginate(
        f"clusters/{cluster_id}/nodegroups",
        items_key="nodegroups",
        link_extractor=next_field("next"),
    )
    for page in pager:
        for node_group in page.items(NodeGroup):
            ...
    ```
"""

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any

import httpx

from openstack_client_core.errors.exceptions import DecodeError, RequestCancelledError
from openstack_client_core.results import Result

logger = logging.getLogger(__name__)


class Page:
    """One page of a collection."""

    def __init__(self, result: Result, items_key: str | None = None, number: int = 1):
        self.result = result
        self.items_key = items_key
        self.number = number

    def __repr__(self) -> str:
        return f"<Page {self.number} {self.url}>"

    @property
    def url(self) -> str | None:
        return self.result.url

    def items(self, shape: Any = Any) -> list:
        """Decode the page's items, each into ``shape``."""
        return self.result.extract_into(list[shape], self.items_key)

    def is_empty(self) -> bool:
        if self.result.is_empty:
            return True
        return len(self.items()) == 0


LinkExtractor = Callable[[Page], str | None]
PageFetcher = Callable[[str], Result]


def _resolve(page: Page, link: Any) -> str | None:
    if not link:
        return None
    if not isinstance(link, str):
        raise DecodeError(f"Pagination link must be a string, got {type(link).__name__}")
    if page.url is None:
        return link
    return str(httpx.URL(page.url).join(link))


def next_field(key: str = "next") -> LinkExtractor:
    """Next-page URL stored in the body; ``key`` may be a dotted path."""
    path = key.split(".")

    def extract(page: Page) -> str | None:
        node = page.result.json()
        for part in path:
            if not isinstance(node, dict):
                return None
            node = node.get(part)
        return _resolve(page, node)

    return extract


def links_rel(links_key: str = "links", rel: str = "next") -> LinkExtractor:
    """Next-page URL in a ``[{"rel": ..., "href": ...}]`` list."""

    def extract(page: Page) -> str | None:
        document = page.result.json()
        links = document.get(links_key) if isinstance(document, dict) else None
        if not isinstance(links, list):
            return None
        for link in links:
            if isinstance(link, dict) and link.get("rel") == rel:
                return _resolve(page, link.get("href"))
        return None

    return extract


def header_link(rel: str = "next") -> LinkExtractor:
    """Next-page URL from an RFC 8288 ``Link`` response header."""

    def extract(page: Page) -> str | None:
        link = page.result.response.links.get(rel)
        if not link:
            return None
        return _resolve(page, link.get("url"))

    return extract


def marker(marker_field: str = "id", marker_param: str = "marker") -> LinkExtractor:
    """Next-page URL built by setting ``marker`` to the last item's id.

    Pagination stops at the first empty page.
    """

    def extract(page: Page) -> str | None:
        items = page.items()
        if not items:
            return None
        last = items[-1]
        if not isinstance(last, dict) or last.get(marker_field) is None:
            raise DecodeError(f"Last item on page {page.number} has no '{marker_field}' to use as marker")
        if page.url is None:
            return None
        return str(httpx.URL(page.url).copy_set_param(marker_param, str(last[marker_field])))

    return extract


class Pager:
    """Lazy, forward-only sequence of pages.

    Each advance performs one blocking fetch using the link extracted from the
    previous page and stops once no link is found. A pager can be iterated
    only once.

    Args:
        fetch: Performs a GET of an absolute URL and returns its Result
        initial: First page as a Result, or its URL to fetch on first advance
        link_extractor: Finds the next page URL on a page
        items_key: Top-level key holding the items (None if the body is a list)
        cancel_event: When set, no further pages are fetched
    """

    def __init__(
        self,
        fetch: PageFetcher,
        initial: Result | str,
        *,
        link_extractor: LinkExtractor,
        items_key: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._fetch = fetch
        self._initial = initial
        self.link_extractor = link_extractor
        self.items_key = items_key
        self.cancel_event = cancel_event
        self._consumed = False

    def __iter__(self) -> Iterator[Page]:
        return self.iter_pages()

    def iter_pages(self) -> Iterator[Page]:
        if self._consumed:
            raise RuntimeError("Pager has already been consumed; create a new one to iterate again")
        self._consumed = True
        return self._generate()

    def _generate(self) -> Iterator[Page]:
        initial, self._initial = self._initial, None
        number = 1
        if isinstance(initial, Result):
            result = initial
        else:
            result = self._fetch_page(initial, number)

        while True:
            page = Page(result, self.items_key, number)
            yield page

            link = self.link_extractor(page)
            if link is None:
                logger.debug(f"Pagination finished after {number} page(s)")
                return
            number += 1
            result = self._fetch_page(link, number)

    def _fetch_page(self, url: str, number: int) -> Result:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RequestCancelledError(f"Pagination cancelled before fetching page {number}")
        logger.debug(f"Fetching page {number}: {url}")
        return self._fetch(url)

    def each_page(self, handler: Callable[[Page], bool | None]) -> None:
        """Call ``handler`` per page; returning ``False`` stops pagination."""
        for page in self.iter_pages():
            if handler(page) is False:
                return

    def all_pages(self) -> list[Page]:
        return list(self.iter_pages())

    def iter_items(self, shape: Any = Any) -> Iterator[Any]:
        for page in self.iter_pages():
            yield from page.items(shape)

    def all_items(self, shape: Any = Any) -> list:
        """Concatenate every page's items in server order."""
        return list(self.iter_items(shape))
