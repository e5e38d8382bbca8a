"""
Pagination driver.

The server's ``meta.pagination.next_page`` is the only continuation signal:
the driver never computes ``page + 1`` itself. Errors raised by the fetch
function propagate immediately (rate limit retries already happened inside
the execution engine for that page).
"""

from typing import Awaitable, Callable, Iterator

from .response import Response

PageFetcher = Callable[[int], Response]
AsyncPageFetcher = Callable[[int], Awaitable[Response]]

FIRST_PAGE = 1


def next_page(response: Response) -> int:
    """Next page advertised by the server, 0 if there is none."""
    pagination = response.meta.pagination
    if pagination is None:
        return 0
    return pagination.next_page


def iter_pages(fetch: PageFetcher) -> Iterator[Response]:
    """
    Yield the response of every page, starting at page 1.

    Example:
        >>> for response in iter_pages(fetch_servers):
        ...     servers.extend(response.json()["servers"])
    """
    page = FIRST_PAGE
    while True:
        response = fetch(page)
        yield response
        page = next_page(response)
        if not page:
            return


def all_pages(fetch: PageFetcher) -> Response:
    """
    Call ``fetch`` for every page and return the last response.

    Args:
        fetch: Function from page number to Response; typically a closure
            that also collects the page's items

    Example:
        >>> servers = []
        >>> def fetch(page):
        ...     opts = ListOpts(page=page, per_page=50)
        ...     response, body = client.fetch_decoded(
        ...         client.new_request("GET", "/servers?" + opts.to_query()))
        ...     servers.extend(body["servers"])
        ...     return response
        >>> last = all_pages(fetch)
    """
    response = None
    for response in iter_pages(fetch):
        pass
    return response


async def async_all_pages(fetch: AsyncPageFetcher) -> Response:
    """Async version of :func:`all_pages`."""
    page = FIRST_PAGE
    while True:
        response = await fetch(page)
        page = next_page(response)
        if not page:
            return response
