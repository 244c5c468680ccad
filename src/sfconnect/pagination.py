from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .exceptions import PageFieldError
from .request import RequestBuilder

_logger = logging.getLogger(__name__)


def next_page_uri(endpoint: str, next_records_url: str) -> str:
    """Map ``.../query/01gxx-2000`` onto ``<endpoint>/01gxx-2000``."""
    return f"{endpoint}/{next_records_url.rstrip('/').split('/')[-1]}"


def api_request_all_items(
    builder: RequestBuilder,
    property_name: str,
    method: str,
    endpoint: str,
    body: Optional[Any] = None,
    qs: Optional[Dict[str, Any]] = None,
) -> List[Any]:
    """Follow ``nextRecordsUrl`` until exhausted, gathering ``property_name`` items.

    Items are returned in server order. A page without a list under
    ``property_name`` raises :class:`PageFieldError`.
    """
    items: List[Any] = []
    uri: Optional[str] = None
    pages = 0

    while True:
        response = builder.api_request(method, endpoint, body, qs, uri)
        pages += 1

        page = response.get(property_name) if isinstance(response, dict) else None
        if not isinstance(page, list):
            raise PageFieldError(property_name, uri or endpoint)
        items.extend(page)

        next_records_url = response.get("nextRecordsUrl")
        if next_records_url is None:
            break
        uri = next_page_uri(endpoint, next_records_url)
        _logger.debug("Following cursor %s", uri)

    _logger.info("Fetched %d %s over %d page(s) from %s", len(items), property_name, pages, endpoint)
    return items
