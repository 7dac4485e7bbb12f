"""Remote collection enumeration as a lazy, restartable sequence of pages."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from helpdesk_core.endpoints import get_entity_endpoints

from .api_client import Transport
from .errors import ApiError
from .models import RemoteEntity
from .parser import Parser

logger = logging.getLogger("demo_lifecycle.lister")


@dataclass
class Page:
    collection: str
    url: str
    items: List[RemoteEntity]
    # Pass as ``start_url`` to resume enumeration after this page.
    next_url: Optional[str] = None


class RemoteLister:
    def __init__(self, transport: Transport, page_size: int = 100, parser: Optional[Parser] = None):
        self.transport = transport
        self.page_size = page_size
        self.parser = parser or Parser()
        self.endpoints = get_entity_endpoints()

    def first_url(self, collection: str) -> str:
        definition = self.endpoints[collection]
        if definition.get("supports_pagination") and self.page_size:
            return self.transport.url_for(definition["list"], **{"page[size]": self.page_size})
        return self.transport.url_for(definition["list"])

    @staticmethod
    def _extract_next(payload: Dict[str, Any]) -> Optional[str]:
        # Offset pagination
        if payload.get("next_page"):
            return payload["next_page"]
        # Cursor pagination
        meta = payload.get("meta") or {}
        links = payload.get("links") or {}
        if meta.get("has_more") and links.get("next"):
            return links["next"]
        return None

    async def pages(self, collection: str, start_url: Optional[str] = None) -> AsyncIterator[Page]:
        url: Optional[str] = start_url or self.first_url(collection)
        seen = set()
        while url and url not in seen:
            seen.add(url)
            response = await self.transport.request("GET", url)
            if not response.ok:
                raise ApiError.from_response(response, context=f"{collection} listing")
            payload = response.json()
            raw_items = payload.get(collection) or []
            next_url = self._extract_next(payload)
            logger.debug("Page of %s: %s items (next: %s)", collection, len(raw_items), next_url)
            yield Page(
                collection=collection,
                url=url,
                items=self.parser.parse_many(collection, raw_items),
                next_url=next_url,
            )
            url = next_url

    async def iter_items(self, collection: str, start_url: Optional[str] = None) -> AsyncIterator[RemoteEntity]:
        async for page in self.pages(collection, start_url):
            for item in page.items:
                yield item

    async def list_all(self, collection: str) -> List[RemoteEntity]:
        return [item async for item in self.iter_items(collection)]
