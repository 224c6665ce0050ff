"""Short links: listing, creating, updating, deleting and visit statistics."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .transport import ApiError, DecodeError, Requester, call, decode

_SHORT_LINKS = "/api/v4/short_links"


def _object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    return data


@dataclass
class ShortLink:
    """A short link, optionally tied to an entity."""

    id: int = 0
    url: str = ""
    key: str = ""
    short_url: str = ""
    account_id: int = 0
    entity_id: int = 0
    entity_type: str = ""
    created_at: int = 0
    created_by: int = 0
    updated_at: int = 0
    metadata_id: int = 0
    visit_count: int = 0
    last_visit_at: int = 0
    expire_at: int = 0
    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_content: str = ""
    utm_term: str = ""
    use_in_embedded: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        data["url"] = self.url
        optional: dict[str, Any] = {
            "key": self.key,
            "short_url": self.short_url,
            "account_id": self.account_id,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "updated_at": self.updated_at,
            "metadata_id": self.metadata_id,
            "visit_count": self.visit_count,
            "last_visit_at": self.last_visit_at,
            "expire_at": self.expire_at,
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
            "utm_content": self.utm_content,
            "utm_term": self.utm_term,
            "use_in_embedded": self.use_in_embedded,
        }
        data.update((key, value) for key, value in optional.items() if value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> ShortLink:
        data = _object(data)
        return cls(
            id=data.get("id") or 0,
            url=data.get("url") or "",
            key=data.get("key") or "",
            short_url=data.get("short_url") or "",
            account_id=data.get("account_id") or 0,
            entity_id=data.get("entity_id") or 0,
            entity_type=data.get("entity_type") or "",
            created_at=data.get("created_at") or 0,
            created_by=data.get("created_by") or 0,
            updated_at=data.get("updated_at") or 0,
            metadata_id=data.get("metadata_id") or 0,
            visit_count=data.get("visit_count") or 0,
            last_visit_at=data.get("last_visit_at") or 0,
            expire_at=data.get("expire_at") or 0,
            utm_source=data.get("utm_source") or "",
            utm_medium=data.get("utm_medium") or "",
            utm_campaign=data.get("utm_campaign") or "",
            utm_content=data.get("utm_content") or "",
            utm_term=data.get("utm_term") or "",
            use_in_embedded=bool(data.get("use_in_embedded")),
        )


@dataclass
class ShortLinkFilter:
    """Filter parameters for listing short links."""

    entity_id: int = 0
    entity_type: str = ""
    created_by: int = 0

    def to_params(self) -> dict[str, str]:
        """Query parameters for the set fields."""
        fields = {
            "filter[entity_id]": self.entity_id,
            "filter[entity_type]": self.entity_type,
            "filter[created_by]": self.created_by,
        }
        return {key: str(value) for key, value in fields.items() if value}


def _embedded_links(data: Any) -> list[ShortLink]:
    data = _object(data)
    embedded = _object(data.get("_embedded") or {})
    return [ShortLink.from_dict(item) for item in embedded.get("short_links") or []]


def get_short_links(
    requester: Requester,
    page: int,
    limit: int,
    *,
    filters: Mapping[str, str] | ShortLinkFilter | None = None,
) -> list[ShortLink]:
    """List short links, optionally filtered."""
    params: dict[str, str] = {"page": str(page), "limit": str(limit)}
    if isinstance(filters, ShortLinkFilter):
        params.update(filters.to_params())
    elif filters:
        params.update(filters)
    response = call(requester, "GET", _SHORT_LINKS, query=params, ok_statuses=(200,))
    return _embedded_links(decode(response))


def get_short_link(requester: Requester, link_id: int) -> ShortLink:
    """Fetch one short link by its ID."""
    response = call(requester, "GET", f"{_SHORT_LINKS}/{link_id}", ok_statuses=(200,))
    return ShortLink.from_dict(decode(response))


def create_short_link(requester: Requester, short_link: ShortLink) -> ShortLink:
    """Create a short link and return the first link the server reports."""
    response = call(
        requester, "POST", _SHORT_LINKS, payload=short_link, ok_statuses=(200, 201)
    )
    links = _embedded_links(decode(response))
    if not links:
        raise ApiError("short link was not created")
    return links[0]


def update_short_link(requester: Requester, short_link: ShortLink) -> ShortLink:
    """Update an existing short link; its ID must be set."""
    if not short_link.id:
        raise ValueError("short link ID is not set")
    response = call(
        requester,
        "PATCH",
        f"{_SHORT_LINKS}/{short_link.id}",
        payload=short_link,
        ok_statuses=(200,),
    )
    return ShortLink.from_dict(decode(response))


def delete_short_link(requester: Requester, link_id: int) -> None:
    """Delete a short link by its ID."""
    call(requester, "DELETE", f"{_SHORT_LINKS}/{link_id}", ok_statuses=(200, 204))


def get_short_link_stats(requester: Requester, link_id: int) -> ShortLink:
    """Fetch the visit statistics of a short link."""
    response = call(
        requester, "GET", f"{_SHORT_LINKS}/{link_id}/statistics", ok_statuses=(200,)
    )
    return ShortLink.from_dict(decode(response))