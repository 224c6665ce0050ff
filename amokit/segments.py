"""Contact segments: creating, listing, updating, deleting and managing their contacts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .transport import ApiError, DecodeError, Requester, call, decode

_SEGMENTS = "/api/v4/segments"


class SegmentType(str, Enum):
    """Kind of segment."""

    DISPOSABLE = "disposable"
    DYNAMIC = "dynamic"


def _object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _as_enum(enum_type: type[Enum], value: Any) -> Any:
    """Convert a known value to an enum member; keep unknown values as they are."""
    if not value:
        return ""
    try:
        return enum_type(value)
    except ValueError:
        return value


def _self_href(links: Any) -> str:
    links = _object(links)
    return _object(links.get("self") or {}).get("href") or ""


@dataclass
class FilterNode:
    """A condition, or a nested group of conditions, in a segment filter."""

    field_id: int = 0
    field_code: str = ""
    entity_type: str = ""
    operator: str = ""
    value: str = ""
    values: list[str] = field(default_factory=list)
    min_value: str = ""
    max_value: str = ""
    term: str = ""
    logic: str = ""
    nodes: list[FilterNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "field_id": self.field_id,
            "field_code": self.field_code,
            "entity_type": self.entity_type,
            "operator": self.operator,
            "value": self.value,
            "values": list(self.values),
            "min_value": self.min_value,
            "max_value": self.max_value,
            "term": self.term,
            "logic": self.logic,
            "nodes": [node.to_dict() for node in self.nodes],
        }
        return {key: value for key, value in fields.items() if value}

    @classmethod
    def from_dict(cls, data: Any) -> FilterNode:
        data = _object(data)
        return cls(
            field_id=data.get("field_id") or 0,
            field_code=data.get("field_code") or "",
            entity_type=data.get("entity_type") or "",
            operator=data.get("operator") or "",
            value=data.get("value") or "",
            values=[str(item) for item in data.get("values") or []],
            min_value=data.get("min_value") or "",
            max_value=data.get("max_value") or "",
            term=data.get("term") or "",
            logic=data.get("logic") or "",
            nodes=[cls.from_dict(item) for item in data.get("nodes") or []],
        )


@dataclass
class Filter:
    """The top-level filter of a segment."""

    term: str = ""
    logic: str = ""
    nodes: list[FilterNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "term": self.term,
            "logic": self.logic,
            "nodes": [node.to_dict() for node in self.nodes],
        }
        return {key: value for key, value in fields.items() if value}

    @classmethod
    def from_dict(cls, data: Any) -> Filter:
        data = _object(data)
        return cls(
            term=data.get("term") or "",
            logic=data.get("logic") or "",
            nodes=[FilterNode.from_dict(item) for item in data.get("nodes") or []],
        )


@dataclass
class SegmentContact:
    """A contact embedded in a segment response."""

    id: int = 0
    name: str = ""
    href: str = ""

    def _to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "_links": {"self": {"href": self.href}}}

    @classmethod
    def from_dict(cls, data: Any) -> SegmentContact:
        data = _object(data)
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            href=_self_href(data.get("_links") or {}),
        )


@dataclass
class Segment:
    """A contact segment.

    ``contacts`` is ``None`` when the response had no ``_embedded`` section,
    and ``self_link`` is ``None`` when it had no ``_links`` section.
    """

    id: int = 0
    name: str = ""
    color: str = ""
    type: SegmentType | str = ""
    filter: Filter | None = None
    account_id: int = 0
    created_by: int = 0
    updated_by: int = 0
    created_at: int = 0
    updated_at: int = 0
    available_contacts_count: int = 0
    contacts_count: int = 0
    is_deleted: bool = False
    contacts: list[SegmentContact] | None = None
    self_link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        data["name"] = self.name
        if self.color:
            data["color"] = self.color
        if self.type:
            data["type"] = self.type.value if isinstance(self.type, Enum) else self.type
        if self.filter is not None:
            data["filter"] = self.filter.to_dict()
        optional: dict[str, Any] = {
            "account_id": self.account_id,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "available_contacts_count": self.available_contacts_count,
            "contacts_count": self.contacts_count,
            "is_deleted": self.is_deleted,
        }
        data.update((key, value) for key, value in optional.items() if value)
        if self.contacts is not None:
            embedded: dict[str, Any] = {}
            if self.contacts:
                embedded["contacts"] = [contact._to_dict() for contact in self.contacts]
            data["_embedded"] = embedded
        if self.self_link is not None:
            data["_links"] = {"self": {"href": self.self_link}}
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Segment:
        data = _object(data)
        segment_filter = data.get("filter")
        embedded = data.get("_embedded")
        links = data.get("_links")
        contacts = None
        if embedded is not None:
            contacts = [
                SegmentContact.from_dict(item)
                for item in _object(embedded).get("contacts") or []
            ]
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            color=data.get("color") or "",
            type=_as_enum(SegmentType, data.get("type")),
            filter=Filter.from_dict(segment_filter) if segment_filter is not None else None,
            account_id=data.get("account_id") or 0,
            created_by=data.get("created_by") or 0,
            updated_by=data.get("updated_by") or 0,
            created_at=data.get("created_at") or 0,
            updated_at=data.get("updated_at") or 0,
            available_contacts_count=data.get("available_contacts_count") or 0,
            contacts_count=data.get("contacts_count") or 0,
            is_deleted=bool(data.get("is_deleted")),
            contacts=contacts,
            self_link=_self_href(links) if links is not None else None,
        )


def _embedded_list(data: Any, key: str) -> list[Any]:
    data = _object(data)
    embedded = _object(data.get("_embedded") or {})
    return list(embedded.get(key) or [])


def add_segment(requester: Requester, segment: Segment) -> Segment:
    """Create a segment and return the first segment the server reports."""
    response = call(requester, "POST", _SEGMENTS, payload=segment, ok_statuses=(200, 201))
    segments = _embedded_list(decode(response), "segments")
    if not segments:
        raise ApiError("failed to create segment")
    return Segment.from_dict(segments[0])


def get_segments(
    requester: Requester,
    page: int,
    limit: int,
    *,
    filters: Mapping[str, str] | None = None,
    with_contacts: bool = False,
) -> list[Segment]:
    """List segments, optionally filtered and with their contacts."""
    params: dict[str, str] = {"page": str(page), "limit": str(limit)}
    if with_contacts:
        params["with"] = "contacts"
    if filters:
        params.update(filters)
    response = call(requester, "GET", _SEGMENTS, query=params, ok_statuses=(200, 201))
    return [Segment.from_dict(item) for item in _embedded_list(decode(response), "segments")]


def get_segment(
    requester: Requester,
    segment_id: int,
    *,
    with_contacts: bool = False,
    page: int | None = None,
    limit: int | None = None,
    filters: Mapping[str, str] | None = None,
) -> Segment:
    """Fetch one segment by its ID."""
    params: dict[str, str] = {}
    if with_contacts:
        params["with"] = "contacts"
    if page is not None:
        params["page"] = str(page)
    if limit is not None:
        params["limit"] = str(limit)
    if filters:
        params.update(filters)
    response = call(
        requester,
        "GET",
        f"{_SEGMENTS}/{segment_id}",
        query=params,
        ok_statuses=(200, 201),
    )
    return Segment.from_dict(decode(response))


def update_segment(requester: Requester, segment: Segment) -> Segment:
    """Update an existing segment; its ID must be set."""
    if not segment.id:
        raise ValueError("segment ID is not set")
    response = call(
        requester,
        "PATCH",
        f"{_SEGMENTS}/{segment.id}",
        payload=segment,
        ok_statuses=(200, 201),
    )
    return Segment.from_dict(decode(response))


def delete_segment(requester: Requester, segment_id: int) -> None:
    """Delete a segment by its ID."""
    call(requester, "DELETE", f"{_SEGMENTS}/{segment_id}", ok_statuses=(200, 204))


def add_contacts_to_segment(
    requester: Requester, segment_id: int, contact_ids: Iterable[int]
) -> None:
    """Add contacts to a segment."""
    call(
        requester,
        "POST",
        f"{_SEGMENTS}/{segment_id}/contacts",
        payload={"contacts": list(contact_ids)},
        ok_statuses=(200, 201, 204),
    )


def remove_contacts_from_segment(
    requester: Requester, segment_id: int, contact_ids: Iterable[int]
) -> None:
    """Remove contacts from a segment."""
    call(
        requester,
        "POST",
        f"{_SEGMENTS}/{segment_id}/contacts/delete",
        payload={"contacts": list(contact_ids)},
        ok_statuses=(200, 204),
    )


def get_segment_contacts(
    requester: Requester, segment_id: int, page: int, limit: int
) -> list[int]:
    """Return the IDs of the contacts in a segment, one page at a time."""
    response = call(
        requester,
        "GET",
        f"{_SEGMENTS}/{segment_id}/contacts",
        query={"page": page, "limit": limit},
        ok_statuses=(200, 201),
    )
    return [
        _object(item).get("id") or 0
        for item in _embedded_list(decode(response), "contacts")
    ]