"""E-mail mailings: listing, creating, updating, deleting and status changes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .notes import _format_time, _parse_time
from .transport import DecodeError, Requester, call, decode

_MAILINGS = "/api/v4/mailings"


class MailingStatus(str, Enum):
    """Lifecycle state of a mailing."""

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    STOPPED = "stopped"


class MailingFrequency(str, Enum):
    """How often a mailing is sent."""

    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _plain(value: Any) -> Any:
    """Unwrap enum members to their string values."""
    return value.value if isinstance(value, Enum) else value


def _as_enum(enum_type: type[Enum], value: Any) -> Any:
    """Convert a known value to an enum member; keep unknown values as they are."""
    if not value:
        return ""
    try:
        return enum_type(value)
    except ValueError:
        return value


def _int_list(value: Any) -> list[int]:
    return [int(item) for item in value or []]


@dataclass
class Template:
    """A mailing template."""

    id: int = 0
    name: str = ""
    content: str = ""
    html: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        fields = {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "html": self.html,
            "type": self.type,
        }
        return {key: value for key, value in fields.items() if value}

    @classmethod
    def from_dict(cls, data: Any) -> Template:
        data = _object(data)
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            content=data.get("content") or "",
            html=data.get("html") or "",
            type=data.get("type") or "",
        )


@dataclass
class SegmentFilter:
    """A filter selecting contacts for a mailing."""

    type: str = ""
    logic: str = ""
    condition: str = ""
    value: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "logic": self.logic}
        if self.condition:
            data["condition"] = self.condition
        if self.value:
            data["value"] = self.value
        return data

    @classmethod
    def from_dict(cls, data: Any) -> SegmentFilter:
        data = _object(data)
        return cls(
            type=data.get("type") or "",
            logic=data.get("logic") or "",
            condition=data.get("condition") or "",
            value=data.get("value") or "",
        )


@dataclass
class MailingStats:
    """Delivery statistics of a mailing."""

    total_recipients: int = 0
    delivered: int = 0
    opened: int = 0
    clicked: int = 0
    bounced: int = 0
    unsubscribed: int = 0
    complaints: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_recipients": self.total_recipients,
            "delivered": self.delivered,
            "opened": self.opened,
            "clicked": self.clicked,
            "bounced": self.bounced,
            "unsubscribed": self.unsubscribed,
            "complaints": self.complaints,
        }

    @classmethod
    def from_dict(cls, data: Any) -> MailingStats:
        data = _object(data)
        return cls(
            total_recipients=data.get("total_recipients") or 0,
            delivered=data.get("delivered") or 0,
            opened=data.get("opened") or 0,
            clicked=data.get("clicked") or 0,
            bounced=data.get("bounced") or 0,
            unsubscribed=data.get("unsubscribed") or 0,
            complaints=data.get("complaints") or 0,
        )


@dataclass
class Mailing:
    """An e-mail mailing."""

    id: int = 0
    name: str = ""
    status: MailingStatus | str = ""
    subject: str = ""
    template: Template | None = None
    frequency: MailingFrequency | str = ""
    send_at: datetime | None = None
    created_at: int = 0
    updated_at: int = 0
    created_by: int = 0
    updated_by: int = 0
    segment_ids: list[int] = field(default_factory=list)
    segment_filters: list[SegmentFilter] = field(default_factory=list)
    selected_contacts: list[int] = field(default_factory=list)
    excluded_contacts: list[int] = field(default_factory=list)
    stats: MailingStats | None = None
    account_id: int = 0
    from_email: str = ""
    from_name: str = ""
    reply_to_email: str = ""
    settings: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        data["name"] = self.name
        if self.status:
            data["status"] = _plain(self.status)
        data["subject"] = self.subject
        if self.template is not None:
            data["template"] = self.template.to_dict()
        if self.frequency:
            data["frequency"] = _plain(self.frequency)
        if self.send_at is not None:
            data["send_at"] = _format_time(self.send_at)
        optional: dict[str, Any] = {
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "segment_ids": list(self.segment_ids),
            "segment_filters": [item.to_dict() for item in self.segment_filters],
            "selected_contacts": list(self.selected_contacts),
            "excluded_contacts": list(self.excluded_contacts),
        }
        data.update((key, value) for key, value in optional.items() if value)
        if self.stats is not None:
            data["stats"] = self.stats.to_dict()
        trailing: dict[str, Any] = {
            "account_id": self.account_id,
            "from_email": self.from_email,
            "from_name": self.from_name,
            "reply_to_email": self.reply_to_email,
            "settings": dict(self.settings),
        }
        data.update((key, value) for key, value in trailing.items() if value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Mailing:
        data = _object(data)
        template = data.get("template")
        stats = data.get("stats")
        send_at = data.get("send_at")
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            status=_as_enum(MailingStatus, data.get("status")),
            subject=data.get("subject") or "",
            template=Template.from_dict(template) if template is not None else None,
            frequency=_as_enum(MailingFrequency, data.get("frequency")),
            send_at=_parse_time(send_at) if send_at is not None else None,
            created_at=data.get("created_at") or 0,
            updated_at=data.get("updated_at") or 0,
            created_by=data.get("created_by") or 0,
            updated_by=data.get("updated_by") or 0,
            segment_ids=_int_list(data.get("segment_ids")),
            segment_filters=[
                SegmentFilter.from_dict(item) for item in data.get("segment_filters") or []
            ],
            selected_contacts=_int_list(data.get("selected_contacts")),
            excluded_contacts=_int_list(data.get("excluded_contacts")),
            stats=MailingStats.from_dict(stats) if stats is not None else None,
            account_id=data.get("account_id") or 0,
            from_email=data.get("from_email") or "",
            from_name=data.get("from_name") or "",
            reply_to_email=data.get("reply_to_email") or "",
            settings=dict(data.get("settings") or {}),
        )


def get_mailings(
    requester: Requester,
    page: int,
    limit: int,
    *,
    filters: Mapping[str, str] | None = None,
    status: MailingStatus | str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[Mailing]:
    """List mailings, optionally filtered by raw filters, status and creation dates."""
    params: dict[str, str] = {"page": str(page), "limit": str(limit)}
    if filters:
        params.update(filters)
    if status:
        params["filter[status]"] = str(_plain(status))
    if date_from is not None:
        params["filter[created_at][from]"] = str(int(date_from.timestamp()))
    if date_to is not None:
        params["filter[created_at][to]"] = str(int(date_to.timestamp()))

    response = call(requester, "GET", _MAILINGS, query=params, ok_statuses=(200,))
    data = _object(decode(response))
    embedded = _object(data.get("_embedded") or {})
    return [Mailing.from_dict(item) for item in embedded.get("mailings") or []]


def get_mailing(requester: Requester, mailing_id: int) -> Mailing:
    """Fetch one mailing by its ID."""
    response = call(requester, "GET", f"{_MAILINGS}/{mailing_id}", ok_statuses=(200,))
    return Mailing.from_dict(decode(response))


def create_mailing(requester: Requester, mailing: Mailing) -> Mailing:
    """Create a mailing and return the stored one."""
    response = call(requester, "POST", _MAILINGS, payload=mailing, ok_statuses=(200, 201))
    return Mailing.from_dict(decode(response))


def update_mailing(requester: Requester, mailing: Mailing) -> Mailing:
    """Update an existing mailing; its ID must be set."""
    if not mailing.id:
        raise ValueError("mailing ID is not set")
    response = call(
        requester,
        "PATCH",
        f"{_MAILINGS}/{mailing.id}",
        payload=mailing,
        ok_statuses=(200,),
    )
    return Mailing.from_dict(decode(response))


def delete_mailing(requester: Requester, mailing_id: int) -> None:
    """Delete a mailing by its ID."""
    call(requester, "DELETE", f"{_MAILINGS}/{mailing_id}", ok_statuses=(200, 204))


def change_mailing_status(
    requester: Requester, mailing_id: int, status: MailingStatus | str
) -> Mailing:
    """Change the status of a mailing and return the updated mailing."""
    response = call(
        requester,
        "PATCH",
        f"{_MAILINGS}/{mailing_id}/status",
        payload={"status": str(_plain(status))},
        ok_statuses=(200,),
    )
    return Mailing.from_dict(decode(response))