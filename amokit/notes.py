"""Notes attached to leads, contacts, companies and customers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from .transport import DecodeError, Requester, call, decode

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _format_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339, trimming trailing zeros of the fraction."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp; ``None`` gives the zero time."""
    if value is None:
        return ZERO_TIME
    if not isinstance(value, str):
        raise DecodeError(f"expected a timestamp string, got {value!r}")
    match = _TIME_RE.match(value)
    if match is None:
        raise DecodeError(f"invalid timestamp: {value!r}")
    base, fraction, zone = match.groups()
    text = base
    if fraction:
        text += "." + fraction[:6].ljust(6, "0")
    text += "+00:00" if zone == "Z" else zone
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise DecodeError(f"invalid timestamp: {value!r}") from exc


def _object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    return data


@dataclass
class NoteParams:
    """Extra note parameters that depend on the note type."""

    text: str = ""
    service: str = ""
    phone_number: str = ""
    email: str = ""
    link: str = ""

    def to_dict(self) -> dict[str, Any]:
        fields = {
            "text": self.text,
            "service": self.service,
            "phone_number": self.phone_number,
            "email": self.email,
            "link": self.link,
        }
        return {key: value for key, value in fields.items() if value}

    @classmethod
    def from_dict(cls, data: Any) -> NoteParams:
        data = _object(data or {})
        return cls(
            text=data.get("text") or "",
            service=data.get("service") or "",
            phone_number=data.get("phone_number") or "",
            email=data.get("email") or "",
            link=data.get("link") or "",
        )


@dataclass
class Note:
    """A note attached to an entity."""

    id: int = 0
    entity_id: int = 0
    entity_type: str = ""
    note_type: int = 0
    text: str = ""
    created_by: int = 0
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME
    params: NoteParams = field(default_factory=NoteParams)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type,
            "note_type": self.note_type,
        }
        if self.text:
            data["text"] = self.text
        data["created_by"] = self.created_by
        data["created_at"] = _format_time(self.created_at)
        data["updated_at"] = _format_time(self.updated_at)
        data["params"] = self.params.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Note:
        data = _object(data)
        return cls(
            id=data.get("id") or 0,
            entity_id=data.get("entity_id") or 0,
            entity_type=data.get("entity_type") or "",
            note_type=data.get("note_type") or 0,
            text=data.get("text") or "",
            created_by=data.get("created_by") or 0,
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
            params=NoteParams.from_dict(data.get("params")),
        )


def get_note(requester: Requester, entity_type: str, entity_id: int, note_id: int) -> Note:
    """Fetch one note of an entity by its ID."""
    response = call(requester, "GET", f"/api/v4/{entity_type}/{entity_id}/notes/{note_id}")
    return Note.from_dict(decode(response))


def create_note(requester: Requester, entity_type: str, entity_id: int, note: Note) -> Note:
    """Create a note on an entity and return the stored note."""
    response = call(
        requester, "POST", f"/api/v4/{entity_type}/{entity_id}/notes", payload=note
    )
    return Note.from_dict(decode(response))


def update_note(requester: Requester, entity_type: str, entity_id: int, note: Note) -> Note:
    """Update an existing note and return the stored note."""
    response = call(
        requester,
        "PATCH",
        f"/api/v4/{entity_type}/{entity_id}/notes/{note.id}",
        payload=note,
    )
    return Note.from_dict(decode(response))


def list_notes(
    requester: Requester, entity_type: str, entity_id: int, limit: int, page: int
) -> list[Note]:
    """List the notes of an entity, one page at a time."""
    response = call(
        requester,
        "GET",
        f"/api/v4/{entity_type}/{entity_id}/notes",
        query={"limit": limit, "page": page},
    )
    data = _object(decode(response))
    embedded = _object(data.get("_embedded") or {})
    return [Note.from_dict(item) for item in embedded.get("items") or []]


def delete_note(requester: Requester, entity_type: str, entity_id: int, note_id: int) -> None:
    """Delete a note; the server must answer 204 No Content."""
    call(
        requester,
        "DELETE",
        f"/api/v4/{entity_type}/{entity_id}/notes/{note_id}",
        ok_statuses=(204,),
    )