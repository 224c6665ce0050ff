"""Mailing statistics, recipients and templates."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .mailing import MailingStats, Template
from .transport import DecodeError, Requester, call, decode

_MAILINGS = "/api/v4/mailings"
_TEMPLATES = "/api/v4/mailing_templates"


def _object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def get_mailing_stats(requester: Requester, mailing_id: int) -> MailingStats:
    """Fetch the delivery statistics of a mailing."""
    response = call(
        requester, "GET", f"{_MAILINGS}/{mailing_id}/stats", ok_statuses=(200,)
    )
    return MailingStats.from_dict(decode(response))


def add_mailing_recipients(
    requester: Requester, mailing_id: int, contact_ids: Iterable[int]
) -> None:
    """Add contacts to the recipients of a mailing."""
    call(
        requester,
        "POST",
        f"{_MAILINGS}/{mailing_id}/recipients",
        payload={"contact_ids": list(contact_ids)},
        ok_statuses=(200, 201),
    )


def remove_mailing_recipients(
    requester: Requester, mailing_id: int, contact_ids: Iterable[int]
) -> None:
    """Remove contacts from the recipients of a mailing."""
    call(
        requester,
        "POST",
        f"{_MAILINGS}/{mailing_id}/recipients/delete",
        payload={"contact_ids": list(contact_ids)},
        ok_statuses=(200, 204),
    )


def get_mailing_templates(requester: Requester, page: int, limit: int) -> list[Template]:
    """List mailing templates, one page at a time."""
    response = call(
        requester,
        "GET",
        _TEMPLATES,
        query={"page": page, "limit": limit},
        ok_statuses=(200,),
    )
    data = _object(decode(response))
    embedded = _object(data.get("_embedded") or {})
    return [Template.from_dict(item) for item in embedded.get("templates") or []]


def get_mailing_template(requester: Requester, template_id: int) -> Template:
    """Fetch one mailing template by its ID."""
    response = call(requester, "GET", f"{_TEMPLATES}/{template_id}", ok_statuses=(200,))
    return Template.from_dict(decode(response))