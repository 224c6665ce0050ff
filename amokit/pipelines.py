"""Lead pipelines and their statuses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .transport import DecodeError, Requester, call, decode


def _object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
    return data


@dataclass
class PipelineStatus:
    """A stage within a pipeline."""

    id: int = 0
    name: str = ""
    sort: int = 0
    color: str = ""
    type: int = 0
    pipeline_id: int = 0
    is_editable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sort": self.sort,
            "color": self.color,
            "type": self.type,
            "pipeline_id": self.pipeline_id,
            "is_editable": self.is_editable,
        }

    @classmethod
    def from_dict(cls, data: Any) -> PipelineStatus:
        data = _object(data)
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            sort=data.get("sort") or 0,
            color=data.get("color") or "",
            type=data.get("type") or 0,
            pipeline_id=data.get("pipeline_id") or 0,
            is_editable=bool(data.get("is_editable")),
        )


@dataclass
class Pipeline:
    """A lead pipeline."""

    id: int = 0
    name: str = ""
    sort: int = 0
    is_main: bool = False
    is_active: bool = False
    statuses: list[PipelineStatus] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "sort": self.sort,
            "is_main": self.is_main,
            "is_active": self.is_active,
        }
        if self.statuses:
            data["statuses"] = [status.to_dict() for status in self.statuses]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> Pipeline:
        data = _object(data)
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            sort=data.get("sort") or 0,
            is_main=bool(data.get("is_main")),
            is_active=bool(data.get("is_active")),
            statuses=[PipelineStatus.from_dict(item) for item in data.get("statuses") or []],
        )


_PIPELINES = "/api/v4/leads/pipelines"


def get_pipeline(requester: Requester, pipeline_id: int) -> Pipeline:
    """Fetch a pipeline by its ID."""
    response = call(requester, "GET", f"{_PIPELINES}/{pipeline_id}")
    return Pipeline.from_dict(decode(response))


def create_pipeline(requester: Requester, pipeline: Pipeline) -> Pipeline:
    """Create a pipeline and return the stored one."""
    response = call(requester, "POST", _PIPELINES, payload=pipeline)
    return Pipeline.from_dict(decode(response))


def update_pipeline(requester: Requester, pipeline: Pipeline) -> Pipeline:
    """Update an existing pipeline and return the stored one."""
    response = call(requester, "PATCH", f"{_PIPELINES}/{pipeline.id}", payload=pipeline)
    return Pipeline.from_dict(decode(response))


def list_pipelines(requester: Requester) -> list[Pipeline]:
    """List all pipelines."""
    response = call(requester, "GET", _PIPELINES)
    data = _object(decode(response))
    embedded = _object(data.get("_embedded") or {})
    return [Pipeline.from_dict(item) for item in embedded.get("items") or []]


def delete_pipeline(requester: Requester, pipeline_id: int) -> None:
    """Delete a pipeline; the server must answer 204 No Content."""
    call(requester, "DELETE", f"{_PIPELINES}/{pipeline_id}", ok_statuses=(204,))


def get_status(requester: Requester, pipeline_id: int, status_id: int) -> PipelineStatus:
    """Fetch a status of a pipeline by its ID."""
    response = call(requester, "GET", f"{_PIPELINES}/{pipeline_id}/statuses/{status_id}")
    return PipelineStatus.from_dict(decode(response))


def create_status(
    requester: Requester, pipeline_id: int, status: PipelineStatus
) -> PipelineStatus:
    """Create a status in a pipeline and return the stored one."""
    response = call(
        requester, "POST", f"{_PIPELINES}/{pipeline_id}/statuses", payload=status
    )
    return PipelineStatus.from_dict(decode(response))