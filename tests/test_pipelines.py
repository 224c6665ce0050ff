import json

import pytest

from amokit.pipelines import (
    Pipeline,
    PipelineStatus,
    create_pipeline,
    create_status,
    delete_pipeline,
    get_pipeline,
    get_status,
    list_pipelines,
    update_pipeline,
)
from amokit.transport import DecodeError, MockClient, MockResponse, UnexpectedStatusError

BASE = "https://example.amocrm.ru"


def make_client(method, path, status, body):
    client = MockClient(base_url=BASE)
    client.add_response(method, path, MockResponse(status_code=status, body=body))
    return client


def answering(status, body):
    return MockClient(
        base_url=BASE, default_response=MockResponse(status_code=status, body=body)
    )


def failing():
    return MockClient(
        base_url="http://non-existent-domain.example",
        default_response=MockResponse(error=ConnectionError("no such host")),
    )


def test_get_pipeline():
    client = make_client(
        "GET",
        "/api/v4/leads/pipelines/123",
        200,
        """{
            "id": 123, "name": "Тестовая воронка", "sort": 1,
            "is_main": true, "is_active": true,
            "statuses": [
                {"id": 456, "name": "Новый", "sort": 1, "color": "#99ccff",
                 "type": 1, "pipeline_id": 123, "is_editable": true},
                {"id": 789, "name": "В работе", "sort": 2, "color": "#ffcc66",
                 "type": 2, "pipeline_id": 123, "is_editable": true}
            ]
        }""",
    )
    pipeline = get_pipeline(client, 123)
    assert pipeline.id == 123
    assert pipeline.name == "Тестовая воронка"
    assert pipeline.is_main is True
    assert [status.id for status in pipeline.statuses] == [456, 789]
    assert client.last_request.method == "GET"


def test_create_pipeline():
    client = make_client(
        "POST",
        "/api/v4/leads/pipelines",
        200,
        '{"id": 456, "name": "Новая воронка", "sort": 2, "is_main": false, "is_active": true}',
    )
    created = create_pipeline(
        client, Pipeline(name="Новая воронка", sort=2, is_main=False, is_active=True)
    )
    assert created.id == 456
    assert created.name == "Новая воронка"
    assert created.is_main is False
    sent = json.loads(client.last_request.body)
    assert sent["name"] == "Новая воронка"
    assert "statuses" not in sent


def test_update_pipeline():
    client = make_client(
        "PATCH",
        "/api/v4/leads/pipelines/789",
        200,
        '{"id": 789, "name": "Обновленная воронка", "sort": 3, "is_main": true, "is_active": true}',
    )
    updated = update_pipeline(
        client,
        Pipeline(id=789, name="Обновленная воронка", sort=3, is_main=True, is_active=True),
    )
    assert updated.id == 789
    assert updated.name == "Обновленная воронка"
    assert updated.is_main is True
    assert client.last_request.method == "PATCH"
    assert json.loads(client.last_request.body)["name"] == "Обновленная воронка"


def test_list_pipelines():
    client = make_client(
        "GET",
        "/api/v4/leads/pipelines",
        200,
        """{"_embedded": {"items": [
            {"id": 123, "name": "Основная воронка", "sort": 1, "is_main": true, "is_active": true},
            {"id": 456, "name": "Дополнительная воронка", "sort": 2, "is_main": false, "is_active": true}
        ]}}""",
    )
    pipelines = list_pipelines(client)
    assert [pipeline.id for pipeline in pipelines] == [123, 456]


def test_delete_pipeline():
    client = make_client("DELETE", "/api/v4/leads/pipelines/123", 204, "")
    assert delete_pipeline(client, 123) is None
    assert client.last_request.path == "/api/v4/leads/pipelines/123"
    assert client.last_request.method == "DELETE"


def test_get_status():
    client = make_client(
        "GET",
        "/api/v4/leads/pipelines/123/statuses/456",
        200,
        """{"id": 456, "name": "Новый", "sort": 1, "color": "#99ccff",
            "type": 1, "pipeline_id": 123, "is_editable": true}""",
    )
    status = get_status(client, 123, 456)
    assert status.id == 456
    assert status.name == "Новый"
    assert status.pipeline_id == 123
    assert status.color == "#99ccff"


def test_create_status():
    client = make_client(
        "POST",
        "/api/v4/leads/pipelines/123/statuses",
        200,
        """{"id": 789, "name": "Новый статус", "sort": 3, "color": "#ff9999",
            "type": 2, "pipeline_id": 123, "is_editable": true}""",
    )
    created = create_status(
        client, 123, PipelineStatus(name="Новый статус", sort=3, color="#ff9999", type=2)
    )
    assert created.id == 789
    assert created.name == "Новый статус"
    assert created.pipeline_id == 123
    assert json.loads(client.last_request.body)["name"] == "Новый статус"


def test_get_pipeline_transport_error():
    with pytest.raises(ConnectionError):
        get_pipeline(failing(), 999)


def test_get_pipeline_invalid_json():
    client = answering(200, '{"id": 123, "name": "Тестовая воронка", "is_main": true, status')
    with pytest.raises(DecodeError):
        get_pipeline(client, 123)


def test_list_pipelines_transport_error():
    with pytest.raises(ConnectionError):
        list_pipelines(failing())


def test_list_pipelines_empty():
    assert list_pipelines(answering(200, '{"_embedded": {"items": []}}')) == []


def test_list_pipelines_invalid_json():
    client = answering(200, '{"_embedded": {"items": [{"id": 123, "name": "Тестовая воронка"')
    with pytest.raises(DecodeError):
        list_pipelines(client)


def test_update_pipeline_without_id_fails_on_transport():
    with pytest.raises(ConnectionError):
        update_pipeline(failing(), Pipeline(name="Воронка без ID", is_active=True))


def test_update_pipeline_transport_error():
    with pytest.raises(ConnectionError):
        update_pipeline(
            failing(), Pipeline(id=999, name="Несуществующая воронка", is_active=True)
        )


def test_delete_pipeline_forbidden():
    client = answering(403, '{"error": "Forbidden to delete main pipeline"}')
    with pytest.raises(UnexpectedStatusError) as info:
        delete_pipeline(client, 123)
    assert info.value.status_code == 403


def test_delete_pipeline_rejects_ok_status():
    with pytest.raises(UnexpectedStatusError) as info:
        delete_pipeline(answering(200, "{}"), 123)
    assert info.value.status_code == 200


def test_get_status_transport_error():
    with pytest.raises(ConnectionError):
        get_status(failing(), 123, 999)


def test_create_pipeline_transport_error():
    with pytest.raises(ConnectionError):
        create_pipeline(failing(), Pipeline(name="Тестовая воронка"))


def test_create_status_transport_error():
    with pytest.raises(ConnectionError):
        create_status(failing(), 123, PipelineStatus(name="Тестовый статус", color="#FF0000"))


def test_pipeline_round_trip():
    pipeline = Pipeline(
        id=1,
        name="Main",
        sort=5,
        is_main=True,
        is_active=False,
        statuses=[PipelineStatus(id=2, name="New", color="#fff", type=1, pipeline_id=1)],
    )
    data = pipeline.to_dict()
    assert data["statuses"][0]["pipeline_id"] == 1
    assert Pipeline.from_dict(data) == pipeline