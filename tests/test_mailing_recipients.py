import json

import pytest

from amokit.mailing_recipients import (
    add_mailing_recipients,
    get_mailing_stats,
    get_mailing_template,
    get_mailing_templates,
    remove_mailing_recipients,
)
from amokit.transport import MockClient, MockResponse, UnexpectedStatusError

BASE_URL = "https://example.amocrm.ru"


def make_client(status_code, body):
    return MockClient(
        base_url=BASE_URL,
        default_response=MockResponse(status_code=status_code, body=body),
    )


def test_get_mailing_stats_success():
    client = make_client(
        200,
        """{
            "total_recipients": 100,
            "delivered": 95,
            "opened": 75,
            "clicked": 50,
            "bounced": 5,
            "unsubscribed": 2,
            "complaints": 0
        }""",
    )
    stats = get_mailing_stats(client, 1001)
    assert stats.total_recipients == 100
    assert stats.delivered == 95
    assert stats.opened == 75
    assert stats.clicked == 50
    assert stats.bounced == 5
    assert stats.unsubscribed == 2
    assert stats.complaints == 0
    assert client.last_request.method == "GET"
    assert "/api/v4/mailings/1001/stats" in client.last_request.url


def test_get_mailing_stats_error():
    client = make_client(404, '{"error": "Mailing not found"}')
    with pytest.raises(UnexpectedStatusError) as info:
        get_mailing_stats(client, 9999)
    assert info.value.status_code == 404


def test_add_mailing_recipients_success():
    client = make_client(200, '{"success": true}')
    add_mailing_recipients(client, 1001, [1001, 1002, 1003])
    request = client.last_request
    assert request.method == "POST"
    assert "/api/v4/mailings/1001/recipients" in request.url
    for part in ('"contact_ids"', "1001", "1002", "1003"):
        assert part in request.body
    assert json.loads(request.body) == {"contact_ids": [1001, 1002, 1003]}
    assert request.headers["Content-Type"] == "application/json"


def test_add_mailing_recipients_accepts_created():
    client = make_client(201, "")
    add_mailing_recipients(client, 5, [1])
    assert client.last_request.path == "/api/v4/mailings/5/recipients"


def test_add_mailing_recipients_error():
    client = make_client(400, '{"error": "Invalid contact IDs"}')
    with pytest.raises(UnexpectedStatusError) as info:
        add_mailing_recipients(client, 1001, [-1, -2])
    assert info.value.status_code == 400


def test_remove_mailing_recipients_success():
    client = make_client(200, '{"success": true}')
    remove_mailing_recipients(client, 1001, [1001, 1002])
    request = client.last_request
    assert request.method == "POST"
    assert "/api/v4/mailings/1001/recipients/delete" in request.url
    for part in ('"contact_ids"', "1001", "1002"):
        assert part in request.body


def test_remove_mailing_recipients_accepts_no_content():
    client = make_client(204, "")
    remove_mailing_recipients(client, 7, [3])
    assert client.last_request.path == "/api/v4/mailings/7/recipients/delete"


def test_remove_mailing_recipients_error():
    client = make_client(400, '{"error": "Invalid contact IDs"}')
    with pytest.raises(UnexpectedStatusError):
        remove_mailing_recipients(client, 1001, [-1, -2])


def test_get_mailing_templates_success():
    client = make_client(
        200,
        """{
            "_embedded": {
                "templates": [
                    {"id": 101, "name": "Шаблон 1", "content": "Содержимое шаблона 1",
                     "html": "<p>Содержимое шаблона 1</p>", "type": "email"},
                    {"id": 102, "name": "Шаблон 2", "content": "Содержимое шаблона 2",
                     "html": "<p>Содержимое шаблона 2</p>", "type": "email"}
                ]
            }
        }""",
    )
    templates = get_mailing_templates(client, 1, 50)
    assert len(templates) == 2
    assert (templates[0].id, templates[0].name, templates[0].type) == (101, "Шаблон 1", "email")
    assert (templates[1].id, templates[1].name, templates[1].type) == (102, "Шаблон 2", "email")
    assert client.last_request.method == "GET"
    assert "/api/v4/mailing_templates" in client.last_request.url
    assert "page=1" in client.last_request.url
    assert "limit=50" in client.last_request.url


def test_get_mailing_templates_empty():
    client = make_client(200, '{"_embedded": {"templates": []}}')
    assert get_mailing_templates(client, 1, 50) == []


def test_get_mailing_templates_error():
    client = make_client(500, '{"error": "Server error"}')
    with pytest.raises(UnexpectedStatusError) as info:
        get_mailing_templates(client, 1, 50)
    assert info.value.status_code == 500


def test_get_mailing_template_success():
    client = make_client(
        200,
        """{
            "id": 101,
            "name": "Шаблон рассылки",
            "content": "Содержимое шаблона",
            "html": "<p>Содержимое шаблона</p>",
            "type": "email"
        }""",
    )
    template = get_mailing_template(client, 101)
    assert template.id == 101
    assert template.name == "Шаблон рассылки"
    assert template.content == "Содержимое шаблона"
    assert template.html == "<p>Содержимое шаблона</p>"
    assert template.type == "email"
    assert client.last_request.method == "GET"
    assert "/api/v4/mailing_templates/101" in client.last_request.url


def test_get_mailing_template_error():
    client = make_client(404, '{"error": "Template not found"}')
    with pytest.raises(UnexpectedStatusError) as info:
        get_mailing_template(client, 9999)
    assert info.value.status_code == 404