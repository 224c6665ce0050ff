# amokit

A small client library for the amoCRM v4 REST API. It has no dependencies.
It covers e-mail mailings, mailing recipients and templates, notes, lead
pipelines and their statuses, contact segments and short links.

## Installation

```
pip install amokit
```

## What the package does not do

amokit does not include an HTTP client, and it does not handle
authentication. Every API function sends its request through a *requester*
that you supply. A requester is any object with:

- a `base_url` attribute, for example `https://example.amocrm.ru`, and
- a `do_request(request)` method that takes an `amokit.transport.Request`
  and returns an `amokit.transport.Response`.

This is the `amokit.transport.Requester` protocol. `Request` has `method`,
`url`, `body` (bytes or `None`), `headers` and a `path` property.
`Response` holds `status_code`, `body` (bytes) and `headers`.

The requester below is built on the standard library:

```python
import urllib.error
import urllib.request

from amokit.transport import Request, Response


class UrllibRequester:
    def __init__(self, base_url: str, access_token: str) -> None:
        self.base_url = base_url
        self.access_token = access_token

    def do_request(self, request: Request) -> Response:
        headers = {**request.headers, "Authorization": f"Bearer {self.access_token}"}
        http_request = urllib.request.Request(
            request.url, data=request.body, headers=headers, method=request.method
        )
        try:
            with urllib.request.urlopen(http_request) as reply:
                return Response(reply.status, reply.read(), dict(reply.headers))
        except urllib.error.HTTPError as error:
            return Response(error.code, error.read(), dict(error.headers))


requester = UrllibRequester("https://example.amocrm.ru", "token")
```

## Records and errors

Records are dataclasses. Each has `to_dict()`, which gives the JSON form the
API uses, and a `from_dict()` class method that builds the record from that
form. Status and type fields use the enums `MailingStatus`,
`MailingFrequency` and `SegmentType`, all `str` enums. If the server sends a
value the enum does not know, the field keeps the plain string.

Failures raise exceptions:

- `amokit.transport.UnexpectedStatusError`: the server answered with a
  status code the call does not accept. The error has `status_code` and `body`.
- `amokit.transport.DecodeError`: a body is not valid JSON, or it does not
  have the expected shape.
- `amokit.transport.ApiError`: the base class of both errors above. It is
  also raised when `add_segment` or `create_short_link` gets an empty list
  back from the server.
- `ValueError`: `update_mailing`, `update_segment` or `update_short_link`
  was called with a record whose `id` is not set.

The functions in `amokit.notes` and `amokit.pipelines` do not check the
status code, except for `delete_note` and `delete_pipeline`. Those two
accept only 204 No Content. The other modules check the status code on
every call.

Query parameters are encoded in sorted key order.

## Modules

- `amokit.transport`: `Request`, `Response`, `Requester`, the errors,
  `call()` and `decode()`, and the in-memory requesters for tests.
- `amokit.notes`: `Note`, `NoteParams`, `get_note`, `create_note`,
  `update_note`, `list_notes`, `delete_note`.
- `amokit.pipelines`: `Pipeline`, `PipelineStatus`, `get_pipeline`,
  `create_pipeline`, `update_pipeline`, `list_pipelines`,
  `delete_pipeline`, `get_status`, `create_status`.
- `amokit.mailing`: `Mailing`, `Template`, `SegmentFilter`,
  `MailingStats`, `MailingStatus`, `MailingFrequency`, `get_mailings`,
  `get_mailing`, `create_mailing`, `update_mailing`, `delete_mailing`,
  `change_mailing_status`.
- `amokit.mailing_recipients`: `get_mailing_stats`,
  `add_mailing_recipients`, `remove_mailing_recipients`,
  `get_mailing_templates`, `get_mailing_template`.
- `amokit.segments`: `Segment`, `Filter`, `FilterNode`,
  `SegmentContact`, `SegmentType`, `add_segment`, `get_segments`,
  `get_segment`, `update_segment`, `delete_segment`,
  `add_contacts_to_segment`, `remove_contacts_from_segment`,
  `get_segment_contacts`.
- `amokit.short_links`: `ShortLink`, `ShortLinkFilter`,
  `get_short_links`, `get_short_link`, `create_short_link`,
  `update_short_link`, `delete_short_link`, `get_short_link_stats`.

## Examples

### Pipelines

```python
from amokit.pipelines import Pipeline, PipelineStatus, create_pipeline, create_status, list_pipelines

pipeline = create_pipeline(requester, Pipeline(name="Sales", sort=1, is_active=True))
create_status(requester, pipeline.id, PipelineStatus(name="New", color="#99ccff"))

for item in list_pipelines(requester):
    print(item.id, item.name)
```

### Notes

```python
from amokit.notes import Note, create_note, list_notes

create_note(requester, "leads", 123, Note(entity_id=123, entity_type="leads", note_type=4, text="Called back"))
notes = list_notes(requester, "leads", 123, limit=10, page=1)
```

### Mailings

```python
from amokit.mailing import Mailing, MailingFrequency, MailingStatus, change_mailing_status, create_mailing, get_mailings
from amokit.mailing_recipients import add_mailing_recipients, get_mailing_stats

mailing = create_mailing(
    requester,
    Mailing(name="Newsletter", subject="News", frequency=MailingFrequency.ONCE),
)
add_mailing_recipients(requester, mailing.id, [1001, 1002])
change_mailing_status(requester, mailing.id, MailingStatus.ACTIVE)

active = get_mailings(requester, 1, 50, status=MailingStatus.ACTIVE)
stats = get_mailing_stats(requester, mailing.id)
print(stats.delivered, stats.opened)
```

`get_mailings` also takes `filters`, a mapping of raw query parameters. It
takes `date_from` and `date_to` as datetimes, which are sent as Unix
timestamps.

### Segments

```python
from amokit.segments import Filter, FilterNode, Segment, SegmentType, add_segment, get_segment

segment = add_segment(
    requester,
    Segment(
        name="Example customers",
        type=SegmentType.DYNAMIC,
        filter=Filter(logic="and", nodes=[FilterNode(field_code="email", operator="contains", value="example.com")]),
    ),
)
detailed = get_segment(requester, segment.id, with_contacts=True)
for contact in detailed.contacts or []:
    print(contact.id, contact.name)
```

### Short links

```python
from amokit.short_links import ShortLink, ShortLinkFilter, create_short_link, get_short_links

link = create_short_link(requester, ShortLink(url="https://example.com", entity_type="leads", entity_id=123))
leads_links = get_short_links(requester, 1, 50, filters=ShortLinkFilter(entity_type="leads"))
```

## Testing without a server

`amokit.transport.MockClient` answers with a canned `MockResponse` for
each method and path. You register one with
`add_response(method, path, response)`. A request that matches nothing
gets `default_response`. By default that is a 500 with an error body.
If a `MockResponse` has `error` set, that exception is raised.

The client keeps the last request it received in `last_request`, as a
`RecordedRequest` with `method`, `url`, `body` and `headers`.

```python
from amokit.mailing_recipients import get_mailing_stats
from amokit.transport import MockClient, MockResponse

client = MockClient(base_url="https://example.amocrm.ru")
client.add_response("GET", "/api/v4/mailings/1/stats", MockResponse(200, '{"delivered": 5}'))
assert get_mailing_stats(client, 1).delivered == 5
assert client.last_request.method == "GET"
```

`amokit.transport.ExpectingMockClient` does more checking. Before it
answers with `mock_response`, it checks the request against
`expected_method`, the URL suffix in `expected_url` and the JSON body in
`expected_body`. A mismatch raises `ApiError`.

## Running the tests

```
pip install -e ".[test]"
pytest
```