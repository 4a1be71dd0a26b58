from urllib.parse import parse_qs

import httpx
import pytest
from conftest import SPOTLIGHT_URL, make_client, spotlight_html

from ontomatch.core.errors import InputError, ServiceError
from ontomatch.models.entity import RawEntity
from ontomatch.services.spotlight.client import (
    SpotlightClient,
    parse_annotations,
    validate_confidence,
)


def test_parse_annotations_extracts_anchor_text_and_href():
    html = spotlight_html(
        ("Moscow", "http://dbpedia.org/resource/Moscow"),
        ("Russia", "http://dbpedia.org/resource/Russia"),
    )
    ents = parse_annotations(html)

    assert ents == [
        RawEntity("Moscow", "http://dbpedia.org/resource/Moscow"),
        RawEntity("Russia", "http://dbpedia.org/resource/Russia"),
    ]


def test_parse_annotations_dedupes_on_full_tuple():
    html = spotlight_html(
        ("Moscow", "http://dbpedia.org/resource/Moscow"),
        ("Moscow", "http://dbpedia.org/resource/Moscow"),
        ("the Russian capital", "http://dbpedia.org/resource/Moscow"),
    )
    ents = parse_annotations(html)

    # same text + same IRI collapse, different surface text stays
    assert len(ents) == 2
    assert {e.source_text for e in ents} == {"Moscow", "the Russian capital"}


def test_parse_annotations_ignores_anchors_without_href():
    assert parse_annotations("<a>nothing</a><p>text</p>") == []
    assert parse_annotations("") == []


def test_annotate_sends_text_and_confidence():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode("utf-8"))
        seen["accept"] = request.headers.get("accept")
        return httpx.Response(
            200, text=spotlight_html(("Moscow", "http://dbpedia.org/resource/Moscow"))
        )

    client = make_client(handler)
    ents = client.annotate("Moscow is a city.", 0.5)

    assert ents == [RawEntity("Moscow", "http://dbpedia.org/resource/Moscow")]
    assert seen["method"] == "POST"
    assert seen["url"] == SPOTLIGHT_URL
    assert seen["form"] == {"text": ["Moscow is a city."], "confidence": ["0.5"]}
    assert seen["accept"] == "text/html"


def test_annotate_retries_until_success():
    statuses = iter([503, 502, 200])
    delays = []

    def handler(request: httpx.Request) -> httpx.Response:
        code = next(statuses)
        body = spotlight_html(("Moscow", "http://dbpedia.org/resource/Moscow")) if code == 200 else ""
        return httpx.Response(code, text=body)

    client = SpotlightClient(
        SPOTLIGHT_URL,
        max_retries=5,
        backoff=0.5,
        max_backoff=10,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        sleep=delays.append,
    )
    ents = client.annotate("Moscow.", 0.5)

    assert len(ents) == 1
    assert delays == [0.5, 1.0]


def test_annotate_gives_up_with_service_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(500)

    client = make_client(handler, max_retries=3)
    with pytest.raises(ServiceError) as exc:
        client.annotate("Moscow.", 0.5)

    assert len(calls) == 3
    assert "HTTP 500" in str(exc.value)


def test_annotate_retries_transport_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text="<p>no entities</p>")

    client = make_client(handler)
    assert client.annotate("Hello.", 0.3) == []
    assert len(calls) == 2


def test_backoff_is_capped():
    client = SpotlightClient(SPOTLIGHT_URL, backoff=1.0, max_backoff=5.0, client=httpx.Client())
    assert [client._delay(a) for a in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


@pytest.mark.parametrize("confidence", [0, 0.0, 1, 1.0, 0.5])
def test_confidence_boundaries_accepted(confidence):
    assert validate_confidence(confidence) == float(confidence)


@pytest.mark.parametrize("confidence", [-0.01, 1.01, float("nan"), "abc", None, True, False])
def test_bad_confidence_rejected_before_request(confidence):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(200, text="")

    client = make_client(handler)
    with pytest.raises(InputError) as exc:
        client.annotate("Moscow.", confidence)

    assert exc.value.stage == "confidence"
    assert calls == []


def test_blank_text_sends_nothing():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert make_client(handler).annotate("   ", 0.5) == []
