from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from ontomatch.services.spotlight.client import SpotlightClient

SPOTLIGHT_URL = "http://spotlight.test/en/annotate"


class FakeOntology:
    """
    In-memory type assertions: IRI -> list of class IRIs (order kept).
    Counts lookups so tests can check what was queried.
    """

    def __init__(self, types: dict[str, list[str]]):
        self.types = types
        self.queries: list[str] = []

    def types_of(self, iri: str) -> list[str]:
        self.queries.append(iri)
        return list(self.types.get(iri, []))


def spotlight_html(*links: tuple[str, str]) -> str:
    anchors = " ".join(f'<a href="{href}" title="{href}">{text}</a>' for text, href in links)
    return f"<html><body><div>{anchors}</div></body></html>"


def make_client(handler: Callable[[httpx.Request], httpx.Response], **kw) -> SpotlightClient:
    kw.setdefault("max_retries", 3)
    kw.setdefault("backoff", 0.0)
    return SpotlightClient(
        SPOTLIGHT_URL,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        sleep=lambda _: None,
        **kw,
    )


@pytest.fixture()
def temp_out_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture()
def moscow_ontology() -> FakeOntology:
    return FakeOntology(
        {
            "http://example.com/Moscow": [
                "http://example.com/Cities_in_Russia",
                "http://example.com/National_capitals",
            ]
        }
    )
