import httpx
from conftest import FakeOntology, make_client
from fastapi.testclient import TestClient
from test_pipeline import fake_spotlight

from ontomatch.main import app
from ontomatch.services.matching.substitution import compile_substitution_spec

client = TestClient(app)

ONTO = FakeOntology(
    {
        "http://example.com/Moscow": [
            "http://example.com/Cities_in_Russia",
            "http://example.com/National_capitals",
        ]
    }
)


def _install(spotlight=None, ontology=ONTO, translator=None):
    client.app.state.ontology = ontology
    client.app.state.translator = translator or compile_substitution_spec("http://example.com/\nn\n")
    client.app.state.spotlight = spotlight or make_client(fake_spotlight)


def test_health_reports_loaded_state():
    _install()
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "ontology_loaded": True, "substitution_loaded": True}


def test_annotate_returns_matched_entities():
    _install()
    r = client.post("/annotate", json={"text": "Moscow is a city. It is large.", "confidence": 0.5})

    assert r.status_code == 200, r.text
    data = r.json()
    assert data["status"] == "ok"
    assert data["chunk_count"] == 1
    assert data["skipped_chunks"] == []
    assert data["entities"] == [
        {
            "source_text": "Moscow",
            "external_id": "http://dbpedia.org/resource/Moscow",
            "local_id": "http://example.com/Moscow",
            "types": [
                "http://example.com/Cities_in_Russia",
                "http://example.com/National_capitals",
            ],
        }
    ]


def test_annotate_rejects_out_of_range_confidence():
    _install()
    r = client.post("/annotate", json={"text": "Moscow.", "confidence": 1.01})
    assert r.status_code == 422


def test_annotate_rejects_empty_text():
    _install()
    r = client.post("/annotate", json={"text": "   "})
    assert r.status_code == 400


def test_annotate_without_ontology_is_503():
    _install()
    client.app.state.ontology = None
    r = client.post("/annotate", json={"text": "Moscow."})
    assert r.status_code == 503


def test_annotate_when_spotlight_is_down_is_502():
    _install(spotlight=make_client(lambda request: httpx.Response(503), max_retries=2))
    r = client.post("/annotate", json={"text": "Moscow is a city."})
    assert r.status_code == 502
