from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from rdflib import Graph, URIRef
from rdflib.namespace import OWL, RDF
from rdflib.util import guess_format

from ontomatch.core.errors import InputError

logger = logging.getLogger(__name__)


class TypeAssertions(Protocol):
    """Read-only view: IRI of a named individual -> IRIs of its asserted classes."""

    def types_of(self, iri: str) -> list[str]: ...


class RdfOntology:
    """
    Local ontology backed by an rdflib Graph.
    Only asserted rdf:type triples are used, no reasoning.
    """

    def __init__(self, graph: Graph):
        self.graph = graph

    @classmethod
    def load(cls, path: str | Path, format: str | None = None) -> RdfOntology:
        p = Path(path)
        if not p.is_file():
            raise InputError("ONTOLOGY_NOT_FOUND", detail=str(p), stage="ontology")

        # .owl files are usually RDF/XML
        fmt = format or guess_format(str(p)) or "xml"
        g = Graph()
        try:
            g.parse(str(p), format=fmt)
        except Exception as e:
            raise InputError(
                "ONTOLOGY_UNREADABLE", detail=f"{p}: {e}", stage="ontology"
            ) from e

        logger.info("ontology loaded path=%s format=%s triples=%d", p, fmt, len(g))

        return cls(g)

    def types_of(self, iri: str) -> list[str]:
        out: list[str] = []

        for t in self.graph.objects(URIRef(iri), RDF.type):
            # anonymous class expressions and the individual declaration are not types
            if not isinstance(t, URIRef) or t == OWL.NamedIndividual:
                continue
            out.append(str(t))

        return out
