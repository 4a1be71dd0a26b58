from __future__ import annotations


class OntomatchError(Exception):
    """
    Base error. `stage` names the pipeline step that failed,
    `detail` is a human readable explanation.
    """

    stage = "pipeline"

    def __init__(self, message: str, *, detail: str | None = None, stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class ConfigurationError(OntomatchError):
    """Malformed substitution specification. Aborts the whole run."""

    stage = "substitution"


class InputError(OntomatchError):
    """Bad confidence, unreadable text file or unreadable ontology."""

    stage = "input"


class ServiceError(OntomatchError):
    """Spotlight did not answer with 200 after all retries."""

    stage = "annotation"
