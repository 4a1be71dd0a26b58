from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable

import httpx
from bs4 import BeautifulSoup

from ontomatch.core.config import settings
from ontomatch.core.errors import InputError, ServiceError
from ontomatch.models.entity import RawEntity, unique_entities

logger = logging.getLogger(__name__)


def validate_confidence(confidence: float) -> float:
    """
    Spotlight confidence must be a number in [0, 1]. Checked before any request.
    """
    if isinstance(confidence, bool):
        raise InputError(
            "INVALID_CONFIDENCE", detail=repr(confidence), stage="confidence"
        )

    try:
        c = float(confidence)
    except (TypeError, ValueError):
        raise InputError(
            "INVALID_CONFIDENCE", detail=repr(confidence), stage="confidence"
        ) from None

    if math.isnan(c) or c < 0 or c > 1:
        raise InputError(
            "INVALID_CONFIDENCE",
            detail=f"Confidence must be between 0 and 1, got {confidence}",
            stage="confidence",
        )

    return c


def parse_annotations(markup: str) -> list[RawEntity]:
    """
    Spotlight answers with HTML where each annotation is
    <a href="http://dbpedia.org/resource/X">surface text</a>
    """
    soup = BeautifulSoup(markup or "", "html.parser")
    out: list[RawEntity] = []

    for link in soup.find_all("a"):
        href = link.get("href")
        if not href:
            continue
        out.append(RawEntity(source_text=link.get_text(), external_id=str(href)))

    return unique_entities(out)


class SpotlightClient:
    """
    Thin client over the DBpedia Spotlight /annotate endpoint.
    Retries a bounded number of times with exponential backoff, then raises ServiceError.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 5,
        backoff: float = 1.0,
        max_backoff: float = 30.0,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")

        self.url = url
        self.max_retries = max_retries
        self.backoff = backoff
        self.max_backoff = max_backoff
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self) -> SpotlightClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _delay(self, attempt: int) -> float:
        return min(self.backoff * (2 ** (attempt - 1)), self.max_backoff)

    def _post(self, text: str, confidence: float) -> str:
        last_error = ""

        for attempt in range(1, self.max_retries + 1):
            try:
                r = self._client.post(
                    self.url,
                    data={"text": text, "confidence": str(confidence)},
                    headers={"Accept": "text/html"},
                )
                if r.status_code == 200:
                    return r.text

                last_error = f"HTTP {r.status_code}"
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"

            if attempt < self.max_retries:
                delay = self._delay(attempt)
                logger.warning(
                    "spotlight attempt=%d/%d failed (%s), retrying in %.1fs",
                    attempt,
                    self.max_retries,
                    last_error,
                    delay,
                )
                self._sleep(delay)

        raise ServiceError(
            "SPOTLIGHT_UNAVAILABLE",
            detail=f"gave up after {self.max_retries} attempts, last error: {last_error}",
        )

    def annotate(self, text: str, confidence: float) -> list[RawEntity]:
        c = validate_confidence(confidence)
        if not text.strip():
            return []

        body = self._post(text, c)

        return parse_annotations(body)


def default_spotlight_client() -> SpotlightClient:
    return SpotlightClient(
        settings.SPOTLIGHT_URL,
        timeout=settings.SPOTLIGHT_TIMEOUT_SECONDS,
        max_retries=settings.SPOTLIGHT_MAX_RETRIES,
        backoff=settings.SPOTLIGHT_BACKOFF_SECONDS,
        max_backoff=settings.SPOTLIGHT_MAX_BACKOFF_SECONDS,
    )
