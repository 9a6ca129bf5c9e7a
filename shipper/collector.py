import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .config import ShipperSettings
from .errors import IngestionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionEnv:
    """Where and how records are posted: the Authorization header value and the endpoint."""

    authorization: str
    ingestion_url: str
    timeout: float = 10.0

    @classmethod
    def from_settings(cls, settings: ShipperSettings) -> 'IngestionEnv':
        return cls(
            authorization=settings.authorization,
            ingestion_url=settings.ingestion_url,
            timeout=settings.request_timeout,
        )

    def __repr__(self) -> str:
        return f"IngestionEnv(ingestion_url={self.ingestion_url!r}, timeout={self.timeout!r})"


class HttpCollector:
    """
    Posts one serialized record per request to the ingestion endpoint.

    Sends are synchronous: post_data_to_stream returns only once the endpoint
    has accepted the record, and raises IngestionError otherwise. Nothing is
    retried here.
    """

    def __init__(self, env: IngestionEnv, session: Optional[requests.Session] = None):
        self.env = env
        self._session = session or requests.Session()
        self._session.headers.update({
            'Authorization': env.authorization,
            'Content-Type': 'application/json',
        })
        self.sent = 0

    def post_data_to_stream(self, data: str) -> None:
        try:
            response = self._session.post(
                self.env.ingestion_url,
                data=data.encode('utf-8'),
                timeout=self.env.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            raise IngestionError(f"Could not reach ingestion endpoint: {exc}") from exc

        # Only a 2xx counts as delivered; redirects are not followed.
        if not 200 <= response.status_code < 300:
            raise IngestionError(
                f"Ingestion endpoint error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        self.sent += 1
        logger.debug("Posted record %d (%d bytes)", self.sent, len(data))

    def close(self) -> None:
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
