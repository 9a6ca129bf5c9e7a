from __future__ import annotations
import os
import re
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .errors import ConfigurationError

API_TOKEN_ENV = 'vRealize_Log_Insight_Cloud_API_Token'
API_URL_ENV = 'vRealize_Log_Insight_Cloud_API_Url'
TIMEOUT_ENV = 'LOG_SHIPPER_TIMEOUT'
TAG_ENV_PREFIX = 'Tag_'
DEFAULT_TIMEOUT_SECONDS = 10.0


class ShipperSettings(BaseModel):
    """
    Process-wide settings for the ingestion endpoint, read from the function
    app's environment.
    """
    model_config = ConfigDict(frozen=True)

    api_token: SecretStr
    ingestion_url: str
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    # Tag name -> case-insensitive pattern, from Tag_<name>=<regex> entries.
    tag_patterns: Dict[str, re.Pattern] = Field(default_factory=dict)

    @property
    def authorization(self) -> str:
        return f"Bearer {self.api_token.get_secret_value()}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ShipperSettings:
        """
        Required:
          - vRealize_Log_Insight_Cloud_API_Token
          - vRealize_Log_Insight_Cloud_API_Url

        Optional:
          - LOG_SHIPPER_TIMEOUT (seconds, default 10)
          - Tag_<name>=<regex>, any number of them
        """
        env = os.environ if environ is None else environ

        api_token = env.get(API_TOKEN_ENV)
        if not api_token:
            raise ConfigurationError(
                'The API token is missing. Please configure it in an environment variable of the function'
            )

        ingestion_url = env.get(API_URL_ENV)
        if not ingestion_url:
            raise ConfigurationError(
                'The Ingestion Url is missing. Please configure it in an environment variable of the function'
            )
        _validate_ingestion_url(ingestion_url)

        return cls(
            api_token=api_token,
            ingestion_url=ingestion_url,
            request_timeout=_parse_timeout(env.get(TIMEOUT_ENV)),
            tag_patterns=_parse_tag_patterns(env),
        )


def _validate_ingestion_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ConfigurationError(
            f"Invalid {API_URL_ENV} '{url}'. Expected an http(s) URL."
        )


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {TIMEOUT_ENV} '{raw}': expected seconds") from exc
    if timeout <= 0:
        raise ConfigurationError(f"Invalid {TIMEOUT_ENV} '{raw}': must be positive")
    return timeout


def _parse_tag_patterns(env: Mapping[str, str]) -> Dict[str, re.Pattern]:
    patterns: Dict[str, re.Pattern] = {}
    for name, value in env.items():
        if not name.startswith(TAG_ENV_PREFIX):
            continue
        try:
            patterns[name[len(TAG_ENV_PREFIX):]] = re.compile(value, re.IGNORECASE)
        except re.error as exc:
            raise ConfigurationError(f"Invalid regular expression in {name}: {exc}") from exc
    return patterns
