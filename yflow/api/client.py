"""
Translation store API client

Talks to the store's CLI endpoints over httpx:
- GET  /cli/auth          authentication check
- GET  /cli/translations  fetch translations (key-centric response)
- POST /cli/keys          push keys and translations

Every request carries the API key in the X-API-Key header.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from yflow.api.exceptions import APIError, AuthenticationError, RateLimitError
from yflow.config import DEFAULT_RETRY_AFTER, DEFAULT_TIMEOUT, I18nConfig, normalize_api_url
from yflow.core.types import TranslationSet
from yflow.logger import get_logger

logger = get_logger(__name__)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 30.0),
            read=timeout_config.get('read', float(DEFAULT_TIMEOUT)),
            pool=timeout_config.get('pool', 10.0),
        )
    else:
        timeout_value = float(timeout_config) if timeout_config else float(DEFAULT_TIMEOUT)
        return httpx.Timeout(
            connect=10.0,
            write=30.0,
            read=timeout_value,
            pool=10.0,
        )


def parse_retry_after(value: Optional[str]) -> float:
    """Parse a Retry-After header given in seconds, falling back to the default."""
    if value is None:
        return float(DEFAULT_RETRY_AFTER)
    try:
        seconds = float(value.strip())
    except ValueError:
        return float(DEFAULT_RETRY_AFTER)
    return seconds if seconds >= 0 else float(DEFAULT_RETRY_AFTER)


def transform_translations_format(data: Any) -> TranslationSet:
    """
    Convert the store's key-centric shape to a language-centric one.

    {key: {lang: value}} -> {lang: {key: value}}. Non-string values are ignored.
    """
    result: TranslationSet = {}
    if not isinstance(data, dict):
        return result

    for key, langs in data.items():
        if not isinstance(langs, dict):
            continue
        for lang_code, value in langs.items():
            if isinstance(value, str):
                result.setdefault(lang_code, {})[key] = value
    return result


def _string_list(data: Dict[str, Any], name: str) -> List[str]:
    values = data.get(name)
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str)]


@dataclass
class BatchPushResult:
    """Keys the store reported for one push request."""
    added: List[str] = field(default_factory=list)
    existed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.added) + len(self.existed) + len(self.failed)

    @property
    def is_success(self) -> bool:
        return not self.failed

    @classmethod
    def from_data(cls, data: Any) -> "BatchPushResult":
        if not isinstance(data, dict):
            return cls()
        return cls(
            added=_string_list(data, "added"),
            existed=_string_list(data, "existed"),
            failed=_string_list(data, "failed"),
        )


class APIClient:
    """Client for the translation store."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        project_id: int,
        timeout: Any = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API base URL (whitespace and trailing slashes are removed)
            api_key: API key sent as X-API-Key
            project_id: Positive project ID
            timeout: Read timeout in seconds, or a dict for get_httpx_timeout
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If the URL or project ID is invalid
        """
        if not base_url or not base_url.strip():
            raise ValueError("API URL cannot be empty")

        normalized_url = normalize_api_url(base_url)
        if not normalized_url.startswith(("http://", "https://")):
            raise ValueError(f"API URL must start with 'http://' or 'https://', got: {normalized_url}")

        if isinstance(project_id, bool) or not isinstance(project_id, int) or project_id <= 0:
            raise ValueError("Project ID must be a positive integer")

        self.base_url = normalized_url
        self.api_key = api_key
        self.project_id = project_id
        self._client = httpx.Client(
            timeout=get_httpx_timeout(timeout),
            transport=transport,
            headers={"X-API-Key": api_key},
        )

    @classmethod
    def from_config(cls, config: I18nConfig, transport: Optional[httpx.BaseTransport] = None) -> "APIClient":
        return cls(
            base_url=config.api_url,
            api_key=config.api_key,
            project_id=config.project_id,
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, turning transport failures into APIError."""
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            raise APIError(f"API request timeout: {method} {path}")
        except httpx.HTTPError as e:
            raise APIError(f"API request failed: {method} {path}: {e}")

    def _check_response(self, response: httpx.Response) -> None:
        """Raise the matching APIError for a non-2xx response."""
        status_code = response.status_code

        if status_code == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            raise RateLimitError(f"Rate limited (429). Retry after {retry_after:g} seconds", retry_after=retry_after)

        if status_code == 401:
            raise AuthenticationError("API authentication failed (401)", status_code=401)

        if status_code < 200 or status_code >= 300:
            error_text = response.text[:500]
            raise APIError(f"API error ({status_code}): {error_text}", status_code=status_code)

    def _data(self, response: httpx.Response) -> Any:
        """Return the `data` field of a JSON response body."""
        try:
            body = response.json()
        except ValueError as e:
            raise APIError(f"Failed to parse response as JSON: {e}", status_code=response.status_code)

        if not isinstance(body, dict) or "data" not in body:
            raise APIError("Missing 'data' field in response", status_code=response.status_code)
        return body["data"]

    def check_auth(self) -> bool:
        """
        Check the API key.

        Returns:
            True when authenticated, False on 401

        Raises:
            APIError: On any other failure
        """
        response = self._request("GET", "/cli/auth")
        if response.status_code == 401:
            return False
        self._check_response(response)
        return True

    def fetch_translations(self, locale: Optional[str] = None) -> TranslationSet:
        """
        Fetch the project's translations.

        Args:
            locale: Optional store language code to limit the response to

        Returns:
            Translations keyed by store language code
        """
        params = {"project_id": self.project_id}
        if locale:
            params["locale"] = locale

        response = self._request("GET", "/cli/translations", params=params)
        self._check_response(response)

        data = self._data(response)
        if data is None:
            return {}

        translations = transform_translations_format(data)
        logger.debug(f"Fetched {sum(len(v) for v in translations.values())} translations in {len(translations)} languages")
        return translations

    def push_keys(self, keys: List[str], translations: Optional[TranslationSet] = None) -> BatchPushResult:
        """
        Create keys (when missing) and optionally set their translations.

        Raises:
            RateLimitError: On HTTP 429
            APIError: On any other failure
        """
        body: Dict[str, Any] = {
            "project_id": str(self.project_id),
            "keys": list(keys),
        }
        if translations is not None:
            body["translations"] = translations

        response = self._request("POST", "/cli/keys", json=body)
        self._check_response(response)
        return BatchPushResult.from_data(self._data(response))

    def push_batch(self, translations: TranslationSet) -> BatchPushResult:
        """Push one batch of translations; keys are taken from the translations."""
        return self.push_keys([], translations)
