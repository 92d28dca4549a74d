"""
HTTP client for OSM services

Handles communication with Overpass and Nominatim including:
- Rate limiting
- Retry logic
- Mapping transport failures onto NetworkError
"""

import time
from typing import Any, Dict, Optional

import requests
from loguru import logger

from ..config import APIConfig, get_config
from ..errors import ConnectionFailedError, HttpStatusError, ParseError, RequestTimeoutError

RETRYABLE_STATUS = (429, 504)


class OverpassAPIClient:
    """Client for interacting with Overpass API and Nominatim"""

    def __init__(self, api_config: Optional[APIConfig] = None, overpass_url: Optional[str] = None):
        self.api = api_config or get_config().api
        self.overpass_url = overpass_url or self.api.overpass_url
        self.timeout = self.api.request_timeout
        self._last_request_time = 0.0

    @property
    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.api.user_agent}

    def _rate_limit(self):
        """Ensure we don't exceed rate limits"""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.api.min_request_interval:
            time.sleep(self.api.min_request_interval - elapsed)
        self._last_request_time = time.time()

    def query(self, query: str, retries: Optional[int] = None) -> str:
        """
        Execute an Overpass QL query with retry logic

        Args:
            query: Overpass QL query string
            retries: Attempts before giving up (defaults to api.max_retries)

        Returns:
            Raw response body

        Raises:
            RequestTimeoutError: If every attempt timed out
            HttpStatusError: On a non-retryable status or when retries run out
            ConnectionFailedError: On any other request failure
        """
        self._rate_limit()

        max_retries = max(retries or self.api.max_retries, 1)
        retry_delay = self.api.retry_delay

        for attempt in range(max_retries):
            last_attempt = attempt == max_retries - 1
            wait_time = retry_delay * (attempt + 1)
            try:
                response = requests.post(
                    self.overpass_url,
                    data={"data": query},
                    headers=self.headers,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return response.text
            except requests.exceptions.Timeout:
                logger.warning(f"Overpass timeout (attempt {attempt + 1}/{max_retries})")
                if last_attempt:
                    logger.error(f"Overpass API failed: timeout after {max_retries} attempts")
                    raise RequestTimeoutError(self.timeout)
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code
                if status not in RETRYABLE_STATUS or last_attempt:
                    logger.error(f"Overpass API failed: HTTP {status} (attempt {attempt + 1}/{max_retries})")
                    raise HttpStatusError(status, self.overpass_url) from e
                logger.warning(f"Overpass {status} (attempt {attempt + 1}/{max_retries})")
            except requests.exceptions.RequestException as e:
                logger.warning(f"Overpass request failed (attempt {attempt + 1}/{max_retries}): {e}")
                if last_attempt:
                    logger.error(f"Overpass API failed after {max_retries} attempts: {e}")
                    raise ConnectionFailedError(str(e)) from e

            logger.info(f"Retrying in {wait_time}s...")
            time.sleep(wait_time)

        # Unreachable: the last attempt always returns or raises
        raise ConnectionFailedError(f"Overpass query failed after {max_retries} attempts")

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Single GET returning decoded JSON, used for Nominatim lookups"""
        try:
            response = requests.get(url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise RequestTimeoutError(self.timeout)
        except requests.exceptions.RequestException as e:
            raise ConnectionFailedError(str(e)) from e

        if response.status_code != 200:
            raise HttpStatusError(response.status_code, url)

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Failed to parse response from {url}: {e}") from e
