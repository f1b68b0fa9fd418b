from __future__ import annotations
import os
import logging
from typing import Any, Dict, Optional
import requests
from .exceptions import ApiError, ConfigurationError, classify
from .utils import normalize_keys

logger = logging.getLogger(__name__)


class BaseClient:
    """Base HTTP client: URL building, error classification and JSON handling.

    No retries here. Classified errors and transport failures reach the caller as-is.
    """
    BASE_URL: str = ''

    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None, user_agent: Optional[str] = None):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent

    def _url(self, path: str) -> str:
        return path if path.startswith('http') else self.BASE_URL.rstrip('/') + '/' + path.lstrip('/')

    def _send(self, method: str, path: str, *, params: Dict[str, Any] | None = None, data: Any | None = None,
              files: Dict[str, Any] | None = None, headers: Dict[str, str] | None = None) -> requests.Response:
        url = self._url(path)
        all_headers = {'User-Agent': self.user_agent} if self.user_agent else {}
        all_headers.update(headers or {})
        resp = self.session.request(method.upper(), url, params=params, data=data, files=files,
                                    headers=all_headers, timeout=self.timeout)
        logger.debug('%s %s -> %s', method.upper(), url, resp.status_code)
        error = classify(resp)
        if error is not None:
            logger.debug('%s %s failed: %r', method.upper(), url, error)
            raise error
        return resp

    def _request(self, method: str, path: str, *, params: Dict[str, Any] | None = None, data: Any | None = None,
                 files: Dict[str, Any] | None = None, headers: Dict[str, str] | None = None) -> Any:
        resp = self._send(method, path, params=params, data=data, files=files, headers=headers)
        return self._parse(resp)

    def _parse(self, resp: requests.Response) -> Any:
        if not resp.content:
            return None
        ctype = resp.headers.get('Content-Type', '')
        if 'json' in ctype:
            try:
                return normalize_keys(resp.json())
            except ValueError as e:
                raise ApiError('Failed to decode JSON response', status_code=resp.status_code) from e
        return resp.text

    @staticmethod
    def env(name: str, required: bool = True) -> Optional[str]:
        val = os.getenv(name)
        if required and (val is None or val.strip() == ''):
            raise ConfigurationError(f"Missing required environment variable: {name}")
        return val
