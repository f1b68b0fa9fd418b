from __future__ import annotations
import base64
import logging
from typing import Any, Dict, Iterable, List, Optional
import requests
from .base_client import BaseClient
from .config import (
    ClientSettings,
    ENV_ACCESS_TOKEN,
    ENV_ACCESS_TOKEN_SECRET,
    ENV_BEARER_TOKEN,
    ENV_CONSUMER_KEY,
    ENV_CONSUMER_SECRET,
)
from .credentials import BearerToken, Credentials, Token
from .exceptions import ApiError, ConfigurationError
from .signer import RequestSigner, has_binary_stream
from .utils import DEFAULT_MAX_WORKERS, deprecated_alias, flat_pmap, pmap

logger = logging.getLogger(__name__)


class Client(BaseClient):
    """REST client supporting user-context (OAuth1) and application-only (bearer) auth.

    Endpoint helpers build a path and a params dict and call `get`/`post`;
    everything below those two calls lives here.
    """
    BASE_URL = 'https://api.twitter.com'
    TOKEN_PATH = '/oauth2/token'
    INVALIDATE_TOKEN_PATH = '/oauth2/invalidate_token'
    REQUEST_TOKEN_PATH = '/oauth/request_token'

    def __init__(self, consumer_key: Optional[str] = None, consumer_secret: Optional[str] = None,
                 access_token: Optional[str] = None, access_token_secret: Optional[str] = None,
                 bearer_token: Optional[BearerToken] = None, *, timeout: float = 30,
                 session: Optional[requests.Session] = None, max_workers: int = DEFAULT_MAX_WORKERS,
                 base_url: Optional[str] = None, user_agent: Optional[str] = None):
        super().__init__(timeout=timeout, session=session, user_agent=user_agent)
        if base_url:
            self.BASE_URL = base_url
        self.max_workers = max_workers
        self.credentials = Credentials(consumer_key, consumer_secret, access_token, access_token_secret, bearer_token)
        self.signer = RequestSigner(self.credentials, self.token)

    @classmethod
    def from_env(cls, settings: Optional[ClientSettings] = None, session: Optional[requests.Session] = None) -> 'Client':
        settings = settings or ClientSettings.load()
        client = cls(
            BaseClient.env(ENV_CONSUMER_KEY, required=False) or None,
            BaseClient.env(ENV_CONSUMER_SECRET, required=False) or None,
            BaseClient.env(ENV_ACCESS_TOKEN, required=False) or None,
            BaseClient.env(ENV_ACCESS_TOKEN_SECRET, required=False) or None,
            BaseClient.env(ENV_BEARER_TOKEN, required=False) or None,
            timeout=settings.timeout,
            session=session,
            max_workers=settings.max_workers,
            base_url=settings.base_url,
            user_agent=settings.user_agent,
        )
        creds = client.credentials
        if not (creds.has_any_credentials() or (creds.consumer_key and creds.consumer_secret)):
            raise ConfigurationError(
                f"Set {ENV_BEARER_TOKEN} or {ENV_CONSUMER_KEY}/{ENV_CONSUMER_SECRET} (plus access token vars for user context)")
        return client

    @property
    def bearer_token(self) -> Optional[BearerToken]:
        return self.credentials.bearer_token

    @bearer_token.setter
    def bearer_token(self, value: Optional[BearerToken]) -> None:
        self.credentials.bearer_token = value

    def has_bearer_token(self) -> bool:
        return self.credentials.has_bearer_token()

    def has_user_credentials(self) -> bool:
        return self.credentials.has_user_credentials()

    def has_credentials(self) -> bool:
        return self.credentials.has_any_credentials()

    def build_auth_header(self, method: str, url: str, params: Optional[Dict[str, Any]] = None,
                          signature_params: Optional[Dict[str, Any]] = None) -> str:
        return self.signer.build_auth_header(method, url, params, signature_params)

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                headers: Optional[Dict[str, str]] = None) -> Any:
        """Sign and send one request, returning the parsed body.

        POST params go in a form body, or a multipart body when any value is a
        file-like object; other methods send them as the query string.
        """
        method = method.upper()
        # requests skips None values when encoding; the signed set has to match the sent one
        params = {k: v for k, v in (params or {}).items() if v is not None}
        url = self._url(path)
        multipart = method == 'POST' and has_binary_stream(params)
        all_headers = dict(headers or {})
        all_headers['Authorization'] = self.build_auth_header(method, url, params, {} if multipart else None)
        if method != 'POST':
            return self._request(method, url, params=params, headers=all_headers)
        if multipart:
            files = {k: v for k, v in params.items() if hasattr(v, 'read')}
            data = {k: v for k, v in params.items() if k not in files}
            return self._request(method, url, data=data, files=files, headers=all_headers)
        return self._request(method, url, data=params, headers=all_headers)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request('GET', path, params)

    def post(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request('POST', path, params)

    def get_all(self, path: str, param_sets: Iterable[Dict[str, Any]]) -> List[Any]:
        """GET `path` once per params dict, concurrently; results follow input order."""
        return pmap(param_sets, lambda params: self.get(path, dict(params)), max_workers=self.max_workers)

    def flat_get_all(self, path: str, param_sets: Iterable[Dict[str, Any]]) -> List[Any]:
        return flat_pmap(param_sets, lambda params: self.get(path, dict(params)), max_workers=self.max_workers)

    def token(self, **options: Any) -> Token:
        """Obtain an application-only bearer token with the consumer key/secret.

        The API hands back the same token until it is invalidated.
        """
        creds = self.credentials
        if not (creds.consumer_key and creds.consumer_secret):
            raise ConfigurationError('Bearer token issuance requires consumer_key and consumer_secret')
        options.setdefault('grant_type', 'client_credentials')
        basic = base64.b64encode(f"{creds.consumer_key}:{creds.consumer_secret}".encode('utf-8')).decode('ascii')
        headers = {
            'Accept': '*/*',
            'Authorization': f"Basic {basic}",
        }
        resp = self._send('POST', self.TOKEN_PATH, data=options, headers=headers)
        data = self._parse(resp)
        token = Token.from_dict(data if isinstance(data, dict) else {})
        if not token.access_token:
            raise ApiError('Malformed token response', status_code=resp.status_code)
        logger.info('Issued %s token', token.token_type or 'untyped')
        return token

    def invalidate_token(self, access_token: BearerToken, **options: Any) -> Token:
        """Revoke a bearer token. The returned Token has no token_type."""
        if isinstance(access_token, Token):
            access_token = access_token.access_token  # type: ignore[assignment]
        options['access_token'] = access_token
        data = self.post(self.INVALIDATE_TOKEN_PATH, options)
        if self.credentials.bearer_token_string() == access_token:
            self.credentials.reset_bearer_token()
        return Token.from_dict(data if isinstance(data, dict) else {})

    def reverse_token(self) -> str:
        """Start the reverse auth flow; returns the raw OAuth response string."""
        url = self._url(self.REQUEST_TOKEN_PATH)
        options = {'x_auth_mode': 'reverse_auth'}
        headers = {'Authorization': self.signer.oauth_header('POST', url, options)}
        return self._send('POST', url, params=options, headers=headers).text

    oauth2_token = deprecated_alias('oauth2_token', 'token')
    invalidate_bearer_token = deprecated_alias('invalidate_bearer_token', 'invalidate_token')
