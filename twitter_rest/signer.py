from __future__ import annotations
import base64
import hashlib
import hmac
import secrets
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

from .credentials import BearerToken, Credentials, Token
from .exceptions import ConfigurationError

# OAuth 1.0a HMAC-SHA1 signer (RFC 5849 section 3.4)
# Reference: https://developer.twitter.com/en/docs/authentication/oauth-1-0a/creating-a-signature

SIGNATURE_METHOD = 'HMAC-SHA1'
OAUTH_VERSION = '1.0'
_DEFAULT_PORTS = {'http': 80, 'https': 443}


class SignedRequest(NamedTuple):
    method: str
    url: str
    params: Dict[str, Any]
    authorization: str
    base_string: str


def percent_encode(value: Any) -> str:
    if isinstance(value, bytes):
        value = value.decode('utf-8')
    return quote(str(value), safe='-._~')


def normalize_url(url: str) -> Tuple[str, List[Tuple[str, str]]]:
    """Split `url` into the signable base URI and its query parameters."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or '').lower()
    if parts.port and parts.port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{parts.port}"
    base = urlunsplit((scheme, host, parts.path or '/', '', ''))
    return base, parse_qsl(parts.query, keep_blank_values=True)


def _pairs(params: Dict[str, Any]) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for key, value in params.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            if v is None:
                continue
            out.append((percent_encode(key), percent_encode(v)))
    return out


def signature_base_string(method: str, url: str, params: Dict[str, Any]) -> str:
    base_url, query = normalize_url(url)
    pairs = _pairs(params) + [(percent_encode(k), percent_encode(v)) for k, v in query]
    normalized = '&'.join(f"{k}={v}" for k, v in sorted(pairs))
    return '&'.join([method.upper(), percent_encode(base_url), percent_encode(normalized)])


def has_binary_stream(params: Optional[Dict[str, Any]]) -> bool:
    return any(hasattr(v, 'read') for v in (params or {}).values())


class OAuth1Signer:
    def __init__(self, consumer_key: str, consumer_secret: str, token: Optional[str] = None,
                 token_secret: Optional[str] = None, nonce_factory: Optional[Callable[[], str]] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.token = token
        self.token_secret = token_secret
        self.nonce_factory = nonce_factory or (lambda: secrets.token_hex(16))
        self.clock = clock or time.time

    def oauth_params(self) -> Dict[str, str]:
        params = {
            'oauth_consumer_key': self.consumer_key,
            'oauth_nonce': self.nonce_factory(),
            'oauth_signature_method': SIGNATURE_METHOD,
            'oauth_timestamp': str(int(self.clock())),
            'oauth_version': OAUTH_VERSION,
        }
        if self.token:
            params['oauth_token'] = self.token
        return params

    def signing_key(self) -> bytes:
        key = f"{percent_encode(self.consumer_secret)}&{percent_encode(self.token_secret or '')}"
        return key.encode('utf-8')

    def signature(self, base_string: str) -> str:
        digest = hmac.new(self.signing_key(), base_string.encode('utf-8'), hashlib.sha1).digest()
        return base64.b64encode(digest).decode('ascii')

    def sign(self, method: str, url: str, params: Optional[Dict[str, Any]] = None) -> SignedRequest:
        params = dict(params or {})
        oauth = self.oauth_params()
        base_string = signature_base_string(method, url, {**params, **oauth})
        oauth['oauth_signature'] = self.signature(base_string)
        header = 'OAuth ' + ', '.join(f'{k}="{percent_encode(v)}"' for k, v in sorted(oauth.items()))
        return SignedRequest(method.upper(), url, params, header, base_string)

    def header(self, method: str, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        return self.sign(method, url, params).authorization


class RequestSigner:
    """Picks OAuth1 or bearer auth for each request based on the credentials held."""

    def __init__(self, credentials: Credentials, token_fetcher: Callable[[], BearerToken],
                 nonce_factory: Optional[Callable[[], str]] = None, clock: Optional[Callable[[], float]] = None):
        self.credentials = credentials
        self.token_fetcher = token_fetcher
        self.nonce_factory = nonce_factory
        self.clock = clock

    def build_auth_header(self, method: str, url: str, params: Optional[Dict[str, Any]] = None,
                          signature_params: Optional[Dict[str, Any]] = None) -> str:
        """Return the Authorization header value for one request.

        `signature_params` defaults to `params`; pass `{}` to sign a multipart
        body, whose fields never enter the OAuth1 base string.
        """
        if signature_params is None:
            signature_params = params or {}
        if not self.credentials.has_user_credentials():
            self.credentials.fetch_bearer_token(self.token_fetcher)
            return self.bearer_auth_header()
        return self.oauth_header(method, url, signature_params)

    def bearer_auth_header(self) -> str:
        token = self.credentials.bearer_token
        if isinstance(token, Token):
            if not token.is_bearer():
                raise ConfigurationError(f"Cached token has type {token.token_type!r}, expected 'bearer'")
            token = token.access_token
        return f"Bearer {token}"

    def oauth_signer(self) -> OAuth1Signer:
        creds = self.credentials
        if not (creds.consumer_key and creds.consumer_secret):
            raise ConfigurationError('OAuth1 signing requires consumer_key and consumer_secret')
        return OAuth1Signer(creds.consumer_key, creds.consumer_secret, creds.access_token,
                            creds.access_token_secret, nonce_factory=self.nonce_factory, clock=self.clock)

    def oauth_header(self, method: str, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        return self.oauth_signer().header(method, url, params)
