"""In-memory stand-ins for `requests` objects plus canned API payloads.

Used by the tests and by the CLI's `--fake` mode; nothing here touches the network.
"""
from __future__ import annotations
import json
import random
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit

from requests.structures import CaseInsensitiveDict

_RANDOM = random.Random()

REASONS = {
    200: 'OK', 400: 'Bad Request', 401: 'Unauthorized', 403: 'Forbidden', 404: 'Not Found',
    406: 'Not Acceptable', 410: 'Gone', 413: 'Payload Too Large', 418: "I'm a teapot",
    420: 'Enhance Your Calm', 422: 'Unprocessable Entity', 429: 'Too Many Requests',
    500: 'Internal Server Error', 502: 'Bad Gateway', 503: 'Service Unavailable', 504: 'Gateway Timeout',
}


def seed_mock(seed: Optional[int] = None) -> None:
    if seed is not None:
        _RANDOM.seed(seed)


class FakeResponse:
    """Just enough of `requests.Response` for the client."""

    def __init__(self, status_code: int = 200, body: Any = None, headers: Optional[Dict[str, str]] = None,
                 reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason if reason is not None else REASONS.get(status_code, '')
        self.headers = CaseInsensitiveDict(headers or {})
        if body is None:
            self.content = b''
        elif isinstance(body, (dict, list)):
            self.content = json.dumps(body).encode('utf-8')
            self.headers.setdefault('Content-Type', 'application/json; charset=utf-8')
        elif isinstance(body, bytes):
            self.content = body
        else:
            self.content = str(body).encode('utf-8')
            self.headers.setdefault('Content-Type', 'text/plain; charset=utf-8')

    @property
    def text(self) -> str:
        return self.content.decode('utf-8')

    def json(self) -> Any:
        return json.loads(self.text)


Responder = Union[FakeResponse, Callable[..., FakeResponse]]


class FakeSession:
    """Answers `request()` from a route table and records every call.

    Routes are keyed by (METHOD, path); the path is compared against the
    request URL's path. Unrouted requests get a 404.
    """

    def __init__(self, routes: Optional[Dict[Tuple[str, str], Responder]] = None):
        self.routes: Dict[Tuple[str, str], Responder] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def route(self, method: str, path: str, response: Responder) -> None:
        self.routes[(method.upper(), path)] = response

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        call = {'method': method.upper(), 'url': url, **kwargs}
        with self._lock:
            self.calls.append(call)
        responder = self.routes.get((method.upper(), urlsplit(url).path))
        if responder is None:
            return FakeResponse(404, fake_error_body('Sorry, that page does not exist', 34))
        if callable(responder):
            return responder(**call)
        return responder

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if urlsplit(c['url']).path == path]


def fake_token_payload(access_token: Optional[str] = None) -> Dict[str, Any]:
    token = access_token or 'AAAA' + ''.join(_RANDOM.choice('ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789') for _ in range(40))
    return {'token_type': 'bearer', 'access_token': token}


def fake_user(i: int = 1, screen_name: Optional[str] = None) -> Dict[str, Any]:
    name = screen_name or f"mock_user_{i}"
    return {
        'id': 1000 + i,
        'id_str': str(1000 + i),
        'screen_name': name,
        'name': name.replace('_', ' ').title(),
        'followers_count': _RANDOM.randint(0, 5000),
        'verified': False,
        'entities': {'url': {'urls': []}},
    }


def fake_error_body(message: str, code: Optional[int] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {'message': message}
    if code is not None:
        entry['code'] = code
    return {'errors': [entry]}


def fake_session() -> FakeSession:
    """Session wired with the OAuth endpoints and a couple of read endpoints."""
    session = FakeSession()
    session.route('POST', '/oauth2/token', FakeResponse(200, fake_token_payload()))
    session.route('POST', '/oauth2/invalidate_token',
                  lambda **call: FakeResponse(200, {'access_token': (call.get('data') or {}).get('access_token')}))
    session.route('POST', '/oauth/request_token',
                  FakeResponse(200, 'OAuth oauth_nonce="mock", oauth_signature_method="HMAC-SHA1"'))
    session.route('GET', '/1.1/users/show.json',
                  lambda **call: FakeResponse(200, fake_user(screen_name=(call.get('params') or {}).get('screen_name'))))
    session.route('GET', '/1.1/account/verify_credentials.json', FakeResponse(200, fake_user(0)))
    return session
