from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class Token:
    """An OAuth2 bearer token as issued (or invalidated) by the API."""
    access_token: Optional[str] = None
    token_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Token':
        return cls(access_token=data.get('access_token'), token_type=data.get('token_type') or None)

    def is_bearer(self) -> bool:
        return (self.token_type or '').lower() == 'bearer'


BearerToken = Union[str, Token]


class Credentials:
    """Holds user-context OAuth1 keys and/or an application bearer token.

    User-context auth wins whenever all four OAuth1 fields are set. A partial
    set is treated as no user credentials at all.
    """

    def __init__(self, consumer_key: Optional[str] = None, consumer_secret: Optional[str] = None,
                 access_token: Optional[str] = None, access_token_secret: Optional[str] = None,
                 bearer_token: Optional[BearerToken] = None):
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.access_token = access_token
        self.access_token_secret = access_token_secret
        self.bearer_token = bearer_token

    def has_user_credentials(self) -> bool:
        return all([self.consumer_key, self.consumer_secret, self.access_token, self.access_token_secret])

    def has_bearer_token(self) -> bool:
        return bool(self.bearer_token_string())

    def has_any_credentials(self) -> bool:
        return self.has_user_credentials() or self.has_bearer_token()

    def fetch_bearer_token(self, fetcher: Callable[[], BearerToken]) -> BearerToken:
        if not self.has_bearer_token():
            logger.info('No cached bearer token, requesting one')
            self.bearer_token = fetcher()
        return self.bearer_token  # type: ignore[return-value]

    def reset_bearer_token(self) -> None:
        self.bearer_token = None

    def bearer_token_string(self) -> Optional[str]:
        token = self.bearer_token
        if isinstance(token, Token):
            return token.access_token
        return token

    def __repr__(self) -> str:
        # secrets stay out of logs and tracebacks
        return (f"Credentials(user_context={self.has_user_credentials()}, "
                f"bearer_token={self.has_bearer_token()})")
