"""Auth and request layer for the Twitter REST API (OAuth1 user context and OAuth2 bearer tokens).

Usage example:
    from twitter_rest import Client
    client = Client.from_env()
    user = client.get('/1.1/users/show.json', {'screen_name': 'jack'})
    users = client.get_all('/1.1/users/show.json', [{'screen_name': n} for n in ('jack', 'biz')])
"""
from .client import Client  # noqa: F401
from .credentials import Credentials, Token  # noqa: F401
from .exceptions import ApiError, ClientError, ServerError, ConfigurationError, classify  # noqa: F401

__version__ = '0.1.0'
