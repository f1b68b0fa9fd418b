from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_PATH = Path('config/client_config.yaml')

ENV_CONSUMER_KEY = 'TWITTER_CONSUMER_KEY'
ENV_CONSUMER_SECRET = 'TWITTER_CONSUMER_SECRET'
ENV_ACCESS_TOKEN = 'TWITTER_ACCESS_TOKEN'
ENV_ACCESS_TOKEN_SECRET = 'TWITTER_ACCESS_TOKEN_SECRET'
ENV_BEARER_TOKEN = 'TWITTER_BEARER_TOKEN'

CREDENTIAL_VARS = [ENV_CONSUMER_KEY, ENV_CONSUMER_SECRET, ENV_ACCESS_TOKEN, ENV_ACCESS_TOKEN_SECRET, ENV_BEARER_TOKEN]


def load_env_file(env_path: Path) -> None:
    """Load KEY=VALUE lines from a local .env without overriding non-empty variables."""
    if not env_path.exists():
        return
    try:
        text = env_path.read_text(encoding='utf-8')
    except OSError as e:
        logger.warning('Could not read %s: %s', env_path, e)
        return
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if not k:
            continue
        existing = os.environ.get(k)
        if existing is None or existing.strip() == '':
            os.environ[k] = v


def load_config(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open('r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        logger.warning('Ignoring %s: top level is %s, expected a mapping', path, type(data).__name__)
        return {}
    return data


@dataclass(frozen=True)
class ClientSettings:
    base_url: str = 'https://api.twitter.com'
    timeout: float = 30.0
    max_workers: int = 16
    user_agent: str = 'twitter-rest-core/0.1'

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'ClientSettings':
        """Defaults, then the `client:` section of the YAML config, then TWITTER_* env vars."""
        settings = cls()
        section = load_config(path or CONFIG_PATH).get('client') or {}
        if not isinstance(section, dict):
            logger.warning('Ignoring client config section: expected a mapping, got %s', type(section).__name__)
            section = {}
        known = {f.name for f in fields(cls)}
        unknown = set(section) - known
        if unknown:
            logger.warning('Ignoring unknown client config keys: %s', ', '.join(sorted(unknown)))
        settings = replace(settings, **{k: v for k, v in section.items() if k in known})

        overrides: Dict[str, Any] = {}
        env_map = {
            'TWITTER_BASE_URL': ('base_url', str),
            'TWITTER_TIMEOUT': ('timeout', float),
            'TWITTER_MAX_WORKERS': ('max_workers', int),
            'TWITTER_USER_AGENT': ('user_agent', str),
        }
        for var, (name, cast) in env_map.items():
            raw = os.getenv(var)
            if raw is None or raw.strip() == '':
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError:
                logger.warning('Ignoring %s=%r (expected %s)', var, raw, cast.__name__)
        return replace(settings, **overrides)
