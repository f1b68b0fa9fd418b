"""Command line access to the auth endpoints and signed GETs.

Examples:
  twitter-rest token
  twitter-rest invalidate AAAA...
  twitter-rest reverse-token
  twitter-rest get /1.1/users/show.json --param screen_name=jack --out data/jack.json
  twitter-rest env

Options:
  --fake     answer from in-memory fixtures (no real API calls)
  --verbose  debug logging
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .client import Client
from .config import CREDENTIAL_VARS, ClientSettings, load_env_file
from .exceptions import ApiError, ConfigurationError
from .mock_provider import fake_session, seed_mock

logger = logging.getLogger('twitter_rest')


def mask(val: Optional[str]) -> Optional[str]:
    if not val:
        return val
    if len(val) <= 8:
        return '*' * len(val)
    return val[:4] + '...' + val[-4:]


def parse_params(pairs: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        if '=' not in pair:
            raise SystemExit(f'--param expects key=value, got {pair!r}')
        k, v = pair.split('=', 1)
        params[k.strip()] = v
    return params


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(prog='twitter-rest', description='Authenticate against and query the REST API')
    p.add_argument('--config', type=Path, help='YAML config file (default: config/client_config.yaml)')
    p.add_argument('--env-file', type=Path, default=Path('.env'))
    p.add_argument('--fake', action='store_true', help='Use in-memory fixtures instead of the network')
    p.add_argument('--seed', type=int, help='Deterministic seed for --fake payloads')
    p.add_argument('--out', help='Write the result as JSON to this path instead of stdout')
    p.add_argument('--verbose', action='store_true')
    sub = p.add_subparsers(dest='command', required=True)
    sub.add_parser('token', help='Request an application bearer token')
    inv = sub.add_parser('invalidate', help='Revoke a bearer token')
    inv.add_argument('access_token')
    sub.add_parser('reverse-token', help='Start the reverse auth flow')
    get = sub.add_parser('get', help='Signed GET request')
    get.add_argument('path')
    get.add_argument('--param', action='append', default=[], help='Query parameter as key=value (repeatable)')
    sub.add_parser('env', help='Show which credential variables are set (masked)')
    return p.parse_args(argv)


def env_report() -> Dict[str, Optional[str]]:
    return {k: (mask(os.getenv(k)) if os.getenv(k) else 'MISSING') for k in CREDENTIAL_VARS}


def _emit(data: Any, out: Optional[str]) -> None:
    text = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False, indent=2)
    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding='utf-8')
        logger.info('Wrote %s', out_path)
    else:
        print(text)


def run(args) -> Any:
    if args.command == 'env':
        return env_report()
    if args.fake:
        seed_mock(args.seed)
        client = Client('mock-consumer-key', 'mock-consumer-secret', session=fake_session())
    else:
        client = Client.from_env(ClientSettings.load(args.config))
    if args.command == 'token':
        token = client.token()
        return {'token_type': token.token_type, 'access_token': token.access_token}
    if args.command == 'invalidate':
        token = client.invalidate_token(args.access_token)
        return {'token_type': token.token_type, 'access_token': token.access_token}
    if args.command == 'reverse-token':
        return client.reverse_token()
    if args.command == 'get':
        return client.get(args.path, parse_params(args.param))
    raise SystemExit(f'Unknown command {args.command}')


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='[%(levelname)s] %(message)s')
    load_env_file(args.env_file)
    try:
        data = run(args)
    except (ApiError, ConfigurationError) as e:
        print(f'[error] {type(e).__name__}: {e}', file=sys.stderr)
        return 1
    _emit(data, args.out)
    return 0


if __name__ == '__main__':
    sys.exit(main())
