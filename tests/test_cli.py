import json
from twitter_rest import cli

CREDENTIAL_VARS = ['TWITTER_CONSUMER_KEY', 'TWITTER_CONSUMER_SECRET', 'TWITTER_ACCESS_TOKEN',
                   'TWITTER_ACCESS_TOKEN_SECRET', 'TWITTER_BEARER_TOKEN']


def _clear_env(monkeypatch):
    for k in CREDENTIAL_VARS:
        monkeypatch.delenv(k, raising=False)


def test_fake_token(tmp_path, capsys):
    assert cli.main(['--env-file', str(tmp_path / '.env'), '--fake', '--seed', '1', 'token']) == 0
    out = json.loads(capsys.readouterr().out)
    assert out['token_type'] == 'bearer'
    assert out['access_token'].startswith('AAAA')


def test_fake_get_writes_file(tmp_path):
    out_file = tmp_path / 'out' / 'jack.json'
    rc = cli.main(['--env-file', str(tmp_path / '.env'), '--fake', '--out', str(out_file),
                   'get', '/1.1/users/show.json', '--param', 'screen_name=jack'])
    assert rc == 0
    assert json.loads(out_file.read_text(encoding='utf-8'))['screen_name'] == 'jack'


def test_fake_reverse_token(tmp_path, capsys):
    assert cli.main(['--env-file', str(tmp_path / '.env'), '--fake', 'reverse-token']) == 0
    assert capsys.readouterr().out.startswith('OAuth ')


def test_env_report_masks(tmp_path, monkeypatch, capsys):
    _clear_env(monkeypatch)
    monkeypatch.setenv('TWITTER_CONSUMER_KEY', 'abcdefghijkl')
    assert cli.main(['--env-file', str(tmp_path / '.env'), 'env']) == 0
    report = json.loads(capsys.readouterr().out)
    assert report['TWITTER_CONSUMER_KEY'] == 'abcd...ijkl'
    assert report['TWITTER_BEARER_TOKEN'] == 'MISSING'


def test_missing_credentials_exit_code(tmp_path, monkeypatch, capsys):
    _clear_env(monkeypatch)
    assert cli.main(['--env-file', str(tmp_path / '.env'), '--config', str(tmp_path / 'none.yaml'), 'token']) == 1
    assert 'ConfigurationError' in capsys.readouterr().err


def test_parse_params():
    assert cli.parse_params(['a=1', 'b=x=y']) == {'a': '1', 'b': 'x=y'}
