import logging
import threading
import time
import pytest
from twitter_rest.utils import deprecated_alias, flat_pmap, normalize_keys, pmap


def test_normalize_keys_nested():
    raw = {b'user': {'id': 1, b'entities': [{b'url': 'x'}, 3]}, 7: 'int key kept'}
    out = normalize_keys(raw)
    assert out == {'user': {'id': 1, 'entities': [{'url': 'x'}, 3]}, 7: 'int key kept'}


def test_normalize_keys_idempotent():
    once = normalize_keys([{b'a': {b'b': [{b'c': None}]}}, 'plain'])
    assert normalize_keys(once) == once


def test_pmap_single_element_runs_inline():
    caller = threading.get_ident()
    assert pmap(['only'], lambda x: threading.get_ident()) == [caller]


def test_pmap_empty():
    assert pmap([], lambda x: x) == []


def test_pmap_preserves_input_order():
    finished = []
    lock = threading.Lock()
    delays = {'A': 0.2, 'B': 0.1, 'C': 0.0}

    def op(x):
        time.sleep(delays[x])
        with lock:
            finished.append(x)
        return x.lower()

    assert pmap(['A', 'B', 'C'], op) == ['a', 'b', 'c']
    assert finished[0] == 'C'


def test_pmap_uses_other_threads_for_many():
    caller = threading.get_ident()
    idents = pmap(range(4), lambda x: threading.get_ident())
    assert caller not in idents


def test_pmap_raises_first_failure_after_all_finish():
    done = []

    def op(x):
        if x in (1, 3):
            raise ValueError(f'bad {x}')
        time.sleep(0.05)
        done.append(x)
        return x

    with pytest.raises(ValueError, match='bad 1'):
        pmap(range(5), op)
    # siblings are not cancelled
    assert sorted(done) == [0, 2, 4]


def test_pmap_bounded_workers():
    active = [0]
    peak = [0]
    lock = threading.Lock()

    def op(x):
        with lock:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        time.sleep(0.02)
        with lock:
            active[0] -= 1
        return x

    assert pmap(range(8), op, max_workers=2) == list(range(8))
    assert peak[0] <= 2


def test_pmap_without_operation_is_reusable():
    calls = []
    deferred = pmap([1, 2, 3])
    assert calls == []
    assert deferred(lambda x: calls.append(x) or x * 2) == [2, 4, 6]
    assert deferred(lambda x: x + 1) == [2, 3, 4]
    assert sorted(calls) == [1, 2, 3]


def test_flat_pmap_flattens_one_level():
    assert flat_pmap([1, 2, 3], lambda x: [x] * x) == [1, 2, 2, 3, 3, 3]
    assert flat_pmap([1, 2], lambda x: [[x]]) == [[1], [2]]
    assert flat_pmap(['solo'], lambda x: [x, x]) == ['solo', 'solo']
    assert flat_pmap([[1], [2]])(lambda x: x) == [1, 2]


class _Legacy:
    def current(self, value):
        return value * 2

    old = deprecated_alias('old', 'current')


def test_deprecated_alias_logs_and_forwards(caplog):
    with caplog.at_level(logging.WARNING, logger='twitter_rest.utils'):
        assert _Legacy().old(21) == 42
    assert '[DEPRECATION] _Legacy.old is deprecated. Use _Legacy.current instead.' in caplog.text


def test_lazy_pmap_over_iterator_is_restartable():
    deferred = pmap(iter([1, 2, 3]))
    assert deferred(lambda x: x * 2) == [2, 4, 6]
    assert deferred(lambda x: x * 2) == [2, 4, 6]
    flat = flat_pmap(x for x in ([1], [2, 3]))
    assert flat(lambda x: x) == [1, 2, 3]
    assert flat(lambda x: x) == [1, 2, 3]
