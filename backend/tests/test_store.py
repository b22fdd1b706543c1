import json
import os
import threading

import pytest

from reflexboard.services.store import JsonFileScoreStore, StoreWriteError


def candidate(nickname='Ann', score=1, ip='203.0.113.7'):
    return {'nickname': nickname, 'score': score, 'ipMasked': '203.0.*.*', 'ipKey': 'k' + ip, 'ipFull': ip}


def test_empty_store_reads_empty(store):
    assert store.read_all() == []


def test_append_then_read_contains_record_once(store):
    stored = store.append(candidate(score=42))
    rows = store.read_all()
    assert rows.count(stored) == 1
    assert stored['playedAt'].endswith('Z')


def test_append_preserves_order_and_stamps_never_decrease(store):
    for score in range(10):
        store.append(candidate(score=score))
    rows = store.read_all()
    assert [r['score'] for r in rows] == list(range(10))
    stamps = [r['playedAt'] for r in rows]
    assert stamps == sorted(stamps)


def test_append_does_not_mutate_input(store):
    record = candidate()
    store.append(record)
    assert 'playedAt' not in record


def test_json_store_initializes_file(tmp_path):
    path = tmp_path / 'nested' / 'scores.json'
    JsonFileScoreStore(str(path)).ensure()
    assert json.loads(path.read_text()) == []


def test_json_store_survives_restart(app_factory, tmp_path):
    first = app_factory()
    first.extensions['score_store'].append(candidate(score=5))
    second = app_factory()
    assert [r['score'] for r in second.extensions['score_store'].read_all()] == [5]


def test_corrupt_file_reads_as_empty(app_factory, tmp_path):
    app = app_factory()
    path = app.config['SCORE_STORE_PATH']
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write('{not json')
    assert app.extensions['score_store'].read_all() == []


def test_non_list_file_reads_as_empty(app_factory):
    app = app_factory()
    path = app.config['SCORE_STORE_PATH']
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump({'scores': []}, f)
    assert app.extensions['score_store'].read_all() == []


def test_corrupt_file_is_not_overwritten_by_append(app_factory):
    app = app_factory()
    path = app.config['SCORE_STORE_PATH']
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write('[{"score": 1},')
    with pytest.raises(StoreWriteError):
        app.extensions['score_store'].append(candidate())
    with open(path, encoding='utf-8') as f:
        assert f.read() == '[{"score": 1},'


def test_append_to_unwritable_location_raises(app_factory, tmp_path):
    blocker = tmp_path / 'blocker'
    blocker.write_text('a file, not a directory')
    app = app_factory(SCORE_STORE_PATH=str(blocker / 'leaderboard.json'))
    with pytest.raises(StoreWriteError):
        app.extensions['score_store'].append(candidate())
    assert app.extensions['score_store'].read_all() == []


def test_json_read_does_not_create_file(app_factory):
    app = app_factory()
    path = app.config['SCORE_STORE_PATH']
    assert app.extensions['score_store'].read_all() == []
    assert not os.path.exists(path)
    stored = app.extensions['score_store'].append(candidate(score=7))
    assert app.extensions['score_store'].read_all() == [stored]


WRITERS = 6
APPENDS_PER_WRITER = 5
READERS = 3


def run_concurrently(app, store):
    """Writers and readers start together on a store that has never been used."""
    barrier = threading.Barrier(WRITERS + READERS)
    done = threading.Event()
    errors = []
    snapshots = [[] for _ in range(READERS)]

    def writer(n):
        try:
            with app.app_context():
                barrier.wait()
                for i in range(APPENDS_PER_WRITER):
                    store.append(candidate(nickname=f'W{n}-{i}', score=n * 10 + i))
        except Exception as exc:
            errors.append(exc)

    def reader(n):
        try:
            with app.app_context():
                barrier.wait()
                while not done.is_set():
                    snapshots[n].append([r['nickname'] for r in store.read_all()])
        except Exception as exc:
            errors.append(exc)

    writers = [threading.Thread(target=writer, args=(n,)) for n in range(WRITERS)]
    readers = [threading.Thread(target=reader, args=(n,)) for n in range(READERS)]
    for t in writers + readers:
        t.start()
    for t in writers:
        t.join()
    done.set()
    for t in readers:
        t.join()
    return errors, snapshots


@pytest.mark.parametrize('backend', ['json', 'sql'])
def test_concurrent_appends_and_reads(app_factory, tmp_path, backend):
    app = app_factory(
        SCORE_STORE_BACKEND=backend,
        SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'concurrent.db'}",
    )
    store = app.extensions['score_store']
    errors, snapshots = run_concurrently(app, store)
    assert errors == []

    names = [r['nickname'] for r in store.read_all()]
    expected = {f'W{n}-{i}' for n in range(WRITERS) for i in range(APPENDS_PER_WRITER)}
    assert sorted(names) == sorted(expected)

    for seen in snapshots:
        previous = []
        for snapshot in seen:
            # Every read is a whole earlier or later state, never a partial one
            assert len(set(snapshot)) == len(snapshot)
            assert snapshot[:len(previous)] == previous
            previous = snapshot
