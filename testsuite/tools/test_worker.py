import concurrent.futures

import pytest

from dspan.tools.worker import SequenceWorker


def test_request_response():
    with SequenceWorker(seed=123) as worker:
        future = worker.request({'length': 7})
        assert isinstance(future, concurrent.futures.Future)
        message = future.result(timeout=60)

    assert set(message.keys()) == {'sequence', 'isValid'}
    assert len(message['sequence']) == 7
    assert all(0 <= d <= 9 for d in message['sequence'])
    assert isinstance(message['isValid'], bool)


def test_independent_requests():
    with SequenceWorker(max_workers=4, seed=5) as worker:
        futures = {length: worker.request({'length': length}) for length in range(3, 19)}
        responses = {length: f.result(timeout=60) for length, f in futures.items()}

    for length, message in responses.items():
        assert len(message['sequence']) == length


def test_forced_fallback():
    with SequenceWorker(parameters={'max_attempts': 0}) as worker:
        message = worker.generate(10, timeout=60)
    assert message['isValid'] is False
    assert len(message['sequence']) == 10


def test_bad_requests():
    with SequenceWorker() as worker:
        with pytest.raises(KeyError):
            worker.request({'span': 6})
        with pytest.raises(ValueError):
            worker.request({'length': 0}).result(timeout=60)


def test_requests_from_many_threads():
    with SequenceWorker(seed=9) as worker:
        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as clients:
            seeds = list(clients.map(lambda _: worker._next_seed(), range(200)))
    keys = [s.spawn_key for s in seeds]
    assert len(set(keys)) == 200
