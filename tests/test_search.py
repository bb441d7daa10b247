import threading

import pytest

from primegen.primality import is_probable_prime
from primegen.search import AcceptedPrime, SearchState, find_primes, search_batch

def _is_prime(n):
    if n < 2:
        return False
    f = 2
    while f * f <= n:
        if n % f == 0:
            return False
        f += 1
    return True

def _check_run(found, emitted, target):
    assert [p.index for p in found] == list(range(1, target + 1))
    assert emitted == found

def test_scenario_four_bytes_three_primes():
    emitted = []
    found = find_primes(4, 3, emitted.append, workers=4)
    _check_run(found, emitted, 3)
    values = [p.value for p in found]
    assert len(set(values)) == 3
    for v in values:
        assert v % 2 == 1
        assert 0 <= v < 2**31
        assert is_probable_prime(v)
        assert _is_prime(v)

@pytest.mark.parametrize("workers", [1, 2, 8, 32])
def test_thread_backend_exact_count(workers):
    emitted = []
    found = find_primes(8, 5, emitted.append, workers=workers, backend="thread")
    _check_run(found, emitted, 5)

@pytest.mark.parametrize("workers", [1, 3])
def test_process_backend_exact_count(workers):
    emitted = []
    found = find_primes(8, 4, emitted.append, workers=workers, backend="process", batch=16)
    _check_run(found, emitted, 4)
    assert all(p.value % 2 == 1 and p.value < 2**63 for p in found)

def test_thread_stress_many_runs():
    for _ in range(40):
        emitted = []
        found = find_primes(4, 5, emitted.append, workers=16)
        _check_run(found, emitted, 5)

def test_process_stress_many_runs():
    for _ in range(4):
        emitted = []
        found = find_primes(4, 5, emitted.append, workers=4, backend="process", batch=4)
        _check_run(found, emitted, 5)

def test_larger_primes():
    found = find_primes(64, 2, workers=2)
    for p in found:
        assert p.value.bit_length() <= 511
        assert is_probable_prime(p.value, rounds=20)

def test_same_seed_single_worker_is_reproducible():
    a = find_primes(8, 3, workers=1, seed=1234)
    b = find_primes(8, 3, workers=1, seed=1234)
    assert a == b

def test_emit_is_optional():
    assert len(find_primes(4, 2, workers=2)) == 2

def test_stop_event_ends_search_early():
    stop = threading.Event()
    stop.set()
    assert find_primes(256, 10, workers=4, stop_event=stop) == []
    assert find_primes(256, 10, workers=2, backend="process", batch=1, stop_event=stop) == []

def test_emit_error_propagates():
    def boom(hit):
        raise RuntimeError("sink failed")
    with pytest.raises(RuntimeError, match="sink failed"):
        find_primes(4, 1, boom, workers=2)

@pytest.mark.parametrize("kwargs", [
    dict(byte_length=0, target_count=1),
    dict(byte_length=4, target_count=0),
    dict(byte_length=4, target_count=1, workers=0),
    dict(byte_length=4, target_count=1, rounds=0),
    dict(byte_length=4, target_count=1, backend="gpu"),
])
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        find_primes(**kwargs)

def test_claim_gate_under_contention():
    state = SearchState(100)
    emitted = []
    barrier = threading.Barrier(64)

    def hammer(worker):
        barrier.wait()
        for i in range(10):
            state.claim(worker * 1000 + i, emitted.append)

    threads = [threading.Thread(target=hammer, args=(w,)) for w in range(64)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert state.accepted == 100
    assert not state.active()
    assert [h.index for h in emitted] == list(range(1, 101))
    assert emitted == state.results

def test_claim_after_target_returns_none():
    state = SearchState(1)
    assert state.claim(7) == AcceptedPrime(1, 7)
    assert state.claim(11) is None
    assert state.results == [AcceptedPrime(1, 7)]

def test_accepted_prime_renders_as_index_value():
    assert str(AcceptedPrime(3, 101)) == "3: 101"

def test_search_batch():
    n = search_batch(4, 10, seed=99, batch=10_000)
    assert n is not None and n % 2 == 1 and is_probable_prime(n)
    # one candidate is not enough to always hit a prime
    results = {search_batch(64, 10, seed=s, batch=1) for s in range(20)}
    assert None in results
