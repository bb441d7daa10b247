import pytest

import prime_worker
from primegen.primality import is_probable_prime

class FakeJob:
    def __init__(self):
        self.meta = {}
        self.saves = []

    def save_meta(self):
        self.saves.append(dict(self.meta))

def test_runs_outside_a_worker(monkeypatch):
    monkeypatch.setattr(prime_worker, "get_current_job", lambda: None)
    out = prime_worker.generate_primes_job(32, 3, workers=2, backend="thread")
    assert out["bits"] == 32 and out["count"] == 3
    assert len(out["primes"]) == 3
    assert all(isinstance(p, str) and is_probable_prime(int(p)) for p in out["primes"])
    assert out["elapsed_ms"] >= 0

def test_records_progress_in_job_meta(monkeypatch):
    job = FakeJob()
    monkeypatch.setattr(prime_worker, "get_current_job", lambda: job)
    out = prime_worker.generate_primes_job("64", "2", workers=1, backend="thread")
    assert len(out["primes"]) == 2
    assert job.meta == {"found": 2, "count": 2}
    assert [s["found"] for s in job.saves] == [0, 1, 2]

def test_rejects_bad_bits():
    with pytest.raises(ValueError):
        prime_worker.generate_primes_job(20, 1)
