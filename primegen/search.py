# primegen/search.py
# Concurrent candidate search:
# - workers loop GENERATE -> REJECT_EVEN -> TEST_PRIME -> CLAIM_SLOT
# - thread backend: every worker claims its own slots
# - process backend: children test candidates, the coordinator claims
# - all claims go through SearchState.claim(), one lock, emit inside it

from __future__ import annotations
import logging, random, threading, time
from concurrent.futures import (FIRST_COMPLETED, ProcessPoolExecutor,
                                ThreadPoolExecutor, as_completed, wait)
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import config
from .candidates import generate
from .primality import is_probable_prime

logger = logging.getLogger(__name__)

BACKENDS = ("thread", "process")
SEED_MIX = 0x9E3779B185EBCA87

@dataclass(frozen=True)
class AcceptedPrime:
    index: int
    value: int

    def __str__(self) -> str:
        return f"{self.index}: {self.value}"

Emit = Callable[[AcceptedPrime], None]

class SearchState:
    """Accepted-prime counter shared by all workers of one search."""

    def __init__(self, target: int):
        self.target = target
        self.accepted = 0
        self.results: List[AcceptedPrime] = []
        self._lock = threading.Lock()

    def active(self) -> bool:
        # unlocked read; claim() is the only gate that counts
        return self.accepted < self.target

    def claim(self, value: int, emit: Optional[Emit] = None) -> Optional[AcceptedPrime]:
        """Reserve the next discovery index for `value` and emit it.

        Check, increment and emit happen under one lock, so indices are unique,
        emission order follows index order, and nothing past the target is
        ever emitted. Returns None when the target was already reached.
        """
        with self._lock:
            if self.accepted >= self.target:
                return None
            self.accepted += 1
            hit = AcceptedPrime(self.accepted, value)
            self.results.append(hit)
            if emit is not None:
                emit(hit)
            return hit

# ---------- thread backend ----------

def _thread_worker(state: SearchState, byte_length: int, rounds: int,
                   rng: random.Random, emit: Optional[Emit], stop: threading.Event) -> int:
    tried = 0
    while state.active() and not stop.is_set():
        n = generate(byte_length, rng)
        tried += 1
        if n % 2 == 0:
            continue
        if not is_probable_prime(n, rounds, rng):
            continue
        hit = state.claim(n, emit)
        if hit:
            logger.debug("slot %d claimed by %s after %d candidates",
                         hit.index, threading.current_thread().name, tried)
    return tried

def _run_threads(state, byte_length, rounds, workers, seed, emit, stop) -> int:
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="primegen") as ex:
        futs = [ex.submit(_thread_worker, state, byte_length, rounds,
                          random.Random(seed ^ (i * SEED_MIX)), emit, stop)
                for i in range(1, workers + 1)]
        tried = 0
        try:
            for fut in as_completed(futs):
                tried += fut.result()
        except BaseException:
            stop.set()
            raise
    return tried

# ---------- process backend ----------

def search_batch(byte_length: int, rounds: int, seed: int, batch: int) -> Optional[int]:
    """Try up to `batch` candidates; return the first probable prime or None."""
    rng = random.Random(seed)
    for _ in range(batch):
        n = generate(byte_length, rng)
        if n % 2 == 0:
            continue
        if is_probable_prime(n, rounds, rng):
            return n
    return None

def _run_processes(state, byte_length, rounds, workers, seed, batch, emit, stop) -> int:
    task_no = 0

    def submit(ex):
        nonlocal task_no
        task_no += 1
        return ex.submit(search_batch, byte_length, rounds, seed ^ (task_no * SEED_MIX), batch)

    with ProcessPoolExecutor(max_workers=workers) as ex:
        pending = {submit(ex) for _ in range(workers)}
        try:
            while pending and state.active() and not stop.is_set():
                done, pending = wait(pending, timeout=0.25, return_when=FIRST_COMPLETED)
                for fut in done:
                    n = fut.result()
                    if n is not None:
                        hit = state.claim(n, emit)
                        if hit:
                            logger.debug("slot %d claimed (task result)", hit.index)
                    if state.active() and not stop.is_set():
                        pending.add(submit(ex))
        finally:
            for fut in pending:
                fut.cancel()
    return task_no * batch

# ---------- entry point ----------

def find_primes(byte_length: int, target_count: int, emit: Optional[Emit] = None, *,
                workers: Optional[int] = None, backend: str = "thread",
                rounds: Optional[int] = None, seed: Optional[int] = None,
                batch: Optional[int] = None,
                stop_event: Optional[threading.Event] = None) -> List[AcceptedPrime]:
    """Find `target_count` probable primes of `byte_length` bytes.

    Each accepted prime is passed to `emit` exactly once, in discovery-index
    order, and the full list is returned. Setting `stop_event` ends the search
    early with whatever was accepted so far.
    """
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    if target_count <= 0:
        raise ValueError("target_count must be positive")
    if backend not in BACKENDS:
        raise ValueError(f"backend must be one of {BACKENDS}, got {backend!r}")
    workers = config.default_workers() if workers is None else workers
    if workers <= 0:
        raise ValueError("workers must be positive")
    rounds = config.MR_ROUNDS if rounds is None else rounds
    if rounds <= 0:
        raise ValueError("rounds must be positive")
    batch = config.BATCH if batch is None else max(1, batch)
    if seed is None:
        seed = random.randrange(2**63 - 1)
    stop = stop_event if stop_event is not None else threading.Event()

    state = SearchState(target_count)
    logger.debug("search start: bytes=%d target=%d workers=%d backend=%s rounds=%d",
                 byte_length, target_count, workers, backend, rounds)
    t0 = time.perf_counter()
    if backend == "thread":
        tried = _run_threads(state, byte_length, rounds, workers, seed, emit, stop)
    else:
        tried = _run_processes(state, byte_length, rounds, workers, seed, batch, emit, stop)
    logger.debug("search done: accepted=%d candidates~%d elapsed=%.3fs",
                 state.accepted, tried, time.perf_counter() - t0)
    return list(state.results)
