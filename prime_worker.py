import logging, time

from rq import get_current_job

from primegen import config, find_primes
from primegen.params import byte_length_for_bits, parse_count

logger = logging.getLogger(__name__)

# ---- Public RQ job -----------------------------------------------------------

def generate_primes_job(bits, count=1, workers=None, backend=None):
    """
    Run one prime search inside an RQ worker (or directly).
    Progress is kept in job.meta as {"found": i, "count": count}.
    Returns: dict with bits, count, primes (decimal strings), elapsed_ms
    """
    nbytes = byte_length_for_bits(bits)
    count = parse_count(count)
    job = get_current_job()
    if job is not None:
        job.meta.update({"found": 0, "count": count})
        job.save_meta()

    def emit(hit):
        if job is not None:
            job.meta["found"] = hit.index
            job.save_meta()

    logger.info("prime job: bits=%d count=%d", nbytes * 8, count)
    t0 = time.time()
    found = find_primes(nbytes, count, emit, workers=workers,
                        backend=backend or config.BACKEND)
    return {
        "bits": nbytes * 8,
        "count": count,
        "primes": [str(p.value) for p in found],
        "elapsed_ms": int((time.time() - t0) * 1000),
    }
