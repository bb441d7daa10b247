import logging, time
from datetime import datetime
from flask import Blueprint, request, jsonify
from redis import Redis
from rq import Queue
from rq.job import Job
from rq.exceptions import NoSuchJobError

from primegen import config, find_primes
from primegen.params import byte_length_for_bits, parse_count

logger = logging.getLogger(__name__)

prime_bp = Blueprint("prime_bp", __name__)

# Redis / RQ
redis_conn = Redis.from_url(config.REDIS_URL)
prime_q = Queue("primes", connection=redis_conn, default_timeout=60*60)  # 1h

# ------------------ helpers ------------------
def _age_secs(dt: datetime | None) -> float | None:
    if not dt:
        return None
    return max(0.0, time.time() - dt.timestamp())

def _job_dict(job: Job) -> dict:
    d = {
        "job_id": job.id,
        "status": job.get_status(),
        "meta": job.meta or {},
        "enqueued_at": job.enqueued_at.isoformat() if job.enqueued_at else None,
        "started_at": job.started_at.isoformat() if job.started_at else None,
        "ended_at": job.ended_at.isoformat() if job.ended_at else None,
        "age_sec": _age_secs(job.enqueued_at),
    }
    if job.is_finished:
        d["result"] = job.return_value()
    if job.is_failed:
        d["exc_info"] = (job.exc_info or "")[-1024:]
    return d

def _params():
    data = request.get_json(silent=True) or {}
    if not data:
        data = request.values
    nbytes = byte_length_for_bits(data.get("bits", ""))
    count = parse_count(data.get("count"))
    if nbytes * 8 > config.MAX_BITS:
        raise ValueError(f"Max {config.MAX_BITS} bits.")
    if count > config.MAX_COUNT:
        raise ValueError(f"Count too large; cap is {config.MAX_COUNT}.")
    return nbytes, count

def _client_ip() -> str:
    xff = request.headers.get("X-Forwarded-For", "")
    return xff.split(",")[0].strip() if xff else (request.remote_addr or "")

def ip_can_start(ip: str) -> bool:
    """Allow only one active (queued or started) job per IP."""
    ids = list(prime_q.started_job_registry.get_job_ids()) + list(prime_q.get_job_ids())
    for job in Job.fetch_many(ids, connection=redis_conn):
        if job is not None and (job.meta or {}).get("ip") == ip:
            return False
    return True

def _fetch(job_id: str):
    try:
        return Job.fetch(job_id, connection=redis_conn)
    except NoSuchJobError:
        return None

# ------------------ API ------------------
@prime_bp.get("/api/health")
def health():
    ok, msg = True, "ok"
    try:
        redis_conn.ping()
    except Exception as e:
        ok, msg = False, f"redis error: {e.__class__.__name__}"
    size = prime_q.count if ok else None
    return jsonify({"ok": ok, "msg": msg, "queue": {"name": prime_q.name, "size": size}, "time": int(time.time())})

@prime_bp.route("/api/primes", methods=["GET", "POST"])
def primes_now():
    t0 = time.time()
    try:
        nbytes, count = _params()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    if nbytes * 8 > config.SYNC_MAX_BITS or count > config.SYNC_MAX_COUNT:
        return jsonify({"error": f"Synchronous requests are limited to {config.SYNC_MAX_BITS} bits "
                                 f"and {config.SYNC_MAX_COUNT} primes; use /api/primes/submit."}), 400

    found = find_primes(nbytes, count, backend="thread", workers=1)
    ms = int((time.time() - t0) * 1000)
    d = jsonify({
        "bits": nbytes * 8,
        "count": count,
        "primes": [{"index": p.index, "value": str(p.value)} for p in found],
        "elapsed_ms": ms,
    })
    d.headers["X-Compute-ms"] = str(ms)
    return d

@prime_bp.post("/api/primes/submit")
def primes_submit():
    try:
        nbytes, count = _params()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    ip = _client_ip()
    if not ip_can_start(ip):
        return jsonify({"error": "One active job per IP. Wait or cancel the running job."}), 429

    bits = nbytes * 8
    job = prime_q.enqueue("prime_worker.generate_primes_job", bits, count,
                          meta={"bits": bits, "count": count, "ip": ip, "submitted": time.time()})
    logger.info("queued prime job %s: bits=%d count=%d ip=%s", job.id, bits, count, ip)
    ids = prime_q.get_job_ids()
    pos = ids.index(job.id) + 1 if job.id in ids else 1
    note = "Warning: ≥ 2048-bit searches can take minutes." if bits >= 2048 else ""
    return jsonify({"job_id": job.id, "status": job.get_status(), "bits": bits, "count": count,
                    "queue_position": pos, "note": note})

@prime_bp.get("/api/job/<job_id>")
def job_status(job_id):
    job = _fetch(job_id)
    if job is None:
        return jsonify({"error": "unknown job"}), 404
    return jsonify(_job_dict(job))

@prime_bp.post("/api/job/<job_id>/abort")
def job_abort(job_id):
    job = _fetch(job_id)
    if job is None:
        return jsonify({"error": "unknown job"}), 404
    if job.get_status() == "started":
        from rq.command import send_stop_job_command
        send_stop_job_command(redis_conn, job_id)
    else:
        job.cancel()
    logger.info("aborted prime job %s", job_id)
    return jsonify({"ok": True, "job_id": job_id, "status": job.get_status()})
