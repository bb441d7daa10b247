# primegen/config.py
# Environment-driven defaults. Read once at import.
import os

def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None

def _env_positive(name: str, default: int) -> int:
    v = _env_int(name, default)
    if v < 1:
        raise ValueError(f"{name} must be at least 1, got {v}")
    return v

MR_ROUNDS        = _env_positive("PRIMEGEN_ROUNDS", 10)
BACKEND          = (os.getenv("PRIMEGEN_BACKEND", "process") or "process").strip().lower()
BATCH            = _env_positive("PRIMEGEN_BATCH", 64)
WORKERS          = _env_int("PRIMEGEN_WORKERS", 0)   # 0 -> one per CPU

REDIS_URL        = os.getenv("REDIS_URL", "redis://localhost:6379/0")
MAX_BITS         = _env_int("PRIMEGEN_MAX_BITS", 4096)
MAX_COUNT        = _env_int("PRIMEGEN_MAX_COUNT", 256)
SYNC_MAX_BITS    = _env_int("PRIMEGEN_SYNC_MAX_BITS", 1024)
SYNC_MAX_COUNT   = _env_int("PRIMEGEN_SYNC_MAX_COUNT", 16)

BASE_URL         = (os.getenv("BASE_URL", "http://127.0.0.1:8082") or "http://127.0.0.1:8082").rstrip("/")

def default_workers() -> int:
    if WORKERS > 0:
        return WORKERS
    return max(1, os.cpu_count() or 1)
