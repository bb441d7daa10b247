#!/usr/bin/env python3
import argparse, logging, random, sys, time

import requests

from primegen import config

logger = logging.getLogger(__name__)

READ_TIMEOUT = 90.0
MAX_TRIES = 4

class RetryableError(Exception):
    pass

def _attempt(session: requests.Session, url: str, params: dict, timeout: float) -> dict:
    try:
        r = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise RetryableError(repr(e)) from e
    if r.status_code >= 500:
        raise RetryableError(f"HTTP {r.status_code}")
    if not r.ok:
        try:
            msg = r.json().get("error") or r.text
        except ValueError:
            msg = r.text
        raise ValueError(f"HTTP {r.status_code}: {(msg or '')[:500]}")
    return r.json()

def fetch_primes(bits: int, count: int = 1, base_url: str = config.BASE_URL,
                 session: requests.Session | None = None, max_tries: int = MAX_TRIES,
                 timeout: float = READ_TIMEOUT, sleep=time.sleep) -> list[tuple[int, int]]:
    """Ask a running primegen API for primes; returns [(index, value), ...]."""
    session = session or requests.Session()
    session.headers.update({"User-Agent": "primegen-batch/1.0"})
    url = f"{base_url.rstrip('/')}/api/primes"
    params = {"bits": bits, "count": count}
    for t in range(1, max_tries + 1):
        try:
            body = _attempt(session, url, params, timeout)
            return [(int(p["index"]), int(p["value"])) for p in body["primes"]]
        except RetryableError as e:
            logger.warning("try %d/%d failed: %s", t, max_tries, e)
            if t == max_tries:
                raise
            # small exponential backoff with jitter
            sleep(min(15.0, (2 ** t) + random.uniform(0, 2)))
    raise RetryableError("gave up")

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Fetch primes from a primegen server")
    ap.add_argument("bits", type=int)
    ap.add_argument("count", type=int, nargs="?", default=1)
    ap.add_argument("--base-url", default=config.BASE_URL)
    ap.add_argument("--tries", type=int, default=MAX_TRIES)
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        primes = fetch_primes(args.bits, args.count, base_url=args.base_url, max_tries=args.tries)
    except (RetryableError, ValueError) as e:
        print("final_error", e, file=sys.stderr, flush=True)
        return 2
    for i, p in primes:
        print(f"{i}: {p}", flush=True)
    return 0

if __name__ == "__main__":
    sys.exit(main())
