#!/usr/bin/env python3
import sys, argparse, logging, threading, time
from datetime import timedelta

from primegen import config, find_primes
from primegen.params import byte_length_for_bits, parse_count, parse_int
from primegen.search import BACKENDS

USAGE = """Usage: primegen <bits> [count]
\t- bits - the number of bits of the prime number, this must be multiple of 8, and at least 32 bits.
\t- count - the number of prime numbers to generate, defaults to 1"""

class _UsageParser(argparse.ArgumentParser):
    def error(self, message):
        print(message)
        print(USAGE)
        raise SystemExit(1)

def build_parser() -> argparse.ArgumentParser:
    ap = _UsageParser(prog="primegen", usage="%(prog)s <bits> [count] [options]",
                      description="Generate probable primes of a given bit length.")
    ap.add_argument("bits", help="bit length of each prime (multiple of 8, >= 32)")
    ap.add_argument("count", nargs="?", default=None, help="how many primes, default 1")
    ap.add_argument("--workers", type=int, default=None, help="parallel workers (default: one per CPU)")
    ap.add_argument("--backend", choices=BACKENDS, default=config.BACKEND)
    ap.add_argument("--rounds", type=int, default=config.MR_ROUNDS, help="Miller-Rabin rounds")
    ap.add_argument("--seed", type=int, default=None, help="base RNG seed")
    ap.add_argument("--quiet", action="store_true", help="don't print the primes")
    ap.add_argument("--verbose", action="store_true", help="debug logging on stderr")
    return ap

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        bits = parse_int(args.bits)
        nbytes = byte_length_for_bits(bits)
        count = parse_count(args.count)
        if args.workers is not None and args.workers < 1:
            raise ValueError(f"--workers must be at least 1, got {args.workers}")
        if args.rounds < 1:
            raise ValueError(f"--rounds must be at least 1, got {args.rounds}")
    except ValueError as e:
        print(e)
        if not str(e).startswith("Unable to parse"):
            print(USAGE)
        return 1

    print(f"BitLength: {nbytes * 8} bits", flush=True)
    emit = None if args.quiet else (lambda hit: print(hit, flush=True))
    stop = threading.Event()
    t0 = time.perf_counter()
    try:
        find_primes(nbytes, count, emit, workers=args.workers, backend=args.backend,
                    rounds=args.rounds, seed=args.seed, stop_event=stop)
    except KeyboardInterrupt:
        stop.set()
        print("\nInterrupted.", file=sys.stderr, flush=True)
        return 130
    except ValueError as e:
        print(e)
        return 1
    print(f"Time to Generate: {timedelta(seconds=time.perf_counter() - t0)}", flush=True)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
