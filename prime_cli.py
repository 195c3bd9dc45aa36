"""
Command-line front end for the primality and factorization engine.

    prime-engine check N [N ...]        probable-prime verdict per N
    prime-engine factor N [N ...]       full factorization per N
    prime-engine largest N [N ...]      largest prime factor per N
    prime-engine crossvalidate          Miller-Rabin vs trial division for n < limit
    prime-engine [repl]                 interactive loop ("exit" quits)

Exit status: 0 ok, 1 cross-validation disagreement, 2 bad input,
3 factor search budget exhausted.
"""
import argparse
import logging
import re
import sys
from typing import Iterable, List, Optional, TextIO

from factorization import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_ROUNDS,
    factor_counts,
    is_prime_exact,
    is_probable_prime,
    largest_prime_factor,
)
from modular_arithmetic import sieve_of_eratosthenes
from prime_errors import InvalidInput, MalformedLiteral, SearchExhausted
from randomness import seed_default_source

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_BAD_INPUT = 2
EXIT_EXHAUSTED = 3

_INTEGER_LITERAL = re.compile(r"[+-]?\d+")


def parse_integer(text: str) -> int:
    """Parse a base-10 integer literal, surrounding whitespace allowed."""
    stripped = text.strip()
    if not _INTEGER_LITERAL.fullmatch(stripped):
        raise MalformedLiteral(text)
    return int(stripped, 10)


def format_factorization(n: int, counts) -> str:
    if not counts:
        return f"{n} = 1"
    terms = [str(p) if e == 1 else f"{p}^{e}" for p, e in sorted(counts.items())]
    return f"{n} = " + " * ".join(terms)


def describe(n: int, args: argparse.Namespace) -> str:
    """One-line verdict used by the interactive loop."""
    if is_probable_prime(n, args.rounds):
        return f"{n} is prime"
    if n < 2:
        return f"{n} is not prime"
    largest = largest_prime_factor(n, args.rounds, max_attempts=args.max_attempts,
                                   timeout=args.timeout)
    return f"{n} is not prime, largest prime factor {largest}"


def crossvalidate(limit: int, rounds: int = DEFAULT_ROUNDS) -> List[int]:
    """
    Return every n in [0, limit) where is_probable_prime disagrees with
    is_prime_exact or with the sieve table.
    """
    if limit < 0:
        raise InvalidInput(f"limit must be >= 0, got {limit}")
    table = sieve_of_eratosthenes(limit)
    mismatches: List[int] = []
    for n in range(limit):
        exact = is_prime_exact(n)
        probable = is_probable_prime(n, rounds)
        if probable != exact or exact != bool(table[n]):
            logger.info("disagreement at %d: exact=%s probable=%s sieve=%s",
                        n, exact, probable, bool(table[n]))
            mismatches.append(n)
    return mismatches


# ============================================================================
# SUBCOMMANDS
# ============================================================================

def cmd_check(args: argparse.Namespace, out: TextIO) -> int:
    for n in args.numbers:
        verdict = "probably prime" if is_probable_prime(n, args.rounds) else "composite"
        print(f"{n}\t{verdict}", file=out)
    return EXIT_OK


def cmd_factor(args: argparse.Namespace, out: TextIO) -> int:
    for n in args.numbers:
        counts = factor_counts(n, args.rounds, max_attempts=args.max_attempts,
                               timeout=args.timeout)
        print(format_factorization(n, counts), file=out)
    return EXIT_OK


def cmd_largest(args: argparse.Namespace, out: TextIO) -> int:
    for n in args.numbers:
        largest = largest_prime_factor(n, args.rounds, max_attempts=args.max_attempts,
                                       timeout=args.timeout)
        print(f"{n}\t{largest}", file=out)
    return EXIT_OK


def cmd_crossvalidate(args: argparse.Namespace, out: TextIO) -> int:
    mismatches = crossvalidate(args.limit, args.rounds)
    for n in mismatches:
        print(f"Error at {n}", file=out)
    print(f"checked {args.limit} values, {len(mismatches)} disagreements", file=out)
    return EXIT_MISMATCH if mismatches else EXIT_OK


def repl(args: argparse.Namespace, lines: Iterable[str], out: TextIO) -> int:
    """Read integers line by line until EOF or "exit"."""
    print("Enter a number to check if it's prime (or type 'exit' to quit):", file=out)
    for line in lines:
        text = line.strip()
        if not text:
            continue
        if text.lower() == "exit":
            break
        try:
            n = parse_integer(text)
            print(describe(n, args), file=out)
        except (MalformedLiteral, InvalidInput) as e:
            print(f"error: {e}", file=out)
        except SearchExhausted as e:
            print(f"gave up: {e}", file=out)
    return EXIT_OK


# ============================================================================
# ARGUMENT PARSING
# ============================================================================

def _integer_arg(text: str) -> int:
    try:
        return parse_integer(text)
    except MalformedLiteral as e:
        raise argparse.ArgumentTypeError(str(e))


def _positive_int(text: str) -> int:
    value = _integer_arg(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="prime-engine",
        description="Probabilistic primality testing and integer factorization.",
    )
    ap.add_argument("--rounds", type=_positive_int, default=DEFAULT_ROUNDS,
                    help="Miller-Rabin rounds (error <= 4**-rounds)")
    ap.add_argument("--max-attempts", type=_positive_int, default=DEFAULT_MAX_ATTEMPTS,
                    help="factor-search attempts per composite")
    ap.add_argument("--timeout", type=float, default=None,
                    help="wall-clock seconds per factorization")
    ap.add_argument("--seed", type=int, default=None,
                    help="seed the random source for reproducible runs")
    ap.add_argument("-v", "--verbose", action="count", default=0,
                    help="-v for info, -vv for debug logging")

    sub = ap.add_subparsers(dest="command")
    for name, helptext in (("check", "Miller-Rabin verdict"),
                           ("factor", "full prime factorization"),
                           ("largest", "largest prime factor")):
        p = sub.add_parser(name, help=helptext)
        p.add_argument("numbers", nargs="+", type=_integer_arg, metavar="N")

    p = sub.add_parser("crossvalidate", help="compare Miller-Rabin with trial division")
    p.add_argument("--limit", type=_integer_arg, default=100000,
                   help="check every n below this value")

    sub.add_parser("repl", help="interactive loop (the default)")
    return ap


_COMMANDS = {
    "check": cmd_check,
    "factor": cmd_factor,
    "largest": cmd_largest,
    "crossvalidate": cmd_crossvalidate,
}


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    out = stdout or sys.stdout

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.seed is not None:
        seed_default_source(args.seed)

    try:
        handler = _COMMANDS.get(args.command)
        if handler is None:
            return repl(args, stdin or sys.stdin, out)
        return handler(args, out)
    except InvalidInput as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT
    except SearchExhausted as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_EXHAUSTED


if __name__ == "__main__":
    sys.exit(main())
