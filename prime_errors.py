"""
Exception hierarchy for the primality and factorization engine.

Validation errors (InvalidInput, InvalidModulus, MalformedLiteral) are raised at
the public boundary before any computation starts. SearchExhausted and its
subclasses signal that a caller-imposed budget ran out during a randomized
search; the search itself never fails on its own.
"""


class PrimeEngineError(Exception):
    """Base class for every error raised by the engine."""


class InvalidInput(PrimeEngineError, ValueError):
    """Input outside the domain of an operation (negative value, non-integer, ...)."""


class InvalidModulus(InvalidInput):
    """Modulus (or sampling bound) too small for the arithmetic kernel."""

    def __init__(self, modulus: int, minimum: int = 1):
        self.modulus = modulus
        self.minimum = minimum
        super().__init__(f"modulus must be >= {minimum}, got {modulus}")


class MalformedLiteral(PrimeEngineError, ValueError):
    """Text that cannot be parsed as a base-10 integer."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"not an integer literal: {text!r}")


class SearchExhausted(PrimeEngineError, RuntimeError):
    """A bounded retry loop ran out of attempts or time."""

    def __init__(self, message: str, attempts: int, elapsed: float):
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(message)


class FactorSearchExhausted(SearchExhausted):
    """Pollard's Rho did not produce a nontrivial factor within the budget."""

    def __init__(self, n: int, attempts: int, elapsed: float):
        self.n = n
        super().__init__(
            f"no factor of {n} found after {attempts} attempts ({elapsed:.3f}s)",
            attempts,
            elapsed,
        )


class SamplingExhausted(SearchExhausted):
    """random_below rejected more draws than max_draws allowed."""

    def __init__(self, bound: int, attempts: int, elapsed: float = 0.0):
        self.bound = bound
        super().__init__(
            f"no sample in [1, {bound - 1}] after {attempts} draws",
            attempts,
            elapsed,
        )


__all__ = [
    "PrimeEngineError",
    "InvalidInput",
    "InvalidModulus",
    "MalformedLiteral",
    "SearchExhausted",
    "FactorSearchExhausted",
    "SamplingExhausted",
]
