"""Negacyclic number-theoretic transforms and modular arithmetic for word-sized primes."""

__version__ = "0.1.0"
__all__ = ["number_theory", "lanes", "transforms", "fwd_vector", "inv_vector", "ntt"]