from .candidates import generate
from .primality import is_probable_prime, random_below
from .search import AcceptedPrime, SearchState, find_primes

__all__ = ["AcceptedPrime", "SearchState", "find_primes", "generate", "is_probable_prime", "random_below"]
