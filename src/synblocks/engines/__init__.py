"""Algorithms operating on collections of permutations."""
