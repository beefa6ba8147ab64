import numpy as np
import pytest

from synblocks import Block, Permutation, PermutationSet


def perm(seq_id, *blocks, name=None, length=1000):
    """Builds a permutation from (block_id, start, end[, strand]) tuples."""
    built = []
    for spec in blocks:
        block_id, start, end = spec[:3]
        built.append(Block(start, end, spec[3] if len(spec) > 3 else '+', block_id))
    return Permutation(seq_id, name or f"seq{seq_id}", length, built)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def loose():
    return PermutationSet([perm(1, (1, 0, 100)), perm(2, (1, 0, 100))])
