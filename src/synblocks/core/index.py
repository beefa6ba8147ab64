"""Inverted indices over a collection of permutations."""
from collections import defaultdict
from collections.abc import Mapping
from typing import Iterator, NamedTuple

import numpy as np

from synblocks.core.block import Block, BlockError
from synblocks.containers.permutation import Permutation, PermutationSet


# Classes --------------------------------------------------------------------------------------------------------------
class BlockRef(NamedTuple):
    """Handle to one block occurrence inside a PermutationSet."""
    seq_id: int
    perm_index: int
    block_index: int


class BlockIndex(Mapping):
    """
    Maps each block id to its occurrences across a collection of permutations.

    Occurrences are stored as :class:`BlockRef` handles and are only resolved through the source collection,
    so the index is only meaningful for as long as that collection is unchanged. Iteration is in ascending
    block id order; occurrences follow collection order, then block order within each permutation.

    Examples:
        >>> index = group_by_block_id(perms)
        >>> for seq_id, block in index.occurrences(5):
        ...     print(seq_id, block.start, block.end)
    """
    __slots__ = ('_source', '_refs')

    def __init__(self, source: PermutationSet, refs: dict[int, tuple[BlockRef, ...]]):
        self._source = source
        self._refs = dict(sorted(refs.items()))

    @property
    def source(self) -> PermutationSet: return self._source
    def __getitem__(self, block_id: int) -> tuple[BlockRef, ...]: return self._refs[block_id]
    def __iter__(self) -> Iterator[int]: return iter(self._refs)
    def __len__(self): return len(self._refs)
    def __repr__(self): return f"<BlockIndex: {len(self)} block ids>"

    def resolve(self, ref: BlockRef) -> Block:
        """Returns the block a handle points at."""
        return self._source[ref.perm_index][ref.block_index]

    def occurrences(self, block_id: int) -> Iterator[tuple[int, Block]]:
        """Yields ``(seq_id, block)`` pairs for every occurrence of a block id."""
        for ref in self._refs[block_id]: yield ref.seq_id, self.resolve(ref)

    def multiplicity(self, block_id: int) -> int:
        """Returns the number of distinct sequences carrying a block id."""
        return len({ref.seq_id for ref in self._refs[block_id]})


# Functions ------------------------------------------------------------------------------------------------------------
def group_by_block_id(permutations: PermutationSet) -> BlockIndex:
    """
    Builds the block id -> occurrences index.

    Args:
        permutations: The source collection.

    Returns:
        A ``BlockIndex`` over every block in the collection.

    Raises:
        BlockError: If any block has a non-positive id.
    """
    refs = defaultdict(list)
    for p_idx, perm in enumerate(permutations):
        ids = perm.blocks.block_ids
        if len(ids) and (bad := np.flatnonzero(ids <= 0)).size:
            raise BlockError(f"Sequence {perm.seq_id}: block {bad[0]} has invalid id {ids[bad[0]]}")
        for b_idx, block_id in enumerate(ids.tolist()):
            refs[block_id].append(BlockRef(perm.seq_id, p_idx, b_idx))
    return BlockIndex(permutations, {k: tuple(v) for k, v in refs.items()})


def index_by_seq_id(permutations: PermutationSet) -> dict[int, Permutation]:
    """Returns a seq_id -> permutation lookup preserving collection order."""
    return {perm.seq_id: perm for perm in permutations}
