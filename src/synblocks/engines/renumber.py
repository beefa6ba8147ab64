"""Contiguous renumbering of block ids."""
import numpy as np

from synblocks.containers.permutation import PermutationSet
from synblocks.core.index import group_by_block_id


# Functions ------------------------------------------------------------------------------------------------------------
def renumerate(permutations: PermutationSet) -> PermutationSet:
    """
    Relabels block ids as ``1..N`` in order of first appearance.

    Sequences are scanned in collection order and blocks in their stored order; every occurrence of an
    original id receives the same new id.

    Args:
        permutations: The collection to relabel.

    Returns:
        A new ``PermutationSet``; the input is unchanged.

    Raises:
        BlockError: If any block has a non-positive id.

    Examples:
        >>> [p.signed_ids() for p in renumerate(perms)]
        [[1, -2, 3], [2, 1]]
    """
    group_by_block_id(permutations)
    new_ids: dict[int, int] = {}
    out = []
    for perm in permutations:
        ids = [new_ids.setdefault(block_id, len(new_ids) + 1) for block_id in perm.blocks.block_ids.tolist()]
        out.append(perm.with_blocks(perm.blocks.with_ids(np.array(ids, dtype=np.int64))))
    return PermutationSet(out)
