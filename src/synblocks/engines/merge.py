"""
Reconciliation of block decompositions computed at two scales.

Fine-scale block groups are inserted into a coarse (loose) decomposition only when every occurrence of the group,
on every sequence it touches, falls inside a gap between loose blocks of that sequence.
"""
from typing import Optional
from warnings import warn

import numpy as np

from synblocks import MergeWarning
from synblocks.containers.permutation import BlockBatch, Permutation, PermutationSet
from synblocks.core.index import BlockIndex, group_by_block_id, index_by_seq_id


# Functions ------------------------------------------------------------------------------------------------------------
def merge_permutations(loose: PermutationSet, fine: PermutationSet, next_id: Optional[int] = None) -> PermutationSet:
    """
    Merges a fine-scale decomposition into a loose-scale one.

    Args:
        loose: The coarse decomposition; its blocks are always kept unchanged.
        fine: The fine decomposition; also the source of sequence metadata.
        next_id: First id to assign to inserted groups (default: one above the largest loose id).

    Returns:
        A new ``PermutationSet`` with the accepted fine groups inserted under fresh ids.

    Examples:
        >>> merged = merge_permutations(loose, fine)
        >>> merged.max_block_id() >= loose.max_block_id()
        True
    """
    return merge_permutations_with_counter(loose, fine, next_id)[0]


def merge_permutations_with_counter(loose: PermutationSet, fine: PermutationSet,
                                    next_id: Optional[int] = None) -> tuple[PermutationSet, int]:
    """
    Same as :func:`merge_permutations`, but also returns the next unused id.

    The returned counter can be passed to a subsequent merge so that ids minted at different
    levels of a multi-scale pipeline never collide.

    Raises:
        ValueError: If ``next_id`` does not exceed every id present in ``loose``.
        BlockError: If either input carries a non-positive block id.
    """
    loose_max = loose.max_block_id()
    if next_id is None: next_id = loose_max + 1
    elif next_id <= loose_max: raise ValueError(f"next_id ({next_id}) must exceed the largest loose id ({loose_max})")
    group_by_block_id(loose)  # Fail fast on invalid loose ids

    fine_index = group_by_block_id(fine)
    conflicts = find_conflicts(loose, fine)
    accepted = accepted_groups(fine_index, conflicts)
    new_ids, next_id = assign_ids(fine_index, accepted, next_id)
    return _build_merged(loose, fine, new_ids), next_id


def find_conflicts(loose: PermutationSet, fine: PermutationSet) -> dict[int, np.ndarray]:
    """
    Flags fine blocks that straddle a loose block boundary on their own sequence.

    A fine block ``b`` is conflict-free when the number of loose ends ``<= b.start`` equals the number of loose
    starts ``<= b.end``. Sequences absent from ``loose`` have no boundaries, so their blocks never conflict.

    Returns:
        A mapping of fine ``seq_id`` to a boolean array (True = conflicting) aligned with that permutation's blocks.
    """
    loose_by_seq = index_by_seq_id(loose)
    conflicts = {}
    for perm in fine:
        if (bounds := loose_by_seq.get(perm.seq_id)) is None or not len(bounds):
            conflicts[perm.seq_id] = np.zeros(len(perm), dtype=bool)
            continue
        left = np.searchsorted(bounds.blocks.ends, perm.blocks.starts, side='right')
        right = np.searchsorted(bounds.blocks.starts, perm.blocks.ends, side='right')
        conflicts[perm.seq_id] = left != right
    return conflicts


def accepted_groups(fine_index: BlockIndex, conflicts: dict[int, np.ndarray]) -> list[int]:
    """Returns the fine block ids, ascending, whose every occurrence is conflict-free."""
    return [block_id for block_id, refs in fine_index.items()
            if not any(conflicts[ref.seq_id][ref.block_index] for ref in refs)]


def assign_ids(fine_index: BlockIndex, accepted: list[int], next_id: int) -> tuple[dict[int, np.ndarray], int]:
    """
    Mints one fresh id per accepted group.

    Args:
        fine_index: Index over the fine decomposition.
        accepted: Accepted fine block ids, in the order ids should be minted.
        next_id: First id to mint.

    Returns:
        A tuple of (``seq_id`` -> per-block new id array, 0 where not inserted) and the next unused id.
    """
    new_ids = {perm.seq_id: np.zeros(len(perm), dtype=np.int64) for perm in fine_index.source}
    for block_id in accepted:
        for ref in fine_index[block_id]: new_ids[ref.seq_id][ref.block_index] = next_id
        next_id += 1
    return new_ids, next_id


def _build_merged(loose: PermutationSet, fine: PermutationSet, new_ids: dict[int, np.ndarray]) -> PermutationSet:
    fine_by_seq = index_by_seq_id(fine)
    pieces: dict[int, list[BlockBatch]] = {perm.seq_id: [perm.blocks.copy()] for perm in loose}
    for perm in fine:
        mask = new_ids[perm.seq_id] > 0
        if not mask.any(): continue
        pieces.setdefault(perm.seq_id, []).append(perm.blocks[mask].with_ids(new_ids[perm.seq_id][mask]))

    loose_by_seq = index_by_seq_id(loose)
    merged = []
    for seq_id, batches in pieces.items():
        if (meta := fine_by_seq.get(seq_id)) is None:
            meta = loose_by_seq[seq_id]
            warn(f"Sequence {seq_id} ({meta.seq_name}) is missing from the fine decomposition; "
                 f"using loose metadata", MergeWarning)
        merged.append(Permutation(seq_id, meta.seq_name, meta.nuc_length, BlockBatch.concat(batches).sorted()))
    return PermutationSet(merged)
