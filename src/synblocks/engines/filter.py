"""Size-aware filtering of block decompositions that keeps short flanks of substantial block groups."""
from collections import defaultdict
from dataclasses import dataclass
from typing import Mapping, Optional
from warnings import warn

import numpy as np

from synblocks import FilterWarning
from synblocks.core.block import BlockError
from synblocks.containers.permutation import PermutationSet


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass(frozen=True)
class SizeThresholds:
    """
    Length thresholds for :func:`filter_by_size`.

    Attributes:
        min_block_len: Blocks (and per-sequence group totals) at least this long qualify.
        min_flank_len: Minimum length of a short block kept as a flank of a qualifying group.
    """
    min_block_len: int
    min_flank_len: int

    def __post_init__(self):
        if self.min_block_len < 0 or self.min_flank_len < 0:
            raise ValueError(f"Thresholds must be non-negative: {self}")


# Functions ------------------------------------------------------------------------------------------------------------
def filter_by_size(permutations: PermutationSet, block_groups: Optional[Mapping[int, int]] = None,
                   min_block_len: int = None, min_flank_len: int = None,
                   thresholds: SizeThresholds = None) -> PermutationSet:
    """
    Removes short blocks, keeping short flanks of groups that are long enough on their sequence.

    A block id is kept across all of its occurrences if any occurrence is at least ``min_block_len`` long, or if
    any occurrence is at least ``min_flank_len`` long and its group totals at least ``min_block_len`` on that
    occurrence's sequence. Sequences left without blocks are dropped.

    Args:
        permutations: The decomposition to filter.
        block_groups: Optional mapping of block id to a coarser group id.
        min_block_len: Minimum block (or per-sequence group) length.
        min_flank_len: Minimum length of a flanking block.
        thresholds: Alternative to passing both lengths explicitly; cannot be combined with them.

    Returns:
        A new ``PermutationSet``.

    Raises:
        BlockError: If any block has a non-positive id.
        ValueError: If the thresholds are missing, given twice, or negative.

    Examples:
        >>> kept = filter_by_size(perms, {3: 1, 4: 1}, min_block_len=50, min_flank_len=5)
    """
    explicit = (min_block_len, min_flank_len)
    if thresholds is not None:
        if any(x is not None for x in explicit):
            raise ValueError("Pass either thresholds or min_block_len/min_flank_len, not both")
    elif any(x is None for x in explicit):
        raise ValueError("Both min_block_len and min_flank_len are required")
    else:
        thresholds = SizeThresholds(min_block_len, min_flank_len)
    if block_groups is None: block_groups = {}
    lengths = group_lengths(permutations, block_groups)
    keep = blocks_to_keep(permutations, block_groups, lengths, thresholds.min_block_len, thresholds.min_flank_len)
    keep_arr = np.fromiter(keep, dtype=np.int64, count=len(keep))
    out = []
    for perm in permutations:
        mask = np.isin(perm.blocks.block_ids, keep_arr)
        if mask.any(): out.append(perm.with_blocks(perm.blocks[mask]))
    return PermutationSet(out)


def group_lengths(permutations: PermutationSet, block_groups: Mapping[int, int]) -> dict[int, dict[int, int]]:
    """
    Sums block lengths per sequence and group.

    Returns:
        A mapping of ``seq_id`` -> ``group_id`` -> total length of that group's blocks on the sequence.

    Raises:
        BlockError: If any block has a non-positive id.
    """
    _check_groups(block_groups)
    lengths = defaultdict(lambda: defaultdict(int))
    for perm in permutations:
        _check_ids(perm.seq_id, perm.blocks.block_ids)
        for block_id, length in zip(perm.blocks.block_ids.tolist(), perm.blocks.lengths.tolist()):
            if (group_id := block_groups.get(block_id)) is not None: lengths[perm.seq_id][group_id] += length
    return {seq_id: dict(groups) for seq_id, groups in lengths.items()}


def blocks_to_keep(permutations: PermutationSet, block_groups: Mapping[int, int],
                   lengths: dict[int, dict[int, int]], min_block_len: int, min_flank_len: int) -> set[int]:
    """
    Decides which block ids survive filtering.

    Args:
        permutations: The decomposition being filtered.
        block_groups: Mapping of block id to group id.
        lengths: Per-sequence group totals from :func:`group_lengths`.
        min_block_len: Minimum block (or per-sequence group) length.
        min_flank_len: Minimum length of a flanking block.

    Returns:
        The set of block ids to keep.
    """
    keep = set()
    for perm in permutations:
        _check_ids(perm.seq_id, perm.blocks.block_ids)
        seq_lengths = lengths.get(perm.seq_id, {})
        for block_id, length in zip(perm.blocks.block_ids.tolist(), perm.blocks.lengths.tolist()):
            if length >= min_block_len:
                keep.add(block_id)
            elif (group_id := block_groups.get(block_id)) is not None:
                if seq_lengths.get(group_id, 0) >= min_block_len and length >= min_flank_len: keep.add(block_id)
    return keep


def _check_ids(seq_id: int, block_ids: np.ndarray):
    if len(block_ids) and (bad := np.flatnonzero(block_ids <= 0)).size:
        raise BlockError(f"Sequence {seq_id}: block {bad[0]} has invalid id {block_ids[bad[0]]}")


def _check_groups(block_groups: Mapping[int, int]):
    if invalid := [k for k in block_groups if k <= 0]:
        warn(f"Block groups reference {len(invalid)} invalid block id(s), e.g. {invalid[0]}; they will never match",
             FilterWarning)
