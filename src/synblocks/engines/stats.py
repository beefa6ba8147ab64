"""Summary statistics over collections of permutations."""
from synblocks.containers.permutation import PermutationSet
from synblocks.core.index import BlockIndex, group_by_block_id


# Functions ------------------------------------------------------------------------------------------------------------
def multiplicity_histogram(permutations: PermutationSet, index: BlockIndex = None) -> dict[int, int]:
    """
    Counts how many block ids occur a given number of times.

    Args:
        permutations: The collection to summarise.
        index: A pre-built index over ``permutations`` (built if omitted).

    Returns:
        A mapping of occurrence count ``k`` to the number of block ids occurring exactly ``k`` times, ascending by ``k``.
    """
    if index is None: index = group_by_block_id(permutations)
    histogram: dict[int, int] = {}
    for refs in index.values(): histogram[len(refs)] = histogram.get(len(refs), 0) + 1
    return dict(sorted(histogram.items()))


def coverage(permutations: PermutationSet) -> dict[str, float]:
    """Returns the percentage of each sequence covered by blocks, keyed by sequence name."""
    return {perm.seq_name: 100 * perm.covered() / perm.nuc_length if perm.nuc_length else 0.0
            for perm in permutations}
