"""
Reconciliation and filtering of synteny block decompositions.

Sequences are decomposed into strand-oriented, labelled blocks; blocks sharing an id across sequences are homologous
copies of the same synteny block. This package merges decompositions computed at different scales and filters them
by size while keeping short flanking blocks of substantial groups.
"""


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class SynblocksWarning(Warning): pass
class MergeWarning(SynblocksWarning): pass
class FilterWarning(SynblocksWarning): pass


from synblocks.utils.resources import RESOURCES, jit
from synblocks.core.block import Block, BlockError, Strand
from synblocks.containers.permutation import BlockBatch, Permutation, PermutationSet, PermutationError
from synblocks.core.index import BlockIndex, BlockRef, group_by_block_id, index_by_seq_id
from synblocks.engines.merge import merge_permutations, merge_permutations_with_counter
from synblocks.engines.filter import SizeThresholds, filter_by_size
from synblocks.engines.renumber import renumerate
from synblocks.engines.stats import coverage, multiplicity_histogram

__all__ = [
    'SynblocksWarning', 'MergeWarning', 'FilterWarning', 'RESOURCES', 'jit',
    'Block', 'BlockError', 'Strand', 'BlockBatch', 'Permutation', 'PermutationSet', 'PermutationError',
    'BlockIndex', 'BlockRef', 'group_by_block_id', 'index_by_seq_id',
    'merge_permutations', 'merge_permutations_with_counter', 'SizeThresholds', 'filter_by_size',
    'renumerate', 'coverage', 'multiplicity_histogram'
]
