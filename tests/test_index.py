import pytest

from synblocks import Block, BlockError, BlockRef, PermutationSet, group_by_block_id, index_by_seq_id

from conftest import perm


@pytest.fixture
def perms():
    return PermutationSet([
        perm(10, (2, 0, 50), (1, 60, 90, '-'), (2, 100, 120)),
        perm(20, (1, 5, 40)),
    ])


class TestGroupByBlockId:
    def test_ascending_ids(self, perms):
        assert list(group_by_block_id(perms)) == [1, 2]

    def test_occurrence_order(self, perms):
        index = group_by_block_id(perms)
        assert index[2] == (BlockRef(10, 0, 0), BlockRef(10, 0, 2))
        assert index[1] == (BlockRef(10, 0, 1), BlockRef(20, 1, 0))

    def test_resolves_through_source(self, perms):
        index = group_by_block_id(perms)
        assert list(index.occurrences(1)) == [(10, Block(60, 90, '-', 1)), (20, Block(5, 40, '+', 1))]
        assert index.source is perms

    def test_every_block_indexed_once(self, perms):
        index = group_by_block_id(perms)
        assert sum(len(refs) for refs in index.values()) == perms.n_blocks

    def test_multiplicity_counts_sequences(self, perms):
        index = group_by_block_id(perms)
        assert index.multiplicity(1) == 2
        assert index.multiplicity(2) == 1

    def test_empty(self):
        assert len(group_by_block_id(PermutationSet())) == 0
        assert len(group_by_block_id(PermutationSet([perm(0)]))) == 0

    @pytest.mark.parametrize('bad_id', [0, -3])
    def test_invalid_id_rejected(self, bad_id):
        with pytest.raises(BlockError, match="invalid id"):
            group_by_block_id(PermutationSet([perm(0, (1, 0, 10), (bad_id, 20, 30))]))


class TestIndexBySeqId:
    def test_lookup(self, perms):
        lookup = index_by_seq_id(perms)
        assert list(lookup) == [10, 20]
        assert lookup[20].seq_name == 'seq20'
        assert lookup[10] is perms[0]
