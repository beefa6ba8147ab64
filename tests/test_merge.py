import numpy as np
import pytest

from synblocks import (Block, BlockError, MergeWarning, PermutationSet, merge_permutations,
                       merge_permutations_with_counter)
from synblocks.engines.merge import find_conflicts

from conftest import perm


class TestMergeScenarios:
    def test_inserts_gap_contained_group(self, loose):
        fine = PermutationSet([perm(1, (5, 150, 200)), perm(2, (5, 150, 200, '-'))])
        merged = merge_permutations(loose, fine)
        assert list(merged[0]) == [Block(0, 100, '+', 1), Block(150, 200, '+', 2)]
        assert list(merged[1]) == [Block(0, 100, '+', 1), Block(150, 200, '-', 2)]

    def test_overlapping_group_rejected(self, loose):
        fine = PermutationSet([perm(1, (5, 50, 150)), perm(2, (5, 150, 200))])
        assert merge_permutations(loose, fine) == loose

    def test_fine_metadata_is_authoritative(self, loose):
        fine = PermutationSet([perm(1, name='chrA', length=5000), perm(2, name='chrB', length=6000)])
        merged = merge_permutations(loose, fine)
        assert [(p.seq_name, p.nuc_length) for p in merged] == [('chrA', 5000), ('chrB', 6000)]
        assert list(merged[0]) == list(loose[0])

    def test_inserted_blocks_sorted_between_loose(self):
        loose = PermutationSet([perm(1, (1, 0, 100), (2, 300, 400))])
        fine = PermutationSet([perm(1, (7, 500, 550), (8, 150, 250))])
        merged = merge_permutations(loose, fine)
        assert merged[0].signed_ids() == [1, 4, 2, 3]
        merged.validate()

    def test_adjacent_to_loose_end_accepted(self, loose):
        fine = PermutationSet([perm(1, (5, 100, 150)), perm(2, (5, 100, 150))])
        assert merge_permutations(loose, fine)[0].signed_ids() == [1, 2]

    def test_touching_next_loose_start_rejected(self):
        loose = PermutationSet([perm(1, (1, 0, 100), (2, 200, 300))])
        fine = PermutationSet([perm(1, (5, 150, 200))])
        assert merge_permutations(loose, fine) == loose

    def test_fine_block_spanning_loose_block_rejected(self, loose):
        fine = PermutationSet([perm(1, (5, 0, 500)), perm(2, (5, 150, 200))])
        assert merge_permutations(loose, fine) == loose


class TestMergeIds:
    def test_ids_minted_in_ascending_fine_order(self, loose):
        fine = PermutationSet([perm(1, (9, 150, 200), (3, 300, 350)), perm(2, (3, 200, 260))])
        merged = merge_permutations(loose, fine)
        assert merged[0].signed_ids() == [1, 3, 2]
        assert merged[1].signed_ids() == [1, 2]

    def test_homology_preserved(self, loose):
        fine = PermutationSet([perm(1, (5, 150, 200), (5, 300, 320)), perm(2, (5, 500, 600))])
        merged = merge_permutations(loose, fine)
        new = {int(i) for p in merged for i in p.blocks.block_ids} - {1}
        assert new == {2}
        assert sum(len(p) for p in merged) == 5

    def test_explicit_counter(self, loose):
        fine = PermutationSet([perm(1, (5, 150, 200)), perm(2, (6, 150, 200))])
        merged, next_id = merge_permutations_with_counter(loose, fine, next_id=10)
        assert merged[0].signed_ids() == [1, 10]
        assert merged[1].signed_ids() == [1, 11]
        assert next_id == 12

    def test_counter_unchanged_without_insertions(self, loose):
        merged, next_id = merge_permutations_with_counter(loose, PermutationSet())
        assert next_id == 2

    def test_counter_must_exceed_loose_ids(self, loose):
        with pytest.raises(ValueError, match="must exceed"):
            merge_permutations(loose, PermutationSet(), next_id=1)

    def test_invalid_fine_id(self, loose):
        with pytest.raises(BlockError):
            merge_permutations(loose, PermutationSet([perm(1, (0, 150, 200))]))


class TestMergeSequences:
    def test_fine_only_sequence_appended(self, loose):
        fine = PermutationSet([perm(1, (4, 300, 400)), perm(2), perm(3, (4, 10, 20), name='extra')])
        merged = merge_permutations(loose, fine)
        assert merged.seq_ids == [1, 2, 3]
        assert merged[2].seq_name == 'extra'
        assert merged[2].signed_ids() == [2]

    def test_fine_only_sequence_rejected_by_conflict_elsewhere(self, loose):
        fine = PermutationSet([perm(1, (4, 50, 150)), perm(2), perm(3, (4, 10, 20))])
        merged = merge_permutations(loose, fine)
        assert merged.seq_ids == [1, 2]

    def test_missing_fine_metadata_warns(self, loose):
        fine = PermutationSet([perm(1, (5, 150, 200))])
        with pytest.warns(MergeWarning, match="missing from the fine"):
            merged = merge_permutations(loose, fine)
        assert merged[1] == loose[1]

    def test_empty_inputs(self):
        assert len(merge_permutations(PermutationSet(), PermutationSet())) == 0

    def test_inputs_untouched(self, loose):
        fine = PermutationSet([perm(1, (5, 150, 200)), perm(2, (5, 150, 200))])
        before = [list(p) for p in fine]
        merge_permutations(loose, fine)
        assert [list(p) for p in fine] == before
        assert loose[0].signed_ids() == [1]


class TestMergeProperties:
    @pytest.mark.parametrize('seed', range(5))
    def test_random_merge_invariants(self, seed):
        rng = np.random.default_rng(seed)
        loose = PermutationSet.random(n_seqs=4, n_blocks=5, max_block_id=6, nuc_length=5000, rng=rng)
        fine = PermutationSet.random(n_seqs=4, n_blocks=30, max_block_id=40, nuc_length=5000, rng=rng)
        merged = merge_permutations(loose, fine).validate()
        loose_max = loose.max_block_id()
        for before, after in zip(loose, merged):
            ids = after.blocks.block_ids
            assert [b for b in after if b.block_id <= loose_max] == list(before)
            assert np.all(ids[ids > loose_max] > loose_max)

    @pytest.mark.parametrize('seed', range(5))
    def test_rejected_groups_absent_everywhere(self, seed):
        rng = np.random.default_rng(seed)
        loose = PermutationSet.random(n_seqs=3, n_blocks=5, max_block_id=6, nuc_length=3000, rng=rng)
        fine = PermutationSet.random(n_seqs=3, n_blocks=20, max_block_id=15, nuc_length=3000, rng=rng)
        conflicts = find_conflicts(loose, fine)
        rejected = {int(i) for p in fine for i in p.blocks.block_ids[conflicts[p.seq_id]]}
        n_inserted = sum(1 for p in fine for i in p.blocks.block_ids.tolist() if i not in rejected)
        merged = merge_permutations(loose, fine)
        assert merged.n_blocks == loose.n_blocks + n_inserted
