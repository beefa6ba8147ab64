"""Containers for per-sequence block decompositions (permutations) and collections of them."""
from typing import Union, Iterable, Iterator

import numpy as np

from synblocks.utils.resources import RESOURCES, jit
from synblocks.core.block import Block
from synblocks.containers import Batch


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class PermutationError(Exception):
    """Raised when a permutation or a collection of permutations is structurally invalid."""


# Classes --------------------------------------------------------------------------------------------------------------
class BlockBatch(Batch):
    """
    Columnar batch of blocks, powered by NumPy.

    Blocks are stored in the order given; no sorting is applied unless :meth:`sorted` is called.

    Args:
        starts: Array of start positions.
        ends: Array of end positions.
        strands: Array of strands (1 or -1).
        block_ids: Array of block ids.

    Examples:
        >>> batch = BlockBatch.build([Block(0, 100, '+', 1), Block(150, 200, '-', 2)])
        >>> batch.lengths
        array([100,  50])
    """
    __slots__ = ('_starts', '_ends', '_strands', '_block_ids')
    _DTYPE = np.int64

    def __init__(self, starts: np.ndarray = None, ends: np.ndarray = None, strands: np.ndarray = None,
                 block_ids: np.ndarray = None):
        if starts is None:
            self._starts = np.empty(0, dtype=self._DTYPE)
            self._ends = np.empty(0, dtype=self._DTYPE)
            self._strands = np.empty(0, dtype=self._DTYPE)
            self._block_ids = np.empty(0, dtype=self._DTYPE)
            return
        self._starts = np.ascontiguousarray(starts, dtype=self._DTYPE)
        self._ends = np.ascontiguousarray(ends, dtype=self._DTYPE)
        self._strands = np.ascontiguousarray(strands, dtype=self._DTYPE) if strands is not None else np.ones(
            len(self._starts), dtype=self._DTYPE)
        self._block_ids = np.ascontiguousarray(block_ids, dtype=self._DTYPE)
        n = len(self._starts)
        if not (len(self._ends) == len(self._strands) == len(self._block_ids) == n):
            raise PermutationError("Block arrays must all have the same length")

    @classmethod
    def empty(cls) -> 'BlockBatch':
        """Creates an empty BlockBatch."""
        return cls()

    @classmethod
    def build(cls, components: Iterable[Block]) -> 'BlockBatch':
        """
        Creates a BlockBatch from an iterable of Block objects.

        Args:
            components: Iterable of ``Block`` objects.

        Returns:
            A new ``BlockBatch`` preserving the input order.
        """
        data = [tuple(b) for b in components]
        if not data: return cls.empty()
        arr = np.array(data, dtype=cls._DTYPE)
        return cls(arr[:, 0], arr[:, 1], arr[:, 2], arr[:, 3])

    @classmethod
    def concat(cls, batches: Iterable['BlockBatch']) -> 'BlockBatch':
        """Concatenates multiple BlockBatches, preserving order.

        Args:
            batches: Iterable of ``BlockBatch`` objects.

        Returns:
            A new concatenated ``BlockBatch``.
        """
        batches = list(batches)
        if not batches: return cls.empty()
        return cls(np.concatenate([b._starts for b in batches]), np.concatenate([b._ends for b in batches]),
                   np.concatenate([b._strands for b in batches]), np.concatenate([b._block_ids for b in batches]))

    def __repr__(self): return f"<BlockBatch: {len(self)} blocks>"
    def __len__(self): return len(self._starts)

    def __getitem__(self, item):
        if isinstance(item, (int, np.integer)):
            return Block(self._starts[item], self._ends[item], self._strands[item], self._block_ids[item])
        if isinstance(item, (slice, np.ndarray, list)):
            return BlockBatch(self._starts[item], self._ends[item], self._strands[item], self._block_ids[item])
        raise TypeError(f"Invalid index type: {type(item)}")

    def __eq__(self, other):
        if not isinstance(other, BlockBatch): return False
        return (np.array_equal(self._starts, other._starts) and np.array_equal(self._ends, other._ends) and
                np.array_equal(self._strands, other._strands) and
                np.array_equal(self._block_ids, other._block_ids))

    @property
    def starts(self) -> np.ndarray: return self._starts
    @property
    def ends(self) -> np.ndarray: return self._ends
    @property
    def strands(self) -> np.ndarray: return self._strands
    @property
    def block_ids(self) -> np.ndarray: return self._block_ids

    @property
    def lengths(self) -> np.ndarray:
        """Returns the lengths of the blocks (int array)."""
        return self._ends - self._starts

    def copy(self) -> 'BlockBatch':
        """Returns a deep copy of the BlockBatch."""
        return BlockBatch(self._starts.copy(), self._ends.copy(), self._strands.copy(), self._block_ids.copy())

    def sorted(self) -> 'BlockBatch':
        """Returns a copy stably sorted by start position."""
        order = np.argsort(self._starts, kind='stable')
        return self[order]

    def with_ids(self, block_ids: Union[int, np.ndarray]) -> 'BlockBatch':
        """
        Returns a copy with block ids replaced.

        Args:
            block_ids: A single id applied to every block, or an array of per-block ids.

        Returns:
            A new ``BlockBatch``.
        """
        ids = np.broadcast_to(np.asarray(block_ids, dtype=self._DTYPE), self._block_ids.shape)
        return BlockBatch(self._starts.copy(), self._ends.copy(), self._strands.copy(), ids.copy())


class Permutation:
    """
    Ordered decomposition of one sequence into synteny blocks.

    Args:
        seq_id: Stable numeric handle for the sequence.
        seq_name: Display name of the sequence.
        nuc_length: Total sequence length.
        blocks: Blocks on the sequence, sorted by start and non-overlapping.

    Examples:
        >>> p = Permutation(0, 'chr1', 1000, [Block(0, 100, '+', 1), Block(200, 300, '-', 2)])
        >>> p.signed_ids()
        [1, -2]
    """
    __slots__ = ('seq_id', 'seq_name', 'nuc_length', '_blocks')

    def __init__(self, seq_id: int, seq_name: str, nuc_length: int,
                 blocks: Union[BlockBatch, Iterable[Block]] = None):
        self.seq_id = int(seq_id)
        self.seq_name = seq_name
        self.nuc_length = int(nuc_length)
        if blocks is None: blocks = BlockBatch.empty()
        elif not isinstance(blocks, BlockBatch): blocks = BlockBatch.build(blocks)
        self._blocks = blocks

    @property
    def blocks(self) -> BlockBatch: return self._blocks
    def __len__(self): return len(self._blocks)
    def __iter__(self) -> Iterator[Block]: return iter(self._blocks)
    def __getitem__(self, item) -> Block: return self._blocks[item]
    def __repr__(self): return f"Permutation({self.seq_id}, {self.seq_name!r}, {self.nuc_length}, blocks={len(self)})"

    def __eq__(self, other):
        if not isinstance(other, Permutation): return False
        return (self.seq_id == other.seq_id and self.seq_name == other.seq_name and
                self.nuc_length == other.nuc_length and self._blocks == other._blocks)

    def with_blocks(self, blocks: Union[BlockBatch, Iterable[Block]]) -> 'Permutation':
        """Returns a new permutation with the same sequence metadata and different blocks."""
        return Permutation(self.seq_id, self.seq_name, self.nuc_length, blocks)

    def signed_ids(self) -> list[int]:
        """Returns the block ids in order, negated for reverse-strand blocks."""
        return (self._blocks.block_ids * self._blocks.strands).tolist()

    def covered(self) -> int:
        """Returns the number of positions covered by blocks."""
        return int(self._blocks.lengths.sum())

    def validate(self) -> 'Permutation':
        """
        Checks the ordering and bounds invariants of the decomposition.

        Returns:
            The permutation itself, to allow chaining.

        Raises:
            PermutationError: If blocks are empty, out of bounds, unsorted or overlapping.
        """
        b = self._blocks
        if not len(b): return self
        code, i = _validate_kernel(b.starts, b.ends, self.nuc_length)
        if code == 1: raise PermutationError(f"{self.seq_name}: block {i} has non-positive length")
        if code == 2: raise PermutationError(f"{self.seq_name}: block {i} lies outside [0, {self.nuc_length})")
        if code == 3: raise PermutationError(f"{self.seq_name}: block {i} overlaps or precedes block {i - 1}")
        return self

    @classmethod
    def random(cls, seq_id: int = 0, n_blocks: int = 10, max_block_id: int = 10, nuc_length: int = 10_000,
               rng: np.random.Generator = None, seq_name: str = None) -> 'Permutation':
        """
        Generates a random valid permutation.

        Args:
            seq_id: Sequence id.
            n_blocks: Number of blocks to place.
            max_block_id: Block ids are drawn from ``[1, max_block_id]``.
            nuc_length: Sequence length; must be at least ``2 * n_blocks``.
            rng: Random number generator.
            seq_name: Display name (defaults to ``seq<seq_id>``).

        Returns:
            A sorted, non-overlapping Permutation.
        """
        if rng is None: rng = RESOURCES.rng
        if nuc_length < 2 * n_blocks: raise ValueError("nuc_length too small for the requested number of blocks")
        bounds = np.sort(rng.choice(nuc_length, size=2 * n_blocks, replace=False))
        blocks = BlockBatch(bounds[0::2], bounds[1::2], rng.choice([1, -1], size=n_blocks),
                            rng.integers(1, max_block_id + 1, size=n_blocks))
        return cls(seq_id, seq_name or f"seq{seq_id}", nuc_length, blocks)


class PermutationSet:
    """
    Ordered collection of permutations, one per sequence.

    Args:
        permutations: Permutations with unique sequence ids.

    Raises:
        PermutationError: If two permutations share a sequence id.

    Examples:
        >>> perms = PermutationSet([Permutation(0, 'a', 500), Permutation(1, 'b', 800)])
        >>> perms.seq_ids
        [0, 1]
    """
    __slots__ = ('_permutations',)

    def __init__(self, permutations: Iterable[Permutation] = ()):
        self._permutations = tuple(permutations)
        seen = set()
        for perm in self._permutations:
            if perm.seq_id in seen: raise PermutationError(f"Duplicate sequence id: {perm.seq_id}")
            seen.add(perm.seq_id)

    def __len__(self): return len(self._permutations)
    def __iter__(self) -> Iterator[Permutation]: return iter(self._permutations)
    def __getitem__(self, item) -> Permutation: return self._permutations[item]
    def __bool__(self): return bool(self._permutations)
    def __repr__(self): return f"<PermutationSet: {len(self)} sequences, {self.n_blocks} blocks>"

    def __eq__(self, other):
        if not isinstance(other, PermutationSet): return False
        return self._permutations == other._permutations

    @property
    def seq_ids(self) -> list[int]: return [p.seq_id for p in self._permutations]
    @property
    def n_blocks(self) -> int: return sum(len(p) for p in self._permutations)

    def block_ids(self) -> set[int]:
        """Returns the set of distinct block ids across all sequences."""
        return {int(i) for p in self._permutations for i in p.blocks.block_ids}

    def max_block_id(self) -> int:
        """Returns the largest block id present, or 0 if there are no blocks."""
        return max((int(p.blocks.block_ids.max()) for p in self._permutations if len(p)), default=0)

    def validate(self) -> 'PermutationSet':
        """Validates every permutation in the collection."""
        for perm in self._permutations: perm.validate()
        return self

    @classmethod
    def random(cls, n_seqs: int = 3, n_blocks: int = 10, max_block_id: int = 10, nuc_length: int = 10_000,
               rng: np.random.Generator = None) -> 'PermutationSet':
        """Generates a collection of ``n_seqs`` random permutations with ids ``0..n_seqs-1``."""
        if rng is None: rng = RESOURCES.rng
        return cls(Permutation.random(i, n_blocks, max_block_id, nuc_length, rng) for i in range(n_seqs))


# Kernels --------------------------------------------------------------------------------------------------------------
@jit(nopython=True, cache=True, nogil=True)
def _validate_kernel(starts, ends, length):
    """Returns (code, index) of the first invariant violation; code 0 means valid."""
    n = len(starts)
    for i in range(n):
        if ends[i] <= starts[i]: return 1, i
        if starts[i] < 0 or ends[i] > length: return 2, i
        if i > 0 and starts[i] < ends[i - 1]: return 3, i
    return 0, -1
