"""Strand-oriented synteny block representation."""
from typing import Any, ClassVar
from enum import IntEnum


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class BlockError(Exception):
    """Raised when a block violates an identity or coordinate invariant."""


# Classes --------------------------------------------------------------------------------------------------------------
class Strand(IntEnum):
    """
    Orientation of a block on its sequence.
    """
    FORWARD = 1
    REVERSE = -1
    _STR_CACHE: ClassVar[dict]
    _FROM_STR_CACHE: ClassVar[dict]

    def __str__(self): return self._STR_CACHE[self]

    @classmethod
    def from_symbol(cls, s: Any) -> 'Strand':
        """
        Coerces a symbol into a Strand.

        Args:
            s: A Strand, a signed integer, or one of ``'+'``/``'-'`` (str or bytes).

        Returns:
            The matching Strand.

        Raises:
            BlockError: If the symbol does not name an orientation.
        """
        if isinstance(s, cls): return s
        if isinstance(s, bytes): s = s.decode('ascii', errors='replace')
        if isinstance(s, str):
            if (strand := cls._FROM_STR_CACHE.get(s)) is not None: return strand
            raise BlockError(f"Unknown strand symbol: {s!r}")
        try: s = int(s)
        except (TypeError, ValueError): raise BlockError(f"Cannot coerce {type(s)} to Strand")
        if s > 0: return cls.FORWARD
        if s < 0: return cls.REVERSE
        raise BlockError("Blocks must be stranded, got 0")

    @classmethod
    def _init_caches(cls):
        cls._STR_CACHE = {cls.FORWARD: '+', cls.REVERSE: '-'}
        cls._FROM_STR_CACHE = {'+': cls.FORWARD, '-': cls.REVERSE}


class Block:
    """
    Immutable segment of one sequence belonging to a synteny block group.

    Coordinates are half-open, so ``len(block) == block.end - block.start``.

    Attributes:
        start: The start position (0-based, inclusive).
        end: The end position (0-based, exclusive).
        strand: Orientation of the segment.
        block_id: Positive id shared by all homologous copies of the block.

    Examples:
        >>> b = Block(100, 250, '+', 7)
        >>> len(b), str(b.strand)
        (150, '+')
    """
    __slots__ = ('_start', '_end', '_strand', '_block_id')

    def __init__(self, start: int, end: int, strand: Any, block_id: int):
        self._start: int = int(start)
        self._end: int = int(end)
        self._strand: Strand = Strand.from_symbol(strand)
        self._block_id: int = int(block_id)

    @property
    def start(self) -> int: return self._start
    @property
    def end(self) -> int: return self._end
    @property
    def strand(self) -> Strand: return self._strand
    @property
    def block_id(self) -> int: return self._block_id
    @property
    def signed_id(self) -> int:
        """The block id carrying the strand as its sign."""
        return self._block_id * self._strand

    def __len__(self): return max(0, self._end - self._start)
    def __iter__(self): return iter((self._start, self._end, self._strand, self._block_id))
    def __hash__(self): return hash((self._start, self._end, self._strand, self._block_id))
    def __repr__(self): return f"Block({str(self._strand)}{self._block_id}, {self._start}:{self._end})"

    def __eq__(self, other):
        if not isinstance(other, Block): return False
        return (self._start == other._start and self._end == other._end and
                self._strand == other._strand and self._block_id == other._block_id)

    def with_id(self, block_id: int) -> 'Block':
        """Returns a copy of this block relabelled with a new id."""
        return Block(self._start, self._end, self._strand, block_id)


# Cache initialisations ------------------------------------------------------------------------------------------------
Strand._init_caches()
