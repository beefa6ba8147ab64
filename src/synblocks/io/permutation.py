"""Readers and writers for block-list, coordinate table and statistics files."""
from collections import defaultdict

from synblocks.core.block import Block, BlockError
from synblocks.containers.permutation import Permutation, PermutationSet
from synblocks.core.index import group_by_block_id
from synblocks.engines.stats import coverage, multiplicity_histogram
from synblocks.io import BaseReader, BaseWriter, ParserError


# Constants ------------------------------------------------------------------------------------------------------------
SEPARATOR = b'-' * 80
_SEQ_HEADER = b'Seq_id\tSize\tDescription'
_BLOCK_HEADER = b'Seq_id\tStrand\tStart\tEnd\tLength'


# Classes --------------------------------------------------------------------------------------------------------------
class PermutationWriter(BaseWriter):
    """
    Writer for the block-list format: one ``>name`` header per sequence followed by its signed block ids
    and a terminating ``$``.

    Examples:
        >>> with PermutationWriter("blocks.txt") as w:
        ...     w.write(perms)
    """
    def write_one(self, item: PermutationSet):
        for perm in item:
            tokens = b''.join(b'%s%d ' % (str(b.strand).encode('ascii'), b.block_id) for b in perm)
            self._handle.write(b'>%s\n%s$\n' % (perm.seq_name.encode(), tokens))


class CoordsWriter(BaseWriter):
    """
    Writer for the coordinate table: a sequence header section followed by one section per block id
    listing every occurrence.
    """
    def write_one(self, item: PermutationSet):
        _write_seq_header(self._handle, item)
        index = group_by_block_id(item)
        for block_id in index:
            self._handle.write(b'Block #%d\n%s\n' % (block_id, _BLOCK_HEADER))
            for seq_id, block in index.occurrences(block_id):
                self._handle.write(b'%d\t%s\t%d\t%d\t%d\n' % (seq_id, str(block.strand).encode('ascii'),
                                                              block.start, block.end, len(block)))
            self._handle.write(SEPARATOR + b'\n')


class StatsWriter(BaseWriter):
    """
    Writer for the statistics report: the sequence header section, the block multiplicity histogram and the
    percentage of each sequence covered by blocks.
    """
    def write_one(self, item: PermutationSet):
        _write_seq_header(self._handle, item)
        for k, n in multiplicity_histogram(item).items(): self._handle.write(b'%d\t%d\n' % (k, n))
        self._handle.write(SEPARATOR + b'\n')
        for name, percent in coverage(item).items():
            self._handle.write(b'%s\t%s\n' % (name.encode(), format(percent, 'g').encode('ascii')))


class CoordsReader(BaseReader):
    """
    Reader for the coordinate table written by :class:`CoordsWriter`.

    Examples:
        >>> with CoordsReader("coords.txt") as r:
        ...     perms = r.read()
    """
    def read(self) -> PermutationSet:
        """
        Parses the whole file.

        Returns:
            A ``PermutationSet`` in header order, blocks sorted by start.

        Raises:
            ParserError: If the file is malformed.
        """
        lines = self.lines()
        sequences = {}
        for n, line in lines:
            if not line or line == _SEQ_HEADER: continue
            if line == SEPARATOR: break
            parts = line.split(b'\t', 2)
            if len(parts) != 3: raise ParserError(f"Line {n}: expected 3 columns in sequence header, got {len(parts)}")
            seq_id, size, name = _to_int(parts[0], n), _to_int(parts[1], n), parts[2].decode()
            if seq_id in sequences: raise ParserError(f"Line {n}: duplicate sequence id {seq_id}")
            sequences[seq_id] = (name, size)

        blocks = defaultdict(list)
        block_id = None
        for n, line in lines:
            if not line or line == _BLOCK_HEADER: continue
            if line == SEPARATOR:
                block_id = None
            elif line.startswith(b'Block #'):
                block_id = _to_int(line[7:], n)
                if block_id <= 0: raise ParserError(f"Line {n}: invalid block id {block_id}")
            elif block_id is None:
                raise ParserError(f"Line {n}: block row outside of a block section")
            else:
                parts = line.split(b'\t')
                if len(parts) < 4: raise ParserError(f"Line {n}: expected at least 4 columns, got {len(parts)}")
                seq_id = _to_int(parts[0], n)
                if seq_id not in sequences: raise ParserError(f"Line {n}: unknown sequence id {seq_id}")
                try: blocks[seq_id].append(Block(_to_int(parts[2], n), _to_int(parts[3], n), parts[1], block_id))
                except BlockError as e: raise ParserError(f"Line {n}: {e}") from e

        return PermutationSet(
            Permutation(seq_id, name, size, sorted(blocks[seq_id], key=lambda b: b.start))
            for seq_id, (name, size) in sequences.items()
        )


# Functions ------------------------------------------------------------------------------------------------------------
def _write_seq_header(handle, permutations: PermutationSet):
    handle.write(_SEQ_HEADER + b'\n')
    for perm in permutations:
        handle.write(b'%d\t%d\t%s\n' % (perm.seq_id, perm.nuc_length, perm.seq_name.encode()))
    handle.write(SEPARATOR + b'\n')


def _to_int(value: bytes, line_number: int) -> int:
    try: return int(value)
    except ValueError: raise ParserError(f"Line {line_number}: expected an integer, got {value!r}")
