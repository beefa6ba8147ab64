"""
Module for reading and writing block decompositions.
"""
from abc import ABC, abstractmethod
from typing import Union, BinaryIO, Generator
from pathlib import Path

from synblocks.io.open import Xopen


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class SynblocksIOError(IOError):
    """Base class for block file I/O errors."""

class ParserError(Exception):
    """Raised when a block file cannot be parsed."""


# Classes --------------------------------------------------------------------------------------------------------------
class BaseReader(ABC):
    """Abstract base class for block file readers."""
    __slots__ = ('_opener', '_handle')

    def __init__(self, file: Union[str, Path, BinaryIO]):
        """
        Initializes the reader.

        Args:
            file: Path, ``'-'`` for stdin, or an open binary handle.
        """
        self._opener = Xopen(file, mode='rb')
        self._handle = None

    def __enter__(self):
        try: self._handle = self._opener.__enter__()
        except OSError as e: raise SynblocksIOError(f"Cannot open {self._opener.file}: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb): self._opener.__exit__(exc_type, exc_val, exc_tb)

    def lines(self) -> Generator[tuple[int, bytes], None, None]:
        """Yields ``(line_number, line)`` pairs with trailing whitespace removed."""
        if self._handle is None: raise SynblocksIOError("Reader must be used as a context manager")
        for n, line in enumerate(self._handle, 1): yield n, line.rstrip()

    @abstractmethod
    def read(self): ...


class BaseWriter(ABC):
    """
    Abstract base class for block file writers.

    Examples:
        >>> with PermutationWriter("out.txt") as w:
        ...     w.write(perms)
    """
    __slots__ = ('_opener', '_handle')

    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'wb'):
        """
        Initializes the writer.

        Args:
            file: Path, ``'-'`` for stdout, or an open binary handle.
            mode: File opening mode.
        """
        self._opener = Xopen(file, mode=mode)
        self._handle = None

    def __enter__(self):
        try: self._handle = self._opener.__enter__()
        except OSError as e: raise SynblocksIOError(f"Cannot open {self._opener.file}: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb): self._opener.__exit__(exc_type, exc_val, exc_tb)

    def write(self, *items):
        """Writes each item in turn."""
        if self._handle is None: raise SynblocksIOError("Writer must be used as a context manager")
        for item in items: self.write_one(item)

    @abstractmethod
    def write_one(self, item): ...
