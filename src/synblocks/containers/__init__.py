"""
Abstract columnar containers. Block decompositions store their blocks in batches so that engines can work on
whole arrays of coordinates and ids at once.
"""
from abc import ABC, abstractmethod
from typing import Iterable


# Classes --------------------------------------------------------------------------------------------------------------
class Batch(ABC):
    """
    Columnar, sequence-like store of value objects (one NumPy array per field).

    Subclasses provide construction from components, concatenation, indexing and copying; iteration and
    truthiness are derived from ``len`` and integer indexing.
    """
    __slots__ = ()

    @classmethod
    @abstractmethod
    def empty(cls) -> 'Batch': ...
    @classmethod
    @abstractmethod
    def build(cls, components: Iterable[object]) -> 'Batch': ...
    @classmethod
    @abstractmethod
    def concat(cls, batches: Iterable['Batch']) -> 'Batch': ...
    @abstractmethod
    def __len__(self) -> int: ...
    @abstractmethod
    def __getitem__(self, item): ...
    @abstractmethod
    def copy(self) -> 'Batch': ...

    def __iter__(self):
        for i in range(len(self)): yield self[i]

    def __bool__(self): return len(self) > 0
