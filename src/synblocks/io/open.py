"""Opening of block files from paths, stdio or handles, with transparent gzip/bz2/xz compression."""
from io import IOBase
from typing import Union, BinaryIO, Optional
from pathlib import Path
from sys import stdout, stdin
from importlib import import_module


# Classes --------------------------------------------------------------------------------------------------------------
class Xopen:
    """
    Handles the Physical Layer: Compression and File System.

    Paths ending in ``.gz``, ``.bz2`` or ``.xz`` are compressed on write; compressed input is detected
    from its magic bytes on read. ``'-'`` maps to stdin/stdout.

    Examples:
        >>> with Xopen("coords.txt.gz", "rb") as f:
        ...     content = f.read()
    """
    _MAGIC = {
        b'\x1f\x8b': 'gzip',
        b'\x42\x5a': 'bz2',
        b'\xfd7zXZ\x00': 'lzma',
    }
    _EXT_TO_PKG = {'gz': 'gzip', 'bz2': 'bz2', 'xz': 'lzma'}
    _MIN_N_BYTES = max(len(i) for i in _MAGIC.keys())
    _OPEN_FUNCS = {}

    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'rb'):
        """
        Initializes the Xopen context manager.

        Args:
            file: File path (str or Path) or an existing file object.
            mode: File opening mode (e.g., 'rb', 'wb').
        """
        self.file = file
        self.mode = mode
        self._handle: Optional[BinaryIO] = None
        self._raw: Optional[BinaryIO] = None
        self._close_on_exit = False

    def __enter__(self) -> BinaryIO:
        self._handle = self._open()
        return self._handle

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._close_on_exit and self._handle: self._handle.close()
        if self._raw is not None and self._raw is not self._handle: self._raw.close()

    def _get_opener(self, pkg_name: str):
        if pkg_name not in self._OPEN_FUNCS:
            try:
                self._OPEN_FUNCS[pkg_name] = import_module(pkg_name).open
            except ImportError:
                raise ModuleNotFoundError(f"Compression module '{pkg_name}' not installed.")
        return self._OPEN_FUNCS[pkg_name]

    def _open(self) -> BinaryIO:
        writing = 'w' in self.mode or 'a' in self.mode
        if isinstance(self.file, IOBase): raw_stream = self.file
        elif str(self.file) in {'-', 'stdin'} and not writing: raw_stream = stdin.buffer
        elif str(self.file) in {'-', 'stdout'} and writing: raw_stream = stdout.buffer
        else:
            path = Path(self.file).expanduser()
            self._close_on_exit = True
            if writing:
                ext = path.suffix.lower().lstrip('.')
                if pkg := self._EXT_TO_PKG.get(ext): return self._get_opener(pkg)(path, mode=self.mode)
                return open(path, mode=self.mode)
            raw_stream = self._raw = open(path, mode='rb')

        if writing or not raw_stream.seekable(): return raw_stream

        start = raw_stream.read(self._MIN_N_BYTES)
        raw_stream.seek(0)
        for magic, pkg in self._MAGIC.items():
            if start.startswith(magic):
                self._close_on_exit = True
                return self._get_opener(pkg)(raw_stream, mode='rb')
        return raw_stream
