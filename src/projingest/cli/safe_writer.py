"""Output writer for the assembled document.

The document goes to stdout or to a file named with -o. Writes stop as soon as
SIGPIPE or SIGINT has been seen, and failures surface as WriteFailed.
"""

import errno
import os
import types
from pathlib import Path
from typing import Optional, Type, Union

from projingest.cli.signal_handler import signal_handler
from projingest.exceptions import WriteFailed


class SafeWriter:
    """Writes the document to an open descriptor or to a file it opens itself.

    Attributes:
        file: Output path, or an already open descriptor such as stdout.
        fd: Descriptor the document bytes go to.

    Raises:
        WriteFailed: If the output file cannot be opened or written.
    """

    def __init__(self, file: Union[int, Path]):
        self.file = file
        self._closed = False

        if isinstance(file, int):
            self.fd = file
            self._file_obj = None
        elif isinstance(file, (str, os.PathLike)):
            path = Path(file)
            try:
                self._file_obj = path.open("w", encoding="utf-8")
            except OSError as e:
                raise WriteFailed(str(path), e.strerror or str(e)) from e
            self.fd = self._file_obj.fileno()
        else:
            raise TypeError(f"Expected int, str, or PathLike, got {type(file).__name__}")

    @property
    def name(self) -> str:
        return "<stdout>" if isinstance(self.file, int) else str(self.file)

    def write(self, data: str) -> None:
        """Encode data as UTF-8 and write all of it.

        Args:
            data: Text to write.

        Raises:
            BrokenPipeError: If the reader went away or a signal was received.
            WriteFailed: On any other OS error.
            ValueError: If the writer is closed.
        """
        if self._closed:
            raise ValueError("Cannot write to closed SafeWriter")

        if signal_handler.interrupted:
            raise BrokenPipeError()

        view = memoryview(data.encode("utf-8"))
        try:
            # os.write may write less than asked for large documents
            while view:
                written = os.write(self.fd, view)
                view = view[written:]
        except OSError as e:
            if e.errno == errno.EPIPE:
                raise BrokenPipeError()
            raise WriteFailed(self.name, e.strerror or str(e)) from e

    def close(self) -> None:
        """Close the output file if this writer opened it. Descriptors passed in stay open.

        The writer counts as closed afterwards even if closing failed.
        """
        if self._closed:
            return

        try:
            if self._file_obj is not None:
                self._file_obj.close()
        except OSError as e:
            if e.errno != errno.EPIPE:
                raise WriteFailed(self.name, e.strerror or str(e)) from e
        finally:
            self._closed = True

    def __enter__(self) -> "SafeWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[types.TracebackType],
    ) -> None:
        """Close resources. A close error never masks an exception from the with block."""
        try:
            self.close()
        except (OSError, WriteFailed):
            if exc_type is None:
                raise
