import os
from abc import ABC, abstractmethod

from tablexport.core.constants import OUTPUT_ENCODING


class FileSink(ABC):
    """Append-only output target used by the export engine."""

    @abstractmethod
    def truncate_and_open(self, target: str) -> None:
        """Create `target`, discarding any content already there."""
        pass

    @abstractmethod
    def append_line(self, target: str, content: str) -> None:
        """Append `content` plus a line terminator; visible to later reads."""
        pass

    @abstractmethod
    def size(self, target: str) -> int:
        """Current size of `target` in bytes."""
        pass

    @abstractmethod
    def delete(self, target: str) -> None:
        """Remove `target`."""
        pass


class LocalFileSink(FileSink):
    """
    Local filesystem sink. Every append opens, writes and closes the file so
    the size reported by os.stat always includes all prior appends.
    """

    def __init__(self, encoding: str = OUTPUT_ENCODING):
        self.encoding = encoding

    def truncate_and_open(self, target: str) -> None:
        parent = os.path.dirname(target)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(target, "w", encoding=self.encoding):
            pass

    def append_line(self, target: str, content: str) -> None:
        with open(target, "a", encoding=self.encoding, newline="") as f:
            f.write(content + "\n")

    def size(self, target: str) -> int:
        return os.path.getsize(target)

    def delete(self, target: str) -> None:
        os.remove(target)
