"""
Tagging tool interface.

A tagging tool is an external program that scans source text and reports
symbol definitions with their lines. It is modelled as a pluggable capability
with an explicit lifecycle: start (discover and health-check the binary),
tag_file (invoke with a timeout), close (terminate).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from ..scopes.models import TagRecord


@dataclass
class TagStreamResult:
    """Tag records for one file plus the problems met while reading them."""
    file_path: str
    records: List[TagRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class TaggingTool(ABC):
    """
    Abstract base class for a tagging tool.

    Implementations raise TaggingToolUnavailable for every failure of the
    external program so callers can degrade a single file to "no scope data".
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of the tagging tool."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the tool's binary can be found."""
        pass

    @abstractmethod
    def start(self) -> None:
        """
        Validate the tool before first use.

        Raises:
            TaggingToolUnavailable: If the binary is missing or not supported
        """
        pass

    @abstractmethod
    def tag_file(self, file_path: str, language: Optional[str] = None) -> TagStreamResult:
        """
        Produce the tag stream of one file, ordered by line.

        Args:
            file_path: Path of the source file
            language: Language name to force, if the caller knows it

        Raises:
            TaggingToolUnavailable: If the tool hangs, crashes or was closed
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the tool; later calls to tag_file() fail."""
        pass

    def __enter__(self) -> "TaggingTool":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
