"""Standardized scope analysis result structure."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..scopes.models import ScopeTable


@dataclass
class ScopeAnalysisResult:
    """Result of scope analysis for a single file."""
    file_path: str
    language: str

    # None when the file type produces no scope data or scopes are disabled
    table: Optional[ScopeTable] = None

    # Per-record problems that were skipped
    warnings: List[str] = field(default_factory=list)

    # Error information if the tagging tool failed
    error: Optional[str] = None

    @property
    def has_scopes(self) -> bool:
        return self.table is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for tool responses."""
        result = {
            "file_path": self.file_path,
            "language": self.language,
            "scope_count": self.table.size() if self.table is not None else 0,
        }
        if self.warnings:
            result["warnings"] = self.warnings
        if self.error:
            result["error"] = self.error
        return result
