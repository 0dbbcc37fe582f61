"""
Per-file scope analysis.

Selects the language capabilities of a file, runs the tagging tool on it and
builds the file's ScopeTable. A tagging tool failure never fails the file: the
result degrades to a table holding only the global entry.
"""

import logging
import os
from typing import Optional

from ..indexing.document import Document
from ..indexing.field_adapter import ScopeFieldAdapter
from ..scopes.builder import ScopeBuilder
from ..scopes.errors import TaggingToolUnavailable
from ..scopes.models import ScopeTable
from ..tagging.base import TaggingTool
from .analysis_result import ScopeAnalysisResult
from .analyzer_factory import AnalyzerFactory

logger = logging.getLogger(__name__)


class ScopeAnalyzer:
    """Builds scope tables for source files."""

    def __init__(
        self,
        tagging_tool: Optional[TaggingTool],
        scopes_enabled: bool = True,
        emit_containers: bool = False,
        field_adapter: Optional[ScopeFieldAdapter] = None,
    ):
        """
        Args:
            tagging_tool: Tool producing tag streams; None disables tagging
            scopes_enabled: Whether scope data is produced at all
            emit_containers: Emit entries for class/namespace header lines
            field_adapter: Adapter used by analyze_into()
        """
        self.tagging_tool = tagging_tool
        self.scopes_enabled = scopes_enabled
        self.emit_containers = emit_containers
        self.field_adapter = field_adapter or ScopeFieldAdapter()

    def analyze(self, file_path: str) -> ScopeAnalysisResult:
        """
        Analyze one file.

        Args:
            file_path: Path of the source file

        Returns:
            ScopeAnalysisResult; ``table`` is None when the file gets no scope data
        """
        extension = os.path.splitext(file_path)[1]
        capabilities = AnalyzerFactory.get_capabilities(extension)
        result = ScopeAnalysisResult(file_path=file_path, language=capabilities.language)

        if not self.scopes_enabled or not capabilities.produces_scopes:
            return result

        if self.tagging_tool is None:
            result.error = "No tagging tool configured"
            result.table = ScopeTable()
            return result

        try:
            stream = self.tagging_tool.tag_file(file_path, capabilities.ctags_language)
        except TaggingToolUnavailable as e:
            logger.warning(f"No scope data for {file_path}: {e}")
            result.error = str(e)
            result.table = ScopeTable()
            return result

        builder = ScopeBuilder(
            separator=capabilities.scope_separator,
            emit_containers=self.emit_containers,
            extra_callable_kinds=capabilities.callable_kinds,
        )
        builder.add_all(stream.records)
        result.table = builder.build()
        result.warnings = stream.warnings + builder.warnings
        logger.debug(f"Built {result.table.size()} scopes for {file_path}")
        return result

    def analyze_into(self, document: Document, file_path: Optional[str] = None) -> ScopeAnalysisResult:
        """
        Analyze a file and store its scopes on the document.

        Args:
            document: Index document of the file
            file_path: Path to read, defaults to document.path

        Returns:
            The analysis result; the document is left untouched when there is no table
        """
        result = self.analyze(file_path or document.path)
        if result.table is not None:
            self.field_adapter.write(document, result.table)
        return result
