"""
Scope Service - business logic behind the scope tools.

Indexes files of the current project into scope tables and answers
"which function encloses this line" queries from the published documents,
falling back to the persistent store when one is configured.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from ..scopes.models import ScopeTable
from ..utils import ValidationHelper
from .base_service import BaseService

logger = logging.getLogger(__name__)


class ScopeService(BaseService):
    """Service for building and querying per-file scope tables."""

    def set_project_path(self, path: str) -> Dict[str, Any]:
        """
        Set the project root used to resolve relative file paths.

        Raises:
            ValueError: If the directory does not exist
        """
        error = ValidationHelper.validate_directory_path(path)
        if error:
            raise ValueError(error)
        abs_path = os.path.abspath(path)
        self.helper.update_base_path(abs_path)
        logger.info(f"Project path set to {abs_path}")
        return {"project_path": abs_path}

    def _absolute(self, file_path: str) -> str:
        self._require_project_setup()
        self._require_valid_file_path(file_path)
        return os.path.join(self.base_path, os.path.normpath(file_path))

    def index_file(self, file_path: str) -> Dict[str, Any]:
        """
        Build and publish the scope table of one project file.

        Args:
            file_path: Path relative to the project root

        Returns:
            Analysis summary of the file
        """
        full_path = self._absolute(file_path)
        if not os.path.isfile(full_path):
            raise ValueError(f"File not found: {file_path}")

        stats = self.state.pipeline.index_files([full_path])
        table = self._load_table(full_path)
        return {
            "file_path": file_path,
            "scope_count": table.size() if table is not None else 0,
            "has_scopes": table is not None,
            "stats": stats.to_dict(),
        }

    def index_directory(self, directory: Optional[str] = None) -> Dict[str, Any]:
        """
        Index every supported file below a project directory.

        Args:
            directory: Directory relative to the project root; the root when omitted
        """
        self._require_project_setup()
        target = self.base_path
        if directory:
            self._require_valid_file_path(directory)
            target = os.path.join(self.base_path, os.path.normpath(directory))
        return self.state.pipeline.index_directory(target).to_dict()

    def _load_table(self, full_path: str) -> Optional[ScopeTable]:
        document = self.state.pipeline.documents.get(full_path)
        if document is not None:
            return self.state.pipeline.field_adapter.read(document)
        if self.state.store is not None:
            return self.state.store.load(full_path)
        return None

    def get_scope_at_line(self, file_path: str, line: int) -> Dict[str, Any]:
        """
        Resolve the scope enclosing a line of an indexed file.

        Args:
            file_path: Path relative to the project root
            line: Line number as reported by the tagging tool

        Returns:
            The enclosing scope; the global scope when nothing encloses the line
        """
        error = ValidationHelper.validate_line_number(line)
        if error:
            raise ValueError(error)
        full_path = self._absolute(file_path)

        table = self._load_table(full_path)
        if table is None:
            raise ValueError(f"No scope data for {file_path}; index the file first")

        entry = table.lookup(line)
        return {
            "file_path": file_path,
            "line": line,
            "name": entry.name,
            "scope": entry.enclosing_scope,
            "start_line": entry.start_line,
            "end_line": entry.end_line,
            "is_global": entry.is_global,
        }

    def list_file_scopes(self, file_path: str) -> Dict[str, Any]:
        """Return every named scope of an indexed file."""
        full_path = self._absolute(file_path)
        table = self._load_table(full_path)
        if table is None:
            raise ValueError(f"No scope data for {file_path}; index the file first")
        data = table.to_dict()
        data["file_path"] = file_path
        return data

    def list_indexed_files(self) -> List[str]:
        """Files with published scope data, relative to the project root when possible."""
        paths = set(self.state.pipeline.documents)
        if self.state.store is not None:
            paths.update(self.state.store.list_files())
        base = self.base_path
        return sorted(
            os.path.relpath(p, base) if base and os.path.isabs(p) else p for p in paths
        )

    def get_settings_info(self) -> Dict[str, Any]:
        """Describe the active configuration and tagging tool."""
        tool = self.state.tagging_tool
        return {
            "project_path": self.base_path,
            "settings": self.state.settings.to_dict(),
            "tagging_tool": tool.name if tool is not None else None,
            "tagging_tool_available": bool(tool is not None and tool.is_available()),
            "indexed_files": len(self.state.pipeline.documents),
        }
