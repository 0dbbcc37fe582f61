"""
Common validation logic for the MCP server.
"""

import os
from typing import Optional


class ValidationHelper:
    """Static helpers for validating tool arguments."""

    @staticmethod
    def validate_file_path(file_path: str, base_path: str) -> Optional[str]:
        """
        Validate a file path relative to the project root.

        Args:
            file_path: The file path to validate (should be relative)
            base_path: The base project directory path

        Returns:
            Error message if validation fails, None if valid
        """
        if not file_path:
            return "File path cannot be empty"

        if not base_path:
            return "Base path not set"

        # Handle absolute paths (especially Windows paths starting with drive letters)
        if os.path.isabs(file_path) or (len(file_path) > 1 and file_path[1] == ':'):
            return (f"Absolute file paths like '{file_path}' are not allowed. "
                    "Please use paths relative to the project root.")

        norm_path = os.path.normpath(file_path)
        if norm_path == ".." or norm_path.startswith(".." + os.sep) or norm_path.startswith("../"):
            return f"Invalid file path: {file_path} (directory traversal not allowed)"

        real_full_path = os.path.realpath(os.path.join(base_path, norm_path))
        real_base_path = os.path.realpath(base_path)
        if os.path.commonpath([real_full_path, real_base_path]) != real_base_path:
            return "Access denied. File path must be within project directory."

        return None

    @staticmethod
    def validate_directory_path(dir_path: str) -> Optional[str]:
        """
        Validate a directory path for project initialization.

        Returns:
            Error message if validation fails, None if valid
        """
        if not dir_path:
            return "Directory path cannot be empty"
        if not os.path.isdir(dir_path):
            return f"Directory does not exist: {dir_path}"
        return None

    @staticmethod
    def validate_line_number(line: int) -> Optional[str]:
        """Lines are reported by the tagging tool; -1 asks for the global scope."""
        if isinstance(line, bool) or not isinstance(line, int):
            return f"Line must be an integer, got {line!r}"
        if line < -1:
            return f"Line must be >= -1, got {line}"
        return None
