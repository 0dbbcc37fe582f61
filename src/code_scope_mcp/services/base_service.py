"""
Base service class providing common functionality for all services.

This module defines the base service pattern that domain services inherit from,
ensuring consistent behavior and shared functionality across the service layer.
"""

from abc import ABC
from typing import Optional

from mcp.server.fastmcp import Context

from ..utils import ContextHelper, ValidationHelper


class BaseService(ABC):
    """
    Base class for all MCP services.

    This class provides common functionality that all services need:
    - Context management through ContextHelper
    - Common validation patterns
    """

    def __init__(self, ctx: Context):
        """
        Initialize the base service.

        Args:
            ctx: The MCP Context object containing request and lifespan context
        """
        self.ctx = ctx
        self.helper = ContextHelper(ctx)

    def _validate_project_setup(self) -> Optional[str]:
        """
        Validate that the project is properly set up.

        Returns:
            Error message if project is not set up properly, None if valid
        """
        if not self.helper.base_path:
            return "Project path not set. Please use set_project_path to set a project directory first."
        return ValidationHelper.validate_directory_path(self.helper.base_path)

    def _require_project_setup(self) -> None:
        """
        Ensure project is set up, raising an exception if not.

        Raises:
            ValueError: If project is not properly set up
        """
        error = self._validate_project_setup()
        if error:
            raise ValueError(error)

    def _require_valid_file_path(self, file_path: str) -> None:
        """
        Ensure file path is valid, raising an exception if not.

        Raises:
            ValueError: If file path is invalid
        """
        error = ValidationHelper.validate_file_path(file_path, self.helper.base_path)
        if error:
            raise ValueError(error)

    @property
    def base_path(self) -> str:
        """Convenient access to the base project path."""
        return self.helper.base_path

    @property
    def state(self):
        """Convenient access to the lifespan state."""
        return self.helper.state
