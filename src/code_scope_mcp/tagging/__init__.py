"""Tagging tools that feed the scope builder."""

from .base import TaggingTool, TagStreamResult
from .ctags import CtagsTool
from .parser import parse_json_tag, parse_tag_line

__all__ = [
    'TaggingTool',
    'TagStreamResult',
    'CtagsTool',
    'parse_json_tag',
    'parse_tag_line',
]
