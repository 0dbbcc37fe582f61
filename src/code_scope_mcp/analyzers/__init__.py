"""Language registry and per-file scope analysis."""

from .analysis_result import ScopeAnalysisResult
from .analyzer_factory import DEFAULT_CAPABILITIES, AnalyzerFactory, LanguageCapabilities
from .scope_analyzer import ScopeAnalyzer

__all__ = [
    'AnalyzerFactory',
    'LanguageCapabilities',
    'DEFAULT_CAPABILITIES',
    'ScopeAnalysisResult',
    'ScopeAnalyzer',
]
