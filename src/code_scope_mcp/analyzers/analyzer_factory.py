"""Registry of per-language scope capabilities."""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ..constants import DEFAULT_SCOPE_SEPARATOR


@dataclass(frozen=True)
class LanguageCapabilities:
    """
    What the scope pipeline can do for one file type.

    Attributes:
        language: Display name of the language
        produces_scopes: Whether files of this type get scope data
        ctags_language: Name passed to ctags --language-force, if any
        scope_separator: Separator of qualified names in scope hints
        callable_kinds: Extra tag kinds that define callables in this language only
    """
    language: str
    produces_scopes: bool = True
    ctags_language: Optional[str] = None
    scope_separator: str = DEFAULT_SCOPE_SEPARATOR
    callable_kinds: FrozenSet[str] = frozenset()


DEFAULT_CAPABILITIES = LanguageCapabilities(language='unknown', produces_scopes=False)


class AnalyzerFactory:
    """Factory class mapping file extensions to language capabilities."""

    _capabilities: Dict[str, LanguageCapabilities] = {}

    @classmethod
    def register(cls, extensions: list[str], capabilities: LanguageCapabilities) -> None:
        """
        Register capabilities for specific file extensions.

        Args:
            extensions: List of file extensions (e.g., ['.cpp', '.cxx'])
            capabilities: The capability set shared by these extensions
        """
        for extension in extensions:
            cls._capabilities[extension.lower()] = capabilities

    @classmethod
    def get_capabilities(cls, extension: str) -> LanguageCapabilities:
        """
        Get the capabilities for the given file extension.

        Args:
            extension: The file extension (e.g., '.cxx')

        Returns:
            Registered capabilities, or DEFAULT_CAPABILITIES if not found
        """
        return cls._capabilities.get(extension.lower(), DEFAULT_CAPABILITIES)

    @classmethod
    def get_supported_extensions(cls) -> list[str]:
        """
        Get all extensions that produce scope data.

        Returns:
            List of registered extensions
        """
        return [ext for ext, caps in cls._capabilities.items() if caps.produces_scopes]

    @classmethod
    def is_extension_supported(cls, extension: str) -> bool:
        """
        Check if files with an extension produce scope data.

        Args:
            extension: The file extension to check

        Returns:
            True if scope data is produced for the extension
        """
        return cls.get_capabilities(extension).produces_scopes


# Initialize factory with built-in languages
def _initialize_factory():
    """Initialize the factory with built-in languages."""
    AnalyzerFactory.register(['.c', '.h'], LanguageCapabilities('c', ctags_language='C'))
    AnalyzerFactory.register(
        ['.cpp', '.cc', '.cxx', '.c++', '.hpp', '.hh', '.hxx', '.h++'],
        LanguageCapabilities('c++', ctags_language='C++'),
    )
    AnalyzerFactory.register(['.java'], LanguageCapabilities('java', ctags_language='Java', scope_separator='.'))
    # Universal Ctags reports Python methods as "member" ("m" in the short form)
    AnalyzerFactory.register(
        ['.py', '.pyw'],
        LanguageCapabilities(
            'python',
            ctags_language='Python',
            scope_separator='.',
            callable_kinds=frozenset({'member', 'm'}),
        ),
    )
    AnalyzerFactory.register(['.cs'], LanguageCapabilities('c#', ctags_language='C#', scope_separator='.'))
    AnalyzerFactory.register(['.go'], LanguageCapabilities('go', ctags_language='Go', scope_separator='.'))
    AnalyzerFactory.register(
        ['.js', '.jsx', '.mjs', '.cjs'],
        LanguageCapabilities('javascript', ctags_language='JavaScript', scope_separator='.'),
    )
    AnalyzerFactory.register(['.ts', '.tsx'], LanguageCapabilities('typescript', ctags_language='TypeScript', scope_separator='.'))
    AnalyzerFactory.register(['.rb'], LanguageCapabilities('ruby', ctags_language='Ruby', scope_separator='.'))
    AnalyzerFactory.register(['.php'], LanguageCapabilities('php', ctags_language='PHP', scope_separator='\\'))
    AnalyzerFactory.register(['.rs'], LanguageCapabilities('rust', ctags_language='Rust'))
    AnalyzerFactory.register(['.kt', '.kts'], LanguageCapabilities('kotlin', ctags_language='Kotlin', scope_separator='.'))
    AnalyzerFactory.register(['.scala'], LanguageCapabilities('scala', ctags_language='Scala', scope_separator='.'))
    AnalyzerFactory.register(['.swift'], LanguageCapabilities('swift', ctags_language='Swift', scope_separator='.'))

    # Indexed as plain text: no scope data
    AnalyzerFactory.register(['.md', '.txt', '.json', '.yml', '.yaml', '.xml'], LanguageCapabilities('text', produces_scopes=False))


# Initialize on import
_initialize_factory()
