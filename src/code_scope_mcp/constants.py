"""
Shared constants for the Code Scope MCP server.
"""

# Directory and file names
SETTINGS_DIR = "code_scope"
CONFIG_FILE = "config.json"

# Name of the binary document field that carries serialized scopes
SCOPES_FIELD = "scopes"

# Binary layout version written by the codec
SCOPE_FORMAT_VERSION = 1

# Tagging tool defaults
DEFAULT_CTAGS_BINARY = "ctags"
DEFAULT_CTAGS_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 4
DEFAULT_SCOPE_SEPARATOR = "::"

# Symbol kinds that open a nested type/namespace
CONTAINER_KINDS = frozenset({
    'class', 'namespace', 'struct', 'union', 'interface',
    'enum', 'module', 'package', 'trait', 'implementation',
})

# Symbol kinds that own a scope range
CALLABLE_KINDS = frozenset({
    'function', 'method', 'constructor', 'destructor',
    'subroutine', 'procedure', 'operator', 'singletonmethod',
})

# Tagging tool spellings mapped to canonical kinds.
# Single letters follow the C/C++ parser and only matter for output without --fields=+K.
KIND_ALIASES = {
    'c': 'class',
    'n': 'namespace',
    's': 'struct',
    'u': 'union',
    'g': 'enum',
    'f': 'function',
    'i': 'interface',
    'func': 'function',
    'fn': 'function',
    'def': 'function',
    'impl': 'implementation',
    'ctor': 'constructor',
    'dtor': 'destructor',
    'sub': 'subroutine',
}

# Duplicate start lines keep the record with the higher priority
KIND_PRIORITY = {
    'callable': 2,
    'container': 1,
}

# Directories never handed to the tagging tool
EXCLUDE_DIRECTORIES = {
    # Version control
    '.git', '.svn', '.hg', '.bzr',

    # Package managers & dependencies
    'node_modules', '__pycache__', '.venv', 'venv',
    'vendor', 'bower_components',

    # Build outputs
    'dist', 'build', 'target', 'out', 'bin', 'obj',

    # IDE & editors
    '.idea', '.vscode', '.vs',

    # Testing & coverage
    '.pytest_cache', '.tox', 'coverage', 'htmlcov',
}
