"""
Parsers for ctags output.

Two formats are understood:

- Universal Ctags JSON lines (``--output-format=json``), one object per tag
- the classic extended tags format, ``name<TAB>file<TAB>excmd;"<TAB>fields``

Each parser turns one output line into a TagRecord, returns None for lines that
carry no tag (pseudo tags, blank lines) and raises TagStreamMalformed for lines
it cannot make sense of.
"""

import json
from typing import Optional

from ..constants import CALLABLE_KINDS, CONTAINER_KINDS
from ..scopes.builder import normalize_kind
from ..scopes.errors import TagStreamMalformed
from ..scopes.models import TagRecord

# Field keys that name an enclosing symbol in the extended format
SCOPE_FIELD_KINDS = CONTAINER_KINDS | CALLABLE_KINDS


def _to_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_json_tag(line: str) -> Optional[TagRecord]:
    """
    Parse one line of Universal Ctags JSON output.

    Args:
        line: A single output line

    Returns:
        TagRecord, or None for pseudo tags and blank lines

    Raises:
        TagStreamMalformed: If the line is not a JSON tag object
    """
    if not line.strip():
        return None
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise TagStreamMalformed(f"invalid JSON tag line: {e}") from e

    if not isinstance(data, dict):
        raise TagStreamMalformed(f"JSON tag line is not an object: {line[:80]!r}")
    if data.get('_type') != 'tag':
        return None

    name = data.get('name')
    if not isinstance(name, str) or not name:
        raise TagStreamMalformed(f"JSON tag without a name: {line[:80]!r}")

    scope = data.get('scope')
    scope_kind = data.get('scopeKind')
    hint = None
    if isinstance(scope, str) and scope:
        if isinstance(scope_kind, str) and scope_kind:
            hint = f"{scope_kind}:{scope}"
        elif ':' in scope:
            hint = scope

    return TagRecord(
        name=name,
        kind=data.get('kind'),
        line=_to_int(data.get('line')),
        scope=hint,
        end_line=_to_int(data.get('end')),
        signature=data.get('signature'),
    )


def parse_tag_line(line: str) -> Optional[TagRecord]:
    """
    Parse one line of the classic extended tags format.

    Args:
        line: A single output line

    Returns:
        TagRecord, or None for pseudo tags and blank lines

    Raises:
        TagStreamMalformed: If the line is not an extended tag line
    """
    line = line.rstrip('\r\n')
    if not line.strip() or line.startswith('!_'):
        return None

    head, sep, tail = line.partition(';"\t')
    if not sep:
        raise TagStreamMalformed(f"tag line without extension fields: {line[:80]!r}")

    columns = head.split('\t', 2)
    if len(columns) < 3 or not columns[0]:
        raise TagStreamMalformed(f"tag line without name/file/address: {line[:80]!r}")
    name, _path, address = columns

    kind = None
    line_number = _to_int(address)
    end_line = None
    signature = None
    hint = None

    for field in tail.split('\t'):
        if not field:
            continue
        key, colon, value = field.partition(':')
        if not colon:
            # A bare field is the kind letter or name.
            kind = field
            continue
        if key == 'kind':
            kind = value
        elif key == 'line':
            line_number = _to_int(value)
        elif key == 'end':
            end_line = _to_int(value)
        elif key == 'signature':
            signature = value
        elif key == 'scope':
            # --fields=+Z form: "scope:class:SomeClass"
            hint = value or None
        elif value and normalize_kind(key) in SCOPE_FIELD_KINDS:
            hint = f"{key}:{value}"

    return TagRecord(
        name=name,
        kind=kind,
        line=line_number,
        scope=hint,
        end_line=end_line,
        signature=signature,
    )
