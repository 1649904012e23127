"""@string macro collection and value resolution.

Literal value parts are kept unresolved in the document model. This module
substitutes them: a literal naming a macro (case-insensitive) is replaced by
the macro's text, numbers stay as written and unknown names resolve to
themselves. Parts joined by ``#`` are concatenated in order.
"""
import logging
from typing import Dict, Mapping, Optional

from bibtexparser.bibdatabase import COMMON_STRINGS
from bibtexparser.latexenc import latex_to_unicode

from .models import BlockKind, Concatenation, Document, PartKind

logger = logging.getLogger(__name__)


def collect_macros(document: Document, common_strings: bool = True) -> Dict[str, str]:
    """Gather @string definitions in document order.

    Each definition may refer to macros defined before it. Later
    definitions of the same name win.

    Args:
        document: Parsed document
        common_strings: Seed the table with the standard month macros
            (``jan`` -> ``January``...)

    Returns:
        Mapping of lowercase macro name to resolved text
    """
    macros: Dict[str, str] = {}
    if common_strings:
        macros.update((name.lower(), text) for name, text in COMMON_STRINGS.items())

    for block in document.blocks:
        if block.kind is not BlockKind.STRING:
            continue
        for definition in block.fields:
            macros[definition.name.lower()] = resolve_value(definition.value, macros)

    logger.debug(f"Collected {len(macros)} string macros")
    return macros


def resolve_value(
    value: Concatenation,
    macros: Optional[Mapping[str, str]] = None,
    to_unicode: bool = False,
) -> str:
    """Resolve a field value to plain text.

    Args:
        value: Field value from the document model
        macros: Macro table from collect_macros(); no substitution when omitted
        to_unicode: Decode LaTeX escapes (``{\\"o}`` -> ``ö``) in the result

    Returns:
        The concatenated value text
    """
    macros = macros or {}
    pieces = []
    for part in value.parts:
        if part.kind is PartKind.LITERAL and not part.is_number:
            pieces.append(macros.get(part.text.lower(), part.text))
        else:
            pieces.append(part.text)
    text = "".join(pieces)
    if to_unicode:
        text = latex_to_unicode(text)
    return text


def entry_values(document: Document, common_strings: bool = True) -> Dict[str, Dict[str, str]]:
    """Resolve every field of every keyed entry.

    Returns:
        Mapping of citation key to ``{lowercase field name: resolved text}``.
        For duplicate keys the first entry wins.
    """
    macros = collect_macros(document, common_strings=common_strings)
    values: Dict[str, Dict[str, str]] = {}
    for entry in document.entries:
        if not entry.key or entry.key in values:
            continue
        values[entry.key] = {
            f.name.lower(): resolve_value(f.value, macros) for f in entry.fields
        }
    return values
