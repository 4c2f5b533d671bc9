from __future__ import annotations

"""
AMD Declaration Grammar.

Parses module source into self-contained declaration segments and the
quoted literal spans that matter for dependency rewriting:

    segment   := [preamble] | 'define(' [id ','] [deps ','] factory ')' ...
    deps      := '[' literal (',' literal)* ']'
    async req := 'require(' deps ...
    sync req  := 'require(' literal ')'

Comments and string contents are masked before structure is matched, so a
'define(' or 'require(' inside a string or comment is never mistaken for a
declaration. Template literals are masked whole, including any '${...}'
interpolation. Regex literals are not recognized: a quote inside one
(e.g. /'/) opens a string that runs to the next matching quote or the
end of the line. Each segment runs from one 'define(' to the next; the
preamble covers text before the first one.
"""

import posixpath
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

_TOKEN_RX = re.compile(
    r"""//[^\n]*|/\*.*?\*/|`(?:\\.|[^`\\])*`|'(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*\"""",
    re.S,
)
_DEFINE_RX = re.compile(r"(?<![\w$.])define\s*\(")
_ASYNC_REQUIRE_RX = re.compile(r"(?<![\w$.])require\s*\(\s*\[")
_SYNC_REQUIRE_RX = re.compile(r"""(?<![\w$.])require\s*\(\s*(?=['"])""")
_CLOSE_CALL_RX = re.compile(r"\s*\)")

PLUGIN_MARKER = "!"

# -----------------------------------------------------------------------------
# DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Literal:
    """A quoted string literal: [start, end) covers the quotes."""
    start: int
    end: int
    value: str
    quote: str


@dataclass
class Declaration:
    """
    One declaration segment of a source file.

    Attributes:
        start: Offset of the segment in the source text.
        end: End offset (exclusive).
        self_id: The 'define' id literal, None for anonymous or preamble.
        dependency_lists: Literals of every bracketed dependency list.
        sync_requires: Literals of single-argument require calls.
    """
    start: int
    end: int
    self_id: Optional[Literal] = None
    dependency_lists: List[List[Literal]] = field(default_factory=list)
    sync_requires: List[Literal] = field(default_factory=list)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def split_declarations(source: str) -> List[Declaration]:
    """
    Split source text into declaration segments and parse each one.

    Args:
        source: Module or page source.

    Returns:
        List[Declaration]: Segments in source order; a preamble segment is
                           included only when non-blank.
    """
    masked, literals = mask_source(source)
    boundaries = [m.start() for m in _DEFINE_RX.finditer(masked)]

    spans: List[Tuple[int, int]] = []
    if not boundaries:
        spans.append((0, len(source)))
    else:
        if masked[:boundaries[0]].strip():
            spans.append((0, boundaries[0]))
        edges = boundaries + [len(source)]
        spans.extend(zip(edges[:-1], edges[1:]))

    return [_parse_segment(masked, literals, start, end) for start, end in spans]


def mask_source(source: str) -> Tuple[str, Dict[int, Literal]]:
    """
    Blank out comments and string contents, keeping offsets stable.

    Returns:
        Tuple[str, Dict[int, Literal]]: Masked text and literals by start offset.
    """
    parts: List[str] = []
    literals: Dict[int, Literal] = {}
    pos = 0

    for m in _TOKEN_RX.finditer(source):
        parts.append(source[pos:m.start()])
        token = m.group(0)
        if token[0] in "'\"":
            literals[m.start()] = Literal(m.start(), m.end(), token[1:-1], token[0])
            parts.append(token[0] + "_" * (len(token) - 2) + token[0])
        else:
            parts.append(re.sub(r"[^\n]", " ", token))
        pos = m.end()

    parts.append(source[pos:])
    return "".join(parts), literals


def resolve_module_id(request: str, base_id: Optional[str]) -> Optional[str]:
    """
    Resolve a dependency request to an absolute module id.

    Relative forms ('./x', '../x') resolve against the directory of the
    declaring module; they are unresolvable without one.
    """
    if request.startswith("./") or request.startswith("../"):
        if not base_id:
            return None
        return posixpath.normpath(posixpath.join(posixpath.dirname(base_id), request))
    return request


def is_plugin_request(request: str) -> bool:
    return PLUGIN_MARKER in request

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _parse_segment(masked: str, literals: Dict[int, Literal], start: int, end: int) -> Declaration:
    decl = Declaration(start=start, end=end)
    define = _DEFINE_RX.match(masked, start)

    if define is not None:
        pos = _skip_ws(masked, define.end(), end)
        literal = literals.get(pos)
        if literal is not None:
            decl.self_id = literal
            pos = _skip_ws(masked, literal.end, end)
            if pos < end and masked[pos] == ",":
                pos = _skip_ws(masked, pos + 1, end)
        if pos < end and masked[pos] == "[":
            decl.dependency_lists.append(_array_literals(masked, literals, pos, end))

    for m in _ASYNC_REQUIRE_RX.finditer(masked, start, end):
        decl.dependency_lists.append(_array_literals(masked, literals, m.end() - 1, end))

    for m in _SYNC_REQUIRE_RX.finditer(masked, start, end):
        literal = literals.get(m.end())
        if literal is not None and _CLOSE_CALL_RX.match(masked, literal.end, end):
            decl.sync_requires.append(literal)

    return decl


def _array_literals(masked: str, literals: Dict[int, Literal], open_pos: int, end: int) -> List[Literal]:
    close_pos = masked.find("]", open_pos, end)
    if close_pos < 0:
        close_pos = end
    return [lit for offset, lit in sorted(literals.items()) if open_pos < offset < close_pos]


def _skip_ws(text: str, pos: int, end: int) -> int:
    while pos < end and text[pos].isspace():
        pos += 1
    return pos
