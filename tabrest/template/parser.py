"""Endpoint template parser.

Grammar::

    template  := path ["?" query]
    path      := segment ("/" segment)*
    segment   := literal | "{" variable "}" [suffix]
    query     := pair ("&" pair)*
    pair      := key "=" (literal | "{" variable "}" [suffix])
    variable  := name ["?"] [","] [":" default]

Separators ('/', '?', '&', '=') only count outside braces, so variable names
may contain spaces and '&'. A backslash escapes the following character
anywhere in the template. A variable is optional when '?' follows its name or
when a default placeholder is given; a ',' after the name or inside the
default list marks it split.
"""

from __future__ import annotations

from functools import lru_cache

from ..core.exceptions import TemplateSyntaxError
from .components import (
    PATH_SPECIALS,
    QUERY_KEY_SPECIALS,
    QUERY_VALUE_SPECIALS,
    EndpointTemplate,
    TemplateComponent,
    escape,
)

# (character, escaped) pairs
_Token = tuple[str, bool]

_OPEN: _Token = ("{", False)
_CLOSE: _Token = ("}", False)


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            tokens.append((text[i + 1], True))
            i += 2
        else:
            tokens.append((ch, False))
            i += 1
    return tokens


def _join(tokens: list[_Token]) -> str:
    return "".join(ch for ch, _ in tokens)


def _split(
    tokens: list[_Token], sep: str, template: str, maxsplit: int = -1
) -> list[list[_Token]]:
    """Split tokens on an unescaped separator outside braces.

    The whole token list is always scanned so brace balance is checked even
    once maxsplit is reached.
    """
    parts: list[list[_Token]] = [[]]
    depth = 0
    for pos, token in enumerate(tokens):
        if token == _OPEN:
            if depth:
                raise TemplateSyntaxError("Nested '{' in endpoint template", template, pos)
            depth = 1
        elif token == _CLOSE:
            if not depth:
                raise TemplateSyntaxError("Unbalanced '}' in endpoint template", template, pos)
            depth = 0
        elif token == (sep, False) and depth == 0 and (maxsplit < 0 or len(parts) <= maxsplit):
            parts.append([])
            continue
        parts[-1].append(token)
    if depth:
        raise TemplateSyntaxError("Unclosed '{' in endpoint template", template, len(tokens))
    return parts


def _parse_variable(inner: list[_Token], suffix: str | None, template: str) -> TemplateComponent:
    colon = inner.index((":", False)) if (":", False) in inner else -1
    name_tokens = inner[:colon] if colon >= 0 else list(inner)
    default_tokens = inner[colon + 1 :] if colon >= 0 else None

    optional = False
    split = False
    while name_tokens and name_tokens[-1] in (("?", False), (",", False)):
        if name_tokens.pop()[0] == "?":
            optional = True
        else:
            split = True

    name = _join(name_tokens).strip()
    if not name:
        raise TemplateSyntaxError("Empty variable name in endpoint template", template)

    default = None
    if default_tokens is not None:
        default = _join(default_tokens)
        optional = True
        if (",", False) in default_tokens:
            split = True

    return TemplateComponent.variable(
        name,
        required=not optional,
        split=split,
        default_value=default,
        extension_suffix=suffix or None,
    )


def _parse_component(tokens: list[_Token], template: str) -> TemplateComponent:
    # Literal text before '{' makes the whole segment a literal
    if tokens and tokens[0] == _OPEN:
        close = tokens.index(_CLOSE)
        return _parse_variable(tokens[1:close], _join(tokens[close + 1 :]), template)
    return TemplateComponent.literal(_join(tokens))


@lru_cache(maxsize=512)
def parse_template(template: str) -> EndpointTemplate:
    """Parse an endpoint template string.

    Args:
        template: Template such as ``"users/{id}/repos?per_page={Size?:30}"``

    Returns:
        Immutable EndpointTemplate (cached per template string)

    Raises:
        TemplateSyntaxError: If braces are unbalanced or a variable has no name
    """
    tokens = _tokenize(template)
    path_tokens, *rest = _split(tokens, "?", template, maxsplit=1)

    absolute = bool(path_tokens) and path_tokens[0] == ("/", False)
    if absolute:
        path_tokens = path_tokens[1:]

    path = tuple(
        _parse_component(segment, template)
        for segment in _split(path_tokens, "/", template)
        if segment
    )

    query: dict[str, TemplateComponent] = {}
    if rest:
        for pair in _split(rest[0], "&", template):
            if not pair:
                continue
            key_tokens, *value = _split(pair, "=", template, maxsplit=1)
            key = _join(key_tokens).strip()
            if not key:
                continue
            query[key] = _parse_component(value[0] if value else [], template)

    return EndpointTemplate(path=path, query=query, absolute=absolute)


def format_template(template: EndpointTemplate) -> str:
    """Serialize a parsed template back to its string form.

    ``parse_template(format_template(t)) == t`` holds for any parsed template.
    """
    path = "/".join(component.to_template(PATH_SPECIALS) for component in template.path)
    if template.absolute:
        path = "/" + path

    pairs = [
        f"{escape(key, QUERY_KEY_SPECIALS)}={component.to_template(QUERY_VALUE_SPECIALS)}"
        for key, component in template.query.items()
    ]
    return f"{path}?{'&'.join(pairs)}" if pairs else path
