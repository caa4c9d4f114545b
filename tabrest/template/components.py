"""Endpoint template model.

A parsed endpoint template is an ordered tuple of path components plus a
mapping of query parameter name to component. Both are immutable so parsed
templates can be cached and shared by template string.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

# Characters that must be escaped with a backslash in each template position
NAME_SPECIALS = frozenset("\\{}:?,")
DEFAULT_SPECIALS = frozenset("\\{}")
PATH_SPECIALS = frozenset("\\{}/?")
QUERY_KEY_SPECIALS = frozenset("\\{}&=")
QUERY_VALUE_SPECIALS = frozenset("\\{}&")


def escape(text: str, specials: frozenset[str]) -> str:
    """Backslash-escape every special character in text."""
    return "".join(f"\\{ch}" if ch in specials else ch for ch in text)


@dataclass(frozen=True)
class TemplateComponent:
    """One path segment or query value of an endpoint template.

    Exactly one of literal_text and variable_name is set.

    Attributes:
        literal_text: Fixed text (None for variables)
        variable_name: Name of the bound parameter (None for literals)
        required: Whether a value must be bound when building a suffix
        split: Whether a bound value is comma-split into repeated query params
        default_value: Placeholder text shown to users, never sent
        extension_suffix: Literal text appended after the bound value
    """

    literal_text: str | None = None
    variable_name: str | None = None
    required: bool = True
    split: bool = False
    default_value: str | None = None
    extension_suffix: str | None = None

    def __post_init__(self) -> None:
        if (self.literal_text is None) == (self.variable_name is None):
            raise ValueError("TemplateComponent needs exactly one of literal_text or variable_name")

    @classmethod
    def literal(cls, text: str) -> TemplateComponent:
        return cls(literal_text=text)

    @classmethod
    def variable(
        cls,
        name: str,
        *,
        required: bool = True,
        split: bool = False,
        default_value: str | None = None,
        extension_suffix: str | None = None,
    ) -> TemplateComponent:
        return cls(
            variable_name=name,
            required=required,
            split=split,
            default_value=default_value,
            extension_suffix=extension_suffix,
        )

    @property
    def is_variable(self) -> bool:
        return self.variable_name is not None

    def as_required(self) -> TemplateComponent:
        """Copy of a variable component that must be bound and has no placeholder."""
        if not self.is_variable:
            return self
        return replace(self, required=True, default_value=None)

    def to_template(self, literal_specials: frozenset[str]) -> str:
        """Serialize the component back to template syntax.

        Args:
            literal_specials: Characters to escape in literal text and suffixes
        """
        if self.literal_text is not None:
            return escape(self.literal_text, literal_specials)

        out = ["{", escape(self.variable_name or "", NAME_SPECIALS)]
        if not self.required:
            out.append("?")
        if self.split:
            out.append(",")
        if self.default_value is not None:
            out.append(":")
            out.append(escape(self.default_value, DEFAULT_SPECIALS))
        out.append("}")
        if self.extension_suffix:
            out.append(escape(self.extension_suffix, literal_specials))
        return "".join(out)


@dataclass(frozen=True)
class EndpointTemplate:
    """Parsed endpoint template.

    Attributes:
        path: Ordered path components
        query: Query components keyed by the externally visible parameter name
        absolute: Whether the template started with '/'
    """

    path: tuple[TemplateComponent, ...] = ()
    query: Mapping[str, TemplateComponent] = field(default_factory=lambda: MappingProxyType({}))
    absolute: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.query, MappingProxyType):
            object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    def __hash__(self) -> int:
        return hash((self.path, tuple(self.query.items()), self.absolute))

    @property
    def variables(self) -> list[str]:
        """Names of all variables in path order, then query order."""
        names = [c.variable_name for c in self.path if c.variable_name is not None]
        names.extend(c.variable_name for c in self.query.values() if c.variable_name is not None)
        return names

    @property
    def required_variables(self) -> list[str]:
        components = [*self.path, *self.query.values()]
        return [c.variable_name for c in components if c.variable_name is not None and c.required]
