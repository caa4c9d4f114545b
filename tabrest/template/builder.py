"""URL suffix builder for endpoint templates.

Binds parameter values into a parsed EndpointTemplate and renders the URL
suffix (path plus query string) appended to a data source's base URL.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote, urlencode

from ..core.exceptions import ConfigurationError
from ..models.parameters import HttpParameter
from .components import EndpointTemplate, TemplateComponent
from .parser import format_template, parse_template


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class SuffixTemplate:
    """Fluent builder producing a URL suffix from an endpoint template.

    Example:
        >>> SuffixTemplate("users/{id}/repos?type={Type?}").bind({"id": "42"}).build()
        'users/42/repos'
    """

    def __init__(self, template: str | EndpointTemplate) -> None:
        self._template = parse_template(template) if isinstance(template, str) else template
        self._values: dict[str, Any] = {}
        self._additional: list[tuple[str, str]] = []

    @property
    def template(self) -> EndpointTemplate:
        return self._template

    def bind(self, values: Mapping[str, Any]) -> SuffixTemplate:
        """Bind variable values by name. Later bindings override earlier ones."""
        self._values.update(values)
        return self

    def with_additional_parameters(
        self, parameters: Iterable[HttpParameter] | None
    ) -> SuffixTemplate:
        """Append extra query parameters after the template's own pairs.

        Parameters without a value are ignored.
        """
        for parameter in parameters or ():
            if not _is_missing(parameter.value):
                self._additional.append((parameter.name, str(parameter.value)))
        return self

    def _value_for(self, component: TemplateComponent) -> str | None:
        value = self._values.get(component.variable_name or "")
        if _is_missing(value):
            if component.required:
                raise ConfigurationError(
                    f"Missing value for required parameter '{component.variable_name}'"
                )
            return None
        return str(value)

    def build_path(self) -> str:
        segments: list[str] = []
        for component in self._template.path:
            if component.literal_text is not None:
                segments.append(component.literal_text)
                continue
            value = self._value_for(component)
            if value is None:
                continue
            segments.append(quote(value, safe="") + (component.extension_suffix or ""))
        path = "/".join(segments)
        return "/" + path if self._template.absolute else path

    def build_query(self) -> list[tuple[str, str]]:
        """Query pairs in template order, split values expanded, extras last."""
        pairs: list[tuple[str, str]] = []
        for key, component in self._template.query.items():
            if component.literal_text is not None:
                pairs.append((key, component.literal_text))
                continue
            value = self._value_for(component)
            if value is None:
                continue
            suffix = component.extension_suffix or ""
            if component.split:
                pairs.extend((key, part.strip() + suffix) for part in value.split(",") if part.strip())
            else:
                pairs.append((key, value + suffix))
        pairs.extend(self._additional)
        return pairs

    def build(self) -> str:
        """Render the suffix.

        Raises:
            ConfigurationError: If a required variable has no bound value
        """
        path = self.build_path()
        query = self.build_query()
        if not query:
            return path
        return f"{path}?{urlencode(query, quote_via=quote)}"


def custom_suffix_from(template: str) -> str:
    """Derive an editable custom-endpoint suffix from a catalog template.

    Every path variable becomes required (placeholders dropped) and the query
    part is removed.
    """
    parsed = parse_template(template)
    path = tuple(component.as_required() for component in parsed.path)
    return format_template(EndpointTemplate(path=path, absolute=parsed.absolute))
