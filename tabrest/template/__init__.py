"""Endpoint template parsing and URL suffix building.

Architecture:
    - components.py: Immutable TemplateComponent / EndpointTemplate model
    - parser.py: parse_template / format_template (persisted wire format)
    - builder.py: SuffixTemplate binds parameter values into a URL suffix
"""

from __future__ import annotations

from .builder import SuffixTemplate, custom_suffix_from
from .components import EndpointTemplate, TemplateComponent
from .parser import format_template, parse_template

__all__ = [
    "EndpointTemplate",
    "TemplateComponent",
    "SuffixTemplate",
    "custom_suffix_from",
    "format_template",
    "parse_template",
]
