"""
Placeholder substitution for build-time templates.

A placeholder is ``$`` followed by a variable name. Every mapping entry is
applied in turn as one literal, whole-string replace. Nothing is re-scanned
on purpose, but a value inserted by an earlier entry can still contain a
``$NAME`` token that a later entry replaces (entries are applied in mapping
order). Tokens naming unknown variables stay as they are.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "$"
FIXED_VERSIONS_DELIMITER = ","


@dataclass(frozen=True)
class TemplateSet:
    """The user-configured strings that may contain placeholders."""

    query: str = ""
    transition_name: str = ""
    comment: str = ""
    comment_file: str = ""
    custom_field_id: str = ""
    custom_field_value: str = ""
    fixed_versions: str = ""


@dataclass(frozen=True)
class ResolvedTemplates:
    """Templates after substitution, produced fresh for every run."""

    query: str
    transition_name: str
    comment: str
    custom_field_id: str
    custom_field_value: str
    fixed_version_names: list[str] = field(default_factory=list)


def substitute_variable(origin: str | None, name: str, replacement: str) -> str | None:
    """Replace every ``$name`` in origin with replacement, literally."""
    key = PLACEHOLDER_PREFIX + name
    if origin is not None and key in origin:
        return origin.replace(key, replacement)
    return origin


def substitute_variables(template: str | None, variables: Mapping[str, str]) -> str | None:
    """Apply each variable to the template, one entry after the other."""
    for name, value in variables.items():
        template = substitute_variable(template, name, value)
    return template


def split_version_names(text: str | None) -> list[str]:
    """Split a comma-delimited version list, trimming names and dropping blanks."""
    if not text:
        return []
    return [name.strip() for name in text.strip().split(FIXED_VERSIONS_DELIMITER) if name.strip()]


def _comment_source(templates: TemplateSet, variables: Mapping[str, str]) -> str:
    #an inline comment is used unless a comment file is configured
    if not (templates.comment_file or "").strip():
        return templates.comment
    path = substitute_variables(templates.comment_file, variables)
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read comment file %s, using the inline comment instead: %s", path, exc)
        return templates.comment


def resolve_templates(templates: TemplateSet, variables: Mapping[str, str]) -> ResolvedTemplates:
    """Expand all placeholders of a template set.

    Args:
        templates: The configured templates
        variables: Build environment and build variables, keyed by plain name

    Returns:
        The resolved templates with the fixed versions already split into names

    """
    comment = substitute_variables(_comment_source(templates, variables), variables) or ""
    logger.debug("Resolved comment:\n%s", comment)
    return ResolvedTemplates(
        query=substitute_variables(templates.query, variables) or "",
        transition_name=substitute_variables(templates.transition_name, variables) or "",
        comment=comment,
        custom_field_id=templates.custom_field_id,
        custom_field_value=substitute_variables(templates.custom_field_value, variables) or "",
        fixed_version_names=split_version_names(substitute_variables(templates.fixed_versions, variables)),
    )
