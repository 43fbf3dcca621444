"""Placeholder templates for resource urls and interior paths.

Dialect: `{name}` or `{ dotted.path }` looks a value up in the rendering
context; `\\{` and `\\}` produce literal braces. Rendering is pure: the same
template and context always give the same string.
"""

import re
from collections.abc import Mapping
from typing import Any

from .exceptions import TemplateError
from .schema import Formula

_TOKEN = re.compile(r"\\([{}])|\{([^{}]*)\}|([{}])")
_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z0-9_]+)*$")


def build_context(formula: Formula, version: str) -> dict[str, Any]:
    """
    Rendering context for a formula at a given version.

    Shape: {version, package: {name, bin, repository, description, versions, ...}, context: {...}}
    """
    return {
        "version": version,
        "package": formula.package.model_dump(),
        "context": dict(formula.context or {}),
    }


def _lookup(path: str, context: Mapping[str, Any], template: str) -> Any:
    value: Any = context
    for key in path.split("."):
        if not isinstance(value, Mapping) or key not in value:
            raise TemplateError(
                f"Unknown placeholder '{{{path}}}' in template '{template}'",
                context={"template": template, "placeholder": path},
            )
        value = value[key]
    return value


def _format(value: Any, path: str, template: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TemplateError(
        f"Placeholder '{{{path}}}' in template '{template}' is not a printable value",
        context={"template": template, "placeholder": path},
    )


def render_template(template: str, context: Mapping[str, Any]) -> str:
    """
    Render a template against a context.

    Args:
        template: Template text, e.g. "{package.repository}/releases/download/v{version}/x.tar.gz"
        context: Nested mapping of values

    Returns:
        Rendered string

    Raises:
        TemplateError: On unknown placeholders, non-printable values or unbalanced braces
    """

    def replace(match: re.Match) -> str:
        escaped, placeholder, stray = match.groups()
        if escaped is not None:
            return escaped
        if stray is not None:
            raise TemplateError(
                f"Unbalanced '{stray}' in template '{template}'",
                context={"template": template},
            )
        path = placeholder.strip()
        if not _PATH.match(path):
            raise TemplateError(
                f"Invalid placeholder '{{{placeholder}}}' in template '{template}'",
                context={"template": template, "placeholder": placeholder},
            )
        return _format(_lookup(path, context, template), path, template)

    return _TOKEN.sub(replace, template)
