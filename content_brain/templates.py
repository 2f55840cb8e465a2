"""
Template rendering for agent prompts

Prompt templates use ``{name}`` placeholders. Literal braces cannot be
escaped, so templates must not contain ``{identifier}`` text that is not
meant to be substituted.
"""

import json
import re
from typing import Any, Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def stringify(value: Any) -> str:
    """String form of a template variable"""
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    return str(value)


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """
    Replace every ``{name}`` in the template with the variable's string form.

    Placeholders without a matching variable are left verbatim. Rendering
    is a single pass: a substituted value is never rescanned within the same
    render, even when it contains ``{name}`` text of its own.
    """
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return stringify(variables[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def find_placeholders(text: str) -> list[str]:
    """Names of the ``{name}`` placeholders in text, in order of first appearance"""
    seen = []
    for name in PLACEHOLDER_PATTERN.findall(text):
        if name not in seen:
            seen.append(name)
    return seen
