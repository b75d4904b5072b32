import re
from collections.abc import Mapping
from typing import Any

# {{name}} or {{name || "default"}}
PLACEHOLDER_PATTERN = re.compile(r'\{\{([^}|]+)(?:\|\|\s*"([^"]*)")?\s*\}\}')


def render_template(template: str, params: Mapping[str, Any]) -> str:
    def substitute(match: re.Match[str]) -> str:
        value = params.get(match.group(1).strip())
        if value is not None:
            return str(value)
        return match.group(2) or ""

    return PLACEHOLDER_PATTERN.sub(substitute, template)
