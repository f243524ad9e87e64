import re
from typing import Any, Mapping, Optional

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

# Placeholder that renders the payload's list of test names
TEST_NAMES_PLACEHOLDER = "test_names"


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _resolve(key: str, payload: Mapping[str, Any]) -> str:
    if key == TEST_NAMES_PLACEHOLDER:
        names = payload.get("testNames", payload.get("test_names"))
        if isinstance(names, (list, tuple)):
            return ", ".join(_stringify(n) for n in names)
    return _stringify(payload.get(key))


def render(template: Optional[str], payload: Optional[Mapping[str, Any]]) -> str:
    """Substitute ``{{identifier}}`` placeholders with payload values.

    Unknown identifiers render as an empty string. No escaping is applied;
    channel-specific encoding is the caller's job.
    """
    if not template:
        return ""
    payload = payload or {}
    return _PLACEHOLDER_RE.sub(lambda m: _resolve(m.group(1), payload), template)
