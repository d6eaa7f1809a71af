import re

MENTION_PATTERN = re.compile(r"@(\w+)", re.ASCII)


def extract_mentions(content: str) -> list[str]:
    """Return the distinct ``@username`` tokens in order of first appearance."""
    return list(dict.fromkeys(MENTION_PATTERN.findall(content or "")))
