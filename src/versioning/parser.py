"""Version parsing utilities shared by the classifier and the resolver."""

from typing import Optional

import semantic_version


def parse_version(raw: Optional[str]) -> Optional[semantic_version.Version]:
    """Parse a version string leniently.

    Accepts strict semver, a leading ``v`` and partial versions ("1.2").

    Returns:
        Parsed version or None if the string is not a version at all
    """
    if not raw:
        return None
    text = raw.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return semantic_version.Version(text)
    except ValueError:
        pass
    try:
        return semantic_version.Version.coerce(text)
    except ValueError:
        return None


def versions_equal(left: Optional[str], right: Optional[str]) -> bool:
    """Semantic-version equality; falls back to string equality for non-versions."""
    if left is None or right is None:
        return False
    lv, rv = parse_version(left), parse_version(right)
    if lv is None or rv is None:
        return left.strip() == right.strip()
    return lv == rv
