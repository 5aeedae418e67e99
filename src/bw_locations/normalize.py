from typing import Optional


def normalize_name(value: Optional[str]) -> str:
    """Trim and case-fold a location name. Inner spacing is kept as typed."""
    if value is None:
        return ""
    return str(value).strip().casefold()


def match_rank(candidate: Optional[str], needle: str) -> Optional[int]:
    """Classify ``needle`` against ``candidate``.

    Both sides are compared normalized. Returns 0 for an exact match,
    1 for a prefix match, 2 for a substring match and None otherwise.
    ``needle`` is expected to be normalized already.
    """
    name = normalize_name(candidate)
    if not name or not needle:
        return None
    if name == needle:
        return 0
    if name.startswith(needle):
        return 1
    if needle in name:
        return 2
    return None
