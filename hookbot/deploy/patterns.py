"""Glob-like branch patterns."""


def matches(candidate: str, pattern: str) -> bool:
    """
    Match a branch name against a pattern.

    Supported forms:
    - ``*`` matches everything, a literal matches itself
    - ``!name`` / ``-name`` matches everything except ``name``
    - ``*x*`` matches names containing the text between the wildcards
    - ``*x`` matches names ending with ``x``
    - ``x*`` matches names starting with ``x``

    The inner text of ``*x*`` stops one character short of the closing
    wildcard, so ``*xy*`` looks for ``x``.
    """
    if pattern == "*" or pattern == candidate:
        return True
    if pattern.startswith(("!", "-")):
        return candidate != pattern[1:]

    star = pattern.find("*")
    star2 = pattern.rfind("*")
    if star != -1:
        if star2 > star:
            return _between(pattern, star + 1, star2 - 1) in candidate
        if star == 0:
            return candidate.endswith(pattern[star + 1:])
        return candidate.startswith(pattern[:star])

    return False


def _between(text: str, start: int, end: int) -> str:
    # Inverted bounds are swapped, so "**" yields "*".
    if end < start:
        start, end = end, start
    return text[start:end]
