"""Branch policy for auto-updates."""

from hookbot.deploy.patterns import matches


def should_update(branch: str, spec: str | list[str]) -> bool:
    """Check whether a push to ``branch`` is covered by the configured branch spec."""
    if isinstance(spec, list):
        return any(matches(branch, pattern) for pattern in spec)
    return matches(branch, spec)
