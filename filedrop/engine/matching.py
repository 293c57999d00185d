"""Intake path matching."""

from __future__ import annotations

from typing import Optional

from filedrop.config.settings import IntakeConfiguration, PathRule


def match_rule(config: IntakeConfiguration, key: str) -> Optional[PathRule]:
    """
    Find the rule an object key belongs to.

    Rules are tried in declaration order and the first one whose
    ``intake_path + "/"`` prefixes the key wins, even when a later rule is
    more specific. With rules ``[a, a/b]`` the key ``a/b/x.json`` resolves
    to ``a``.

    Args:
        config: Ordered intake rules
        key: Decoded object key

    Returns:
        Matching PathRule, or None when the key is outside every intake path
    """
    for rule in config.rules:
        if key.startswith(f"{rule.intake_path}/"):
            return rule
    return None
