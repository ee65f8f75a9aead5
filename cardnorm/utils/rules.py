"""
Card Normalizer — Ordered Rewrite Rules

A tiny rule engine for regex ladders. Each rule is a named
(pattern, replacement) pair; rule lists are applied in declaration order so
later rules may assume earlier ones already consumed the longer phrases.

Rules are plain data, so every rule can be looked up by name and tested in
isolation.
"""

from __future__ import annotations

import re
from typing import Iterable, NamedTuple, Sequence

import structlog

logger = structlog.get_logger(__name__)


class Rule(NamedTuple):
    """A single named rewrite step."""
    name: str
    pattern: re.Pattern[str]
    replacement: str = " "


def compile_rule(
    name: str,
    pattern: str,
    replacement: str = " ",
    flags: int = re.IGNORECASE,
) -> Rule:
    """
    Build a Rule from a raw pattern string.

    Args:
        name: Stable identifier used in logs and tests.
        pattern: Regular expression source.
        replacement: Substitution text (default: a single space, so removed
                     tokens never glue their neighbours together).
        flags: re flags (default: case-insensitive).

    Returns:
        Compiled Rule.

    Raises:
        ValueError: If the pattern can match the empty string. Such a rule
                    would never let apply_until_stable() settle.
    """
    compiled = re.compile(pattern, flags)
    if compiled.fullmatch(""):
        raise ValueError(f"Rule '{name}' matches the empty string: {pattern!r}")
    return Rule(name=name, pattern=compiled, replacement=replacement)


def apply_rules(text: str, rules: Iterable[Rule]) -> str:
    """
    Run every rule once, in order.

    Args:
        text: Input string.
        rules: Ordered rules.

    Returns:
        Rewritten string.
    """
    for rule in rules:
        rewritten = rule.pattern.sub(rule.replacement, text)
        if rewritten != text:
            logger.debug("rule_applied", rule=rule.name, source="rules")
            text = rewritten
    return text


def apply_until_stable(text: str, rules: Sequence[Rule]) -> str:
    """
    Repeat apply_rules() until a full pass leaves the text unchanged.

    The result is a fixed point of the rule list, which makes the operation
    idempotent. Rule lists passed here must only shorten the text when they
    fire (removals, or collapsing a multi-character match into one space),
    otherwise the loop may not settle.

    Args:
        text: Input string.
        rules: Ordered rules.

    Returns:
        The first text for which a full pass is a no-op.
    """
    passes = 0
    while True:
        rewritten = apply_rules(text, rules)
        passes += 1
        if rewritten == text:
            break
        text = rewritten

    if passes > 2:
        logger.debug("rules_settled", passes=passes, source="rules")
    return text


def rule_by_name(rules: Sequence[Rule], name: str) -> Rule:
    """
    Look up a rule by name.

    Raises:
        KeyError: If no rule carries that name.
    """
    for rule in rules:
        if rule.name == name:
            return rule
    raise KeyError(name)
