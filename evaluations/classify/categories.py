"""
Name-based category classification.

Every evaluation falls into exactly one reporting category, decided from its name:

Rule table (checked in order, first match wins)
-----------------------------------------------
1. Fraud Detection   - "Fraud"
2. Risk Assessment   - "Risk"
3. Performance       - "Performance", "Benchmark"
4. Identity          - "Identity", "Verification"
5. Compliance        - "Compliance", "AML", "Laundering"
6. Pattern Analysis  - "Pattern", "Recognition"
7. Security          - "Freeze", "OTP"
Fallback: Other

Matching is a case-sensitive substring test, so "AML Compliance Check" is Compliance
while "aml check" is Other. Order matters: "Fraud Risk Model" is Fraud Detection.

The table is data, not code. Tests (or deployments) can pass a different rule list,
or point CATEGORY_RULES_FILE at a JSON file of the form:
    [{"category": "Compliance", "patterns": ["AML", "KYC"]}, ...]
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

FALLBACK_CATEGORY = "Other"


@dataclass(frozen=True)
class CategoryRule:
    """One (predicate, label) pair. `patterns` is kept for display and serialisation."""

    category: str
    patterns: tuple[str, ...]
    predicate: Callable[[str], bool]

    @classmethod
    def substring(cls, category: str, *patterns: str) -> "CategoryRule":
        """Rule that matches when any pattern occurs in the name (case-sensitive)."""

        if not patterns:
            raise ValueError(f"Category rule '{category}' needs at least one pattern")
        frozen = tuple(patterns)
        return cls(
            category=category,
            patterns=frozen,
            predicate=lambda name: any(p in name for p in frozen),
        )

    def matches(self, name: str) -> bool:
        return self.predicate(name)


DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule.substring("Fraud Detection", "Fraud"),
    CategoryRule.substring("Risk Assessment", "Risk"),
    CategoryRule.substring("Performance", "Performance", "Benchmark"),
    CategoryRule.substring("Identity", "Identity", "Verification"),
    CategoryRule.substring("Compliance", "Compliance", "AML", "Laundering"),
    CategoryRule.substring("Pattern Analysis", "Pattern", "Recognition"),
    CategoryRule.substring("Security", "Freeze", "OTP"),
)


class CategoryClassifier:
    """Ordered rule list evaluated first-match-wins, with a fallback label."""

    def __init__(
        self,
        rules: Iterable[CategoryRule] = DEFAULT_RULES,
        fallback: str = FALLBACK_CATEGORY,
    ) -> None:
        self._rules: tuple[CategoryRule, ...] = tuple(rules)
        self._fallback = fallback

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        return self._rules

    @property
    def fallback(self) -> str:
        return self._fallback

    def classify(self, name: str | None) -> str:
        text = name or ""
        for rule in self._rules:
            if rule.matches(text):
                return rule.category
        return self._fallback


def rules_from_config(entries: Sequence[dict[str, Any]]) -> list[CategoryRule]:
    """
    Build substring rules from plain dicts (the JSON file format).

    Raises ValueError on malformed entries so a bad config fails at startup,
    not halfway through a request.
    """

    rules: list[CategoryRule] = []
    for i, entry in enumerate(entries):
        category = entry.get("category") if isinstance(entry, dict) else None
        patterns = entry.get("patterns") if isinstance(entry, dict) else None
        if not isinstance(category, str) or not category:
            raise ValueError(f"Category rule #{i} is missing a 'category' string")
        if not isinstance(patterns, list) or not all(isinstance(p, str) and p for p in patterns):
            raise ValueError(f"Category rule '{category}' needs a list of non-empty 'patterns'")
        rules.append(CategoryRule.substring(category, *patterns))
    return rules


def load_classifier(path: str | Path | None = None) -> CategoryClassifier:
    """
    Return the classifier configured for this process.

    Uses `path`, else CATEGORY_RULES_FILE, else the built-in table.
    """

    source = path or os.getenv("CATEGORY_RULES_FILE", "").strip()
    if not source:
        return CategoryClassifier()

    with open(source, encoding="utf-8") as f:
        entries = json.load(f)
    if not isinstance(entries, list):
        raise ValueError("Category rules file must contain a JSON list")
    return CategoryClassifier(rules_from_config(entries))


def classify_name(name: str | None) -> str:
    """Classify with the built-in rule table."""

    return _DEFAULT_CLASSIFIER.classify(name)


_DEFAULT_CLASSIFIER = CategoryClassifier()
