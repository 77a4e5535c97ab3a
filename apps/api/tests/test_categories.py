"""Unit tests for name-based category classification."""

import json

import pytest

from evaluations.classify.categories import (
    CategoryClassifier,
    CategoryRule,
    classify_name,
    load_classifier,
    rules_from_config,
)


@pytest.mark.parametrize(
    "name, category",
    [
        ("Fraud Detection Accuracy", "Fraud Detection"),
        ("Credit Risk Scoring", "Risk Assessment"),
        ("Latency Benchmark", "Performance"),
        ("Model Performance Regression", "Performance"),
        ("Identity Verification Suite", "Identity"),
        ("AML Compliance Check", "Compliance"),
        ("Money Laundering Typologies", "Compliance"),
        ("Spending Pattern Recognition", "Pattern Analysis"),
        ("Card Freeze Automation", "Security"),
        ("OTP Delivery Reliability", "Security"),
        ("Widget Test", "Other"),
    ],
)
def test_default_rules(name, category) -> None:
    assert classify_name(name) == category


def test_first_matching_rule_wins() -> None:
    # Contains both "Fraud" and "Risk"
    assert classify_name("Fraud Risk Model") == "Fraud Detection"


def test_matching_is_case_sensitive() -> None:
    assert classify_name("aml check") == "Other"
    assert classify_name("fraud screen") == "Other"


def test_empty_name_is_other() -> None:
    assert classify_name("") == "Other"
    assert classify_name(None) == "Other"


def test_custom_rules_and_fallback() -> None:
    classifier = CategoryClassifier(
        [CategoryRule.substring("Onboarding", "KYC", "Onboard")],
        fallback="Uncategorised",
    )

    assert classifier.classify("KYC Document Verification") == "Onboarding"
    assert classifier.classify("Fraud Detection Accuracy") == "Uncategorised"


def test_rules_from_config_rejects_bad_entries() -> None:
    with pytest.raises(ValueError):
        rules_from_config([{"category": "Empty", "patterns": []}])
    with pytest.raises(ValueError):
        rules_from_config([{"patterns": ["x"]}])


def test_load_classifier_from_env_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([{"category": "Onboarding", "patterns": ["KYC"]}]), encoding="utf-8")
    monkeypatch.setenv("CATEGORY_RULES_FILE", str(path))

    classifier = load_classifier()
    assert classifier.classify("KYC Document Verification") == "Onboarding"
    assert classifier.classify("Fraud Detection Accuracy") == "Other"


def test_load_classifier_without_config_uses_defaults(monkeypatch) -> None:
    monkeypatch.delenv("CATEGORY_RULES_FILE", raising=False)

    assert [r.category for r in load_classifier().rules][0] == "Fraud Detection"
