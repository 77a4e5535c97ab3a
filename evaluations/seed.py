"""
Demo evaluation data set.

Used by `scripts/seed_evaluations.py` and by the API's optional startup seeding
(AUTO_SEED_EVALUATIONS=1). Names are chosen so every reporting category appears,
and rows are spread over recent days so the performance charts have a shape.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from evaluations.schemas.evaluation import EvaluationCreate, utcnow

# (name, description, status, score, test_cases, days_ago)
DEMO_EVALUATIONS: list[tuple[str, str, str, float | None, int, int]] = [
    ("Fraud Detection Accuracy", "Card-not-present fraud classifier on labelled 2023 transactions", "completed", 96.4, 1200, 1),
    ("Transaction Fraud Recall", "Recall of the fraud model on confirmed chargebacks", "completed", 91.2, 850, 3),
    ("Credit Risk Scoring", "Default-probability model against the holdout portfolio", "completed", 88.7, 640, 2),
    ("Merchant Risk Tiering", "Tier assignment agreement with analyst labels", "pending", None, 300, 6),
    ("AML Compliance Check", "Anti-money-laundering alert precision on reviewed cases", "completed", 93.5, 500, 4),
    ("Money Laundering Typologies", "Coverage of known layering and structuring patterns", "completed", 84.1, 420, 8),
    ("Identity Verification Suite", "Document and selfie match decisions", "completed", 97.8, 760, 1),
    ("KYC Document Verification", "Extraction accuracy on passports and ID cards", "running", None, 380, 0),
    ("Spending Pattern Recognition", "Anomaly flags on customer spending baselines", "completed", 89.9, 900, 5),
    ("Behavioral Pattern Drift", "Stability of behavioural features week over week", "completed", 86.3, 260, 12),
    ("Card Freeze Automation", "Correct freeze decisions on suspected compromise", "completed", 95.0, 150, 2),
    ("OTP Delivery Reliability", "One-time passcode challenge outcomes", "pending", None, 200, 9),
    ("Latency Benchmark", "p95 inference latency under production load profile", "completed", 92.0, 100, 7),
    ("Model Performance Regression", "Nightly regression against the last released model", "completed", 81.6, 1000, 15),
    ("Customer Support Intent Routing", "Intent classifier routing accuracy", "completed", 90.4, 540, 20),
    ("Chargeback Dispute Summaries", "Quality of generated dispute summaries", "pending", None, 120, 25),
]


def demo_evaluations(now: datetime | None = None) -> list[EvaluationCreate]:
    """Return the demo set as EvaluationCreate models, timestamped relative to `now`."""

    now = now or utcnow()
    items: list[EvaluationCreate] = []
    for i, (name, description, status, score, test_cases, days_ago) in enumerate(DEMO_EVALUATIONS):
        updated_at = now - timedelta(days=days_ago, hours=i % 5)
        created_at = updated_at - timedelta(days=30)
        last_run = updated_at if status != "pending" else None
        items.append(
            EvaluationCreate(
                name=name,
                description=description,
                status=status,
                score=score,
                test_cases=test_cases,
                last_run=last_run,
                created_at=created_at,
                updated_at=updated_at,
            )
        )
    return items


def seed_backend(backend: Any, *, only_if_empty: bool = True, now: datetime | None = None) -> int:
    """
    Insert the demo set into a storage backend.

    Returns the number of rows inserted (0 when skipped because data exists).
    """

    if only_if_empty and backend.count_evaluations() > 0:
        return 0
    items = demo_evaluations(now)
    for item in items:
        backend.create_evaluation(item)
    return len(items)
