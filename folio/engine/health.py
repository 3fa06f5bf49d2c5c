"""Pipeline health, stage aging, analytics and insights.

Dashboard numbers computed from a contact snapshot. Passed contacts
count toward stage totals and pass rate but never toward the active
pipeline.

Usage:
    from folio.engine.health import pipeline_health, stage_aging

    health = pipeline_health(repo.list(), clock.today())
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from folio.core.logging import get_logger
from folio.db.models import VALID_STAGES, Contact, Stage, StalenessLevel, days_since
from folio.engine.staleness import DEFAULT_THRESHOLDS, StaleThresholds, classify

logger = get_logger(__name__)


def _stage_value(stage: Any) -> str:
    return stage.value if isinstance(stage, Stage) else str(stage)


def _by_stage(contacts: list[Contact]) -> dict[str, int]:
    counts = Counter(_stage_value(c.stage) for c in contacts)
    return {stage: counts.get(stage, 0) for stage in VALID_STAGES}


def _stale_counts(
    active: list[Contact],
    today: date,
    thresholds: StaleThresholds,
) -> dict[str, int]:
    counts = {level.value: 0 for level in StalenessLevel}
    for c in active:
        counts[classify(days_since(c.last_contact, today), thresholds).value] += 1
    return counts


def _avg_score(active: list[Contact]) -> float:
    if not active:
        return 0
    return round(sum(c.score for c in active) / len(active), 1)


def pipeline_health(
    contacts: Iterable[Contact],
    today: date,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> dict[str, Any]:
    """Pipeline health overview.

    Returns:
        Dict with total_active, total_passed, by_stage, stale_counts,
        avg_score, at_risk (critical + dead) and conversion_rate
        (portfolio / active, as a fraction)
    """
    contacts = list(contacts)
    active = [c for c in contacts if not c.is_passed]
    by_stage = _by_stage(contacts)
    stale_counts = _stale_counts(active, today, thresholds)

    return {
        "total_active": len(active),
        "total_passed": by_stage[Stage.PASSED.value],
        "by_stage": by_stage,
        "stale_counts": stale_counts,
        "avg_score": _avg_score(active),
        "at_risk": stale_counts["critical"] + stale_counts["dead"],
        "conversion_rate": by_stage[Stage.PORTFOLIO.value] / max(len(active), 1),
    }


def stage_aging(contacts: Iterable[Contact], today: date) -> dict[str, dict[str, Any]]:
    """Average days since creation per stage.

    An unparsable created_at counts as 0 days.
    """
    contacts = list(contacts)
    aging: dict[str, dict[str, Any]] = {}
    for stage in VALID_STAGES:
        in_stage = [c for c in contacts if _stage_value(c.stage) == stage]
        if not in_stage:
            aging[stage] = {"count": 0, "avg_days": 0}
            continue
        total = sum(days_since(c.created_at, today, default=0) for c in in_stage)
        aging[stage] = {"count": len(in_stage), "avg_days": round(total / len(in_stage), 1)}
    return aging


def analytics_overview(
    contacts: Iterable[Contact],
    today: date,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> dict[str, Any]:
    """Analytics dashboard data: funnel, tags, scores, health, rates."""
    contacts = list(contacts)
    active = [c for c in contacts if not c.is_passed]
    by_stage = _by_stage(contacts)

    tag_counts = Counter(tag for c in contacts for tag in c.tags)
    # most_common keeps first-seen order among equal counts
    tag_distribution = dict(tag_counts.most_common())

    score_buckets = {
        "high_90_100": sum(1 for c in active if c.score >= 90),
        "good_70_89": sum(1 for c in active if 70 <= c.score < 90),
        "mid_50_69": sum(1 for c in active if 50 <= c.score < 70),
        "low_0_49": sum(1 for c in active if c.score < 50),
    }

    total = len(contacts)
    conversion = round(by_stage[Stage.PORTFOLIO.value] / len(active) * 100, 1) if active else 0
    pass_rate = round(by_stage[Stage.PASSED.value] / total * 100, 1) if total else 0

    return {
        "total_deals": total,
        "active_pipeline": len(active),
        "conversion_rate": conversion,
        "avg_score": _avg_score(active),
        "pass_rate": pass_rate,
        "by_stage": by_stage,
        "tag_distribution": tag_distribution,
        "score_distribution": score_buckets,
        "health_distribution": _stale_counts(active, today, thresholds),
    }


@dataclass
class Insight:
    """Cross-pipeline observation.

    Attributes:
        category: executive, pipeline, or relationships
        priority: high or medium
        title: Headline
        body: Detail text
    """

    category: str
    priority: str
    title: str
    body: str

    def to_dict(self) -> dict[str, str]:
        return {
            "category": self.category,
            "priority": self.priority,
            "title": self.title,
            "body": self.body,
        }


def generate_insights(
    contacts: Iterable[Contact],
    today: date,
    thresholds: StaleThresholds = DEFAULT_THRESHOLDS,
) -> list[Insight]:
    """Executive summary, bottleneck and at-risk relationship insights."""
    active = [c for c in contacts if not c.is_passed]

    # Insertion order matters: ties for the bottleneck go to the first stage seen
    by_stage: dict[str, int] = {}
    for c in active:
        stage = _stage_value(c.stage)
        by_stage[stage] = by_stage.get(stage, 0) + 1

    stale = [
        (days, c)
        for days, c in ((days_since(c.last_contact, today), c) for c in active)
        if days >= thresholds.warning
    ]

    portfolio = by_stage.get(Stage.PORTFOLIO.value, 0)
    conversion = round(portfolio / len(active) * 100, 1) if active else 0

    insights = [
        Insight(
            category="executive",
            priority="high",
            title="Weekly Executive Summary",
            body=(
                f"{len(active)} active deals, {conversion}% conversion to portfolio. "
                f"Avg score {_avg_score(active)}. {len(stale)} stale relationships."
            ),
        )
    ]

    if by_stage:
        stage, count = max(by_stage.items(), key=lambda item: item[1])
        if count > 1:
            insights.append(
                Insight(
                    category="pipeline",
                    priority="medium",
                    title="Pipeline Bottleneck",
                    body=f"{count} deals stacked in '{stage}' stage.",
                )
            )

    for days, c in stale:
        insights.append(
            Insight(
                category="relationships",
                priority="high",
                title=f"Relationship at Risk: {c.name}",
                body=f"{days} days since last contact. Score {c.score}/100.",
            )
        )

    logger.debug("Insights generated", extra={"context": {"count": len(insights)}})
    return insights
