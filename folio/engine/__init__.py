"""Engine package - Deal-flow decision logic.

This package contains all business logic:
    - Staleness classification
    - Follow-up policy, queue, stale list and nudges
    - Notification synthesis
    - Agent proposals and execution
    - Pipeline health and analytics
    - Relationship score decay
    - Meeting-prep briefs and memos

Modules:
    - staleness: Days since contact -> staleness level
    - followups: Suggestion and priority ladders, queue ordering
    - notifications: Stale and low-score notifications
    - agent: Propose/execute state machine
    - health: Pipeline health, stage aging, analytics, insights
    - scoring: Time-decayed relationship score
    - briefs: Jinja2 Markdown briefs
"""

from folio.engine.agent import (
    NEXT_STAGE,
    AgentExecutor,
    execute_action,
    propose_actions,
)
from folio.engine.followups import (
    build_follow_up_queue,
    build_nudges,
    evaluate,
    evaluate_follow_up,
    find_stale,
    sort_queue,
)
from folio.engine.notifications import build_notifications
from folio.engine.staleness import (
    DEFAULT_THRESHOLDS,
    StaleThresholds,
    classify,
    classify_staleness,
)

# Names used by the transport layer
propose_agent_actions = propose_actions
execute_agent_action = execute_action

__all__ = [
    # Staleness
    "DEFAULT_THRESHOLDS",
    "StaleThresholds",
    "classify",
    "classify_staleness",
    # Follow-ups
    "evaluate",
    "evaluate_follow_up",
    "build_follow_up_queue",
    "sort_queue",
    "find_stale",
    "build_nudges",
    # Notifications
    "build_notifications",
    # Agent
    "NEXT_STAGE",
    "AgentExecutor",
    "propose_actions",
    "propose_agent_actions",
    "execute_action",
    "execute_agent_action",
]
