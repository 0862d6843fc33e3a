# backend/mentorbook/domain/__init__.py
"""Pure scheduling primitives: intervals and weekly rule evaluation."""

from .interval import Interval
from .weekly_rule import TIME_RE, WeeklyRule, WeeklyRuleEvaluator, to_minutes

__all__ = ["Interval", "TIME_RE", "WeeklyRule", "WeeklyRuleEvaluator", "to_minutes"]
