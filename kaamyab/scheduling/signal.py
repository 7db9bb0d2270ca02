"""Daily signal classification.

A deterministic banding of the user's current load, not a model. All
cut-offs come from SignalThresholds (configuration), never from literals
in this module.

Bands (checked in order):
- BURNOUT_RISK: missed backlog or today's count at/above its threshold,
  or a smaller backlog with zero recent completions (stalled)
- LIGHT: today's count at/below the light threshold
- NORMAL: everything else
"""

from dataclasses import dataclass
from enum import StrEnum

from kaamyab.config.settings import SignalThresholds


class SignalState(StrEnum):
    LIGHT = "light"
    NORMAL = "normal"
    BURNOUT_RISK = "burnout_risk"


@dataclass(frozen=True)
class LoadIndicators:
    """Inputs to the signal classification.

    Attributes:
        today_count: Tasks selected for today (scheduled or fallback)
        missed_count: Tasks scheduled before today and still not done
        recent_completions: Tasks completed within the velocity lookback window
    """

    today_count: int
    missed_count: int
    recent_completions: int


def classify_signal(indicators: LoadIndicators, thresholds: SignalThresholds) -> SignalState:
    if indicators.missed_count >= thresholds.burnout_missed_tasks:
        return SignalState.BURNOUT_RISK
    if indicators.today_count >= thresholds.burnout_today_tasks:
        return SignalState.BURNOUT_RISK
    if indicators.missed_count >= thresholds.stalled_missed_tasks and indicators.recent_completions == 0:
        return SignalState.BURNOUT_RISK
    if indicators.today_count <= thresholds.light_max_tasks:
        return SignalState.LIGHT
    return SignalState.NORMAL


def focus_count_for(signal: SignalState, today_count: int, thresholds: SignalThresholds) -> int:
    """How many incomplete tasks to emphasize.

    Burnout risk compresses the window; a light day focuses on whatever
    it has; a normal day allows the full window.
    """
    if signal == SignalState.BURNOUT_RISK:
        return thresholds.focus_count_burnout
    if signal == SignalState.LIGHT:
        return min(today_count, thresholds.focus_count_normal)
    return thresholds.focus_count_normal


def headline_for(signal: SignalState, missed_count: int) -> str:
    if missed_count > 0:
        return "Let's clear the backlog first"
    if signal == SignalState.LIGHT:
        return "Light focus today"
    if signal == SignalState.BURNOUT_RISK:
        return "One thing at a time"
    return "Focused work ahead"


def subtext_for(signal: SignalState, missed_count: int, today_count: int) -> str:
    if missed_count > 0:
        return "Tackle overdue tasks first to get back on track."
    if signal == SignalState.LIGHT:
        if today_count <= 2:
            return "Just a couple of tasks today, quality over quantity."
        return "Fewer tasks highlighted to protect your focus."
    if signal == SignalState.BURNOUT_RISK:
        return "Your load is heavy. Finish one task before looking at the rest."
    return "Steady progress leads to great results."
