from __future__ import annotations

from typing import Dict

from moderator.core.game_config import TimerSettings
from moderator.core.models import PhaseTimer, TimerPhase


def new_timers(settings: TimerSettings) -> Dict[TimerPhase, PhaseTimer]:
    return {
        TimerPhase.DAY: PhaseTimer(duration=settings.day, remaining=settings.day),
        TimerPhase.NIGHT: PhaseTimer(duration=settings.night, remaining=settings.night),
    }


def start(timer: PhaseTimer) -> None:
    if timer.remaining <= 0:
        timer.remaining = timer.duration
    timer.active = True


def stop(timer: PhaseTimer) -> None:
    timer.active = False


def reset(timer: PhaseTimer, duration: int) -> None:
    timer.duration = duration
    timer.remaining = duration
    timer.active = False


def tick(timer: PhaseTimer) -> bool:
    """Count down one second. True when this tick ran the timer out."""
    if not timer.active:
        return False
    timer.remaining -= 1
    if timer.remaining <= 0:
        timer.remaining = 0
        timer.active = False
        return True
    return False
