from __future__ import annotations

from abc import ABC
from typing import Dict, FrozenSet

from moderator.core.models import Phase


class BasePhaseState(ABC):
    phase: Phase
    next_phases: FrozenSet[Phase] = frozenset()

    def can_transition_to(self, target: Phase) -> bool:
        # reset is always legal
        return target == Phase.SETUP or target in self.next_phases


class SetupState(BasePhaseState):
    phase = Phase.SETUP
    next_phases = frozenset({Phase.ROLE_REVEAL})


class RoleRevealState(BasePhaseState):
    phase = Phase.ROLE_REVEAL
    next_phases = frozenset({Phase.NIGHT})


class NightState(BasePhaseState):
    phase = Phase.NIGHT
    next_phases = frozenset({Phase.DAY, Phase.RESULT})


class DayState(BasePhaseState):
    phase = Phase.DAY
    next_phases = frozenset({Phase.NIGHT, Phase.RESULT})


class ResultState(BasePhaseState):
    phase = Phase.RESULT


STATE_REGISTRY: Dict[Phase, BasePhaseState] = {
    Phase.SETUP: SetupState(),
    Phase.ROLE_REVEAL: RoleRevealState(),
    Phase.NIGHT: NightState(),
    Phase.DAY: DayState(),
    Phase.RESULT: ResultState(),
}
