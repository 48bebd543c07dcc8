from __future__ import annotations

from typing import Dict, Optional

from moderator.core.errors import ValidationError
from moderator.core.game_config import RuleConfig
from moderator.core.models import ActionKind, GameState, NightAction, Role
from moderator.roles.base import SkillStrategy
from moderator.roles.catalog import get_role


def _assert_kind(skill: SkillStrategy, action: NightAction) -> None:
    if action.kind not in skill.allowed_kinds:
        allowed = ", ".join(sorted(k.value for k in skill.allowed_kinds))
        raise ValidationError(f"{get_role(skill.role).name} cannot {action.kind.value} (allowed: {allowed})")


class _SingleKindSkill(SkillStrategy):
    def validate(self, state: GameState, action: NightAction, rules: RuleConfig) -> None:
        if action.target_id is None:
            return
        _assert_kind(self, action)


class WerewolfSkill(_SingleKindSkill):
    role = Role.WEREWOLF
    allowed_kinds = frozenset({ActionKind.KILL})
    default_kind = ActionKind.KILL


class SeerSkill(_SingleKindSkill):
    role = Role.SEER
    allowed_kinds = frozenset({ActionKind.VIEW})
    default_kind = ActionKind.VIEW


class DoctorSkill(_SingleKindSkill):
    role = Role.DOCTOR
    allowed_kinds = frozenset({ActionKind.PROTECT, ActionKind.HEAL})
    default_kind = ActionKind.PROTECT


class WolfCubSkill(_SingleKindSkill):
    # wakes with the pack; the kill itself belongs to the werewolf turn
    role = Role.WOLF_CUB
    allowed_kinds = frozenset({ActionKind.VIEW})
    default_kind = ActionKind.VIEW


class SpellcasterSkill(_SingleKindSkill):
    role = Role.SPELLCASTER
    allowed_kinds = frozenset({ActionKind.SILENCE})
    default_kind = ActionKind.SILENCE


class BodyguardSkill(SkillStrategy):
    role = Role.BODYGUARD
    allowed_kinds = frozenset({ActionKind.PROTECT})
    default_kind = ActionKind.PROTECT

    def validate(self, state: GameState, action: NightAction, rules: RuleConfig) -> None:
        if action.target_id is None:
            return
        _assert_kind(self, action)
        target = state.get_player(action.target_id)
        if rules.bodyguard_cannot_protect_self and target is not None and target.role == Role.BODYGUARD:
            raise ValidationError("bodyguard cannot protect themselves")


class WitchSkill(SkillStrategy):
    role = Role.WITCH
    allowed_kinds = frozenset({ActionKind.POISON, ActionKind.HEAL})
    default_kind = ActionKind.POISON

    def validate(self, state: GameState, action: NightAction, rules: RuleConfig) -> None:
        if action.target_id is None:
            return
        _assert_kind(self, action)
        if not rules.witch_potions_once_per_game:
            return
        if action.kind == ActionKind.POISON and state.witch_poison_used:
            raise ValidationError("poison potion already used")
        if action.kind == ActionKind.HEAL and state.witch_heal_used:
            raise ValidationError("save potion already used")

    def apply(self, state: GameState, action: NightAction) -> None:
        target = state.get_player(action.target_id)
        # the resolver ignores missing or dead targets, so no potion is spent
        if target is None or not target.alive:
            return
        if action.kind == ActionKind.POISON:
            state.witch_poison_used = True
        elif action.kind == ActionKind.HEAL:
            state.witch_heal_used = True


SKILL_REGISTRY: Dict[Role, SkillStrategy] = {
    Role.WEREWOLF: WerewolfSkill(),
    Role.SEER: SeerSkill(),
    Role.DOCTOR: DoctorSkill(),
    Role.BODYGUARD: BodyguardSkill(),
    Role.WITCH: WitchSkill(),
    Role.WOLF_CUB: WolfCubSkill(),
    Role.SPELLCASTER: SpellcasterSkill(),
}


def default_kind_for(role: Role) -> ActionKind:
    skill = SKILL_REGISTRY.get(role)
    if skill is None:
        raise ValidationError(f"{get_role(role).name} has no night action")
    return skill.default_kind


def build_night_action(role: Role, target_id: Optional[str], kind: Optional[ActionKind] = None) -> NightAction:
    return NightAction(
        role_id=role,
        role_name=get_role(role).name,
        target_id=target_id or None,
        kind=kind or default_kind_for(role),
    )
