from __future__ import annotations

import random

from moderator.core.models import ActionKind, NoticeLevel, Phase, PlayerStatus, Role, Winner
from moderator.engine.game_engine import ModeratorEngine


def _make_revealed_game(*roles: Role) -> tuple[ModeratorEngine, dict[str, str]]:
    engine = ModeratorEngine(rng=random.Random(7))
    for i in range(1, len(roles) + 1):
        assert engine.add_player(f"P{i}")
    assert engine.set_custom_roles(list(roles))
    assert engine.assign_roles_and_start()

    # force deterministic roles for test readability
    for player, role in zip(engine.players, roles):
        player.role = role
    for player in engine.players:
        assert engine.view_role(player.player_id) == player.role

    return engine, {p.name: p.player_id for p in engine.players}


def _act(engine: ModeratorEngine, role: Role, target_id: str | None, kind: ActionKind | None = None) -> bool:
    action = engine.build_night_action(role, target_id, kind)
    assert action is not None
    return engine.perform_night_action(action)


def _last_error(engine: ModeratorEngine) -> str:
    errors = [n for n in engine.notices if n.level == NoticeLevel.ERROR]
    assert errors
    return errors[-1].message


def test_five_player_first_night_ends_in_werewolf_win() -> None:
    engine = ModeratorEngine(rng=random.Random(7))
    for i in range(1, 6):
        assert engine.add_player(f"P{i}")
    assert engine.selected_roles == engine.recommend_roles()
    assert engine.selected_roles == [Role.WEREWOLF, Role.WEREWOLF, Role.VILLAGER, Role.VILLAGER, Role.SEER]

    assert engine.assign_roles_and_start()
    for player in engine.players:
        assert engine.view_role(player.player_id) == player.role
    villagers = [p.player_id for p in engine.players if p.role == Role.VILLAGER]

    assert engine.start_night_phase()
    assert engine.phase == Phase.NIGHT
    assert engine.night_queue == [Role.SEER, Role.WEREWOLF]

    assert _act(engine, Role.SEER, villagers[0])
    assert _act(engine, Role.WEREWOLF, villagers[1])

    victim = engine.state.get_player(villagers[1])
    assert victim.status == PlayerStatus.DEAD
    assert engine.eliminated_last_night == [villagers[1]]
    assert engine.winner == Winner.WEREWOLVES
    assert engine.phase == Phase.RESULT


def test_protected_player_survives_the_night() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.SEER, Role.DOCTOR, Role.WITCH, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    assert engine.night_queue == [Role.SEER, Role.WEREWOLF, Role.DOCTOR, Role.WITCH]

    assert engine.skip_night_role()
    assert _act(engine, Role.WEREWOLF, ids["P5"])
    assert _act(engine, Role.DOCTOR, ids["P5"])
    assert engine.skip_night_role()

    assert engine.phase == Phase.DAY
    assert engine.eliminated_last_night == []
    assert engine.state.get_player(ids["P5"]).alive
    assert engine.notices[-1].message == "Night phase is complete. The village awakens..."


def test_out_of_turn_action_is_rejected_without_side_effects() -> None:
    engine, ids = _make_revealed_game(Role.WEREWOLF, Role.WEREWOLF, Role.VILLAGER, Role.VILLAGER, Role.SEER)
    engine.start_night_phase()

    assert _act(engine, Role.WEREWOLF, ids["P3"]) is False

    assert "turn" in _last_error(engine)
    assert engine.current_night_role == Role.SEER
    assert engine.night_actions == []


def test_disallowed_action_kind_is_rejected() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.SEER, Role.DOCTOR, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()

    assert engine.current_night_role == Role.DOCTOR
    assert _act(engine, Role.DOCTOR, ids["P4"], ActionKind.KILL) is False
    assert "cannot kill" in _last_error(engine)


def test_completing_early_skips_remaining_roles() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.SEER, Role.DOCTOR, Role.WITCH, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    _act(engine, Role.WEREWOLF, ids["P5"])

    assert engine.complete_night_phase()
    assert engine.eliminated_last_night == [ids["P5"]]
    assert engine.phase == Phase.DAY
    assert engine.complete_night_phase() is False


def test_one_vote_elimination_per_day() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.complete_night_phase()
    assert engine.start_day_phase()

    assert engine.eliminate_player(ids["P3"])
    assert engine.eliminate_player(ids["P4"]) is False
    assert "already eliminated someone today" in _last_error(engine)
    assert engine.state.get_player(ids["P4"]).alive


def test_unknown_player_is_a_silent_miss() -> None:
    engine, _ = _make_revealed_game(Role.WEREWOLF, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER)
    engine.start_night_phase()
    engine.complete_night_phase()
    before = engine.last_notice_id

    assert engine.eliminate_player("ghost") is False
    assert engine.notices_since(before) == []


def test_voting_out_last_werewolf_ends_game() -> None:
    engine, ids = _make_revealed_game(Role.WEREWOLF, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER)
    engine.start_night_phase()
    engine.complete_night_phase()

    assert engine.eliminate_player(ids["P1"])
    assert engine.winner == Winner.VILLAGERS
    assert engine.phase == Phase.RESULT


def test_hunter_shoots_after_night_death() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.SEER, Role.HUNTER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    _act(engine, Role.WEREWOLF, ids["P3"])

    assert engine.phase == Phase.DAY
    assert engine.state.round_context.pending_hunter_id == ids["P3"]
    assert engine.hunter_shoot(ids["P1"])
    assert engine.winner == Winner.VILLAGERS
    assert engine.phase == Phase.RESULT


def test_poisoned_hunter_cannot_shoot() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.WITCH, Role.HUNTER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    _act(engine, Role.WITCH, ids["P3"], ActionKind.POISON)

    assert engine.phase == Phase.DAY
    assert engine.state.round_context.pending_hunter_id is None
    assert engine.hunter_shoot(ids["P1"]) is False
    assert "No hunter" in _last_error(engine)


def test_wolf_cub_death_gives_extra_kill_next_night() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF,
        Role.WOLF_CUB,
        Role.SEER,
        Role.VILLAGER,
        Role.VILLAGER,
        Role.VILLAGER,
        Role.VILLAGER,
        Role.VILLAGER,
    )
    engine.start_night_phase()
    assert engine.night_queue == [Role.SEER, Role.WEREWOLF, Role.WOLF_CUB]
    engine.complete_night_phase()

    assert engine.eliminate_player(ids["P2"])
    assert engine.state.round_context.wolf_bonus_kills == 1

    engine.start_night_phase()
    assert engine.night_queue == [Role.SEER, Role.WEREWOLF, Role.WEREWOLF]
    engine.skip_night_role()
    _act(engine, Role.WEREWOLF, ids["P5"])
    _act(engine, Role.WEREWOLF, ids["P6"])

    assert engine.eliminated_last_night == [ids["P5"], ids["P6"]]
    assert engine.phase == Phase.DAY
    assert engine.state.round_context.wolf_bonus_kills == 0


def test_witch_potions_are_used_once() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.WITCH, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()
    _act(engine, Role.WITCH, ids["P4"], ActionKind.POISON)
    assert engine.state.witch_poison_used

    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()
    assert _act(engine, Role.WITCH, ids["P5"], ActionKind.POISON) is False
    assert "poison potion already used" in _last_error(engine)
    assert _act(engine, Role.WITCH, ids["P5"], ActionKind.HEAL)
    assert engine.state.witch_heal_used


def test_witch_keeps_potion_when_target_is_missing() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.WITCH, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()

    assert _act(engine, Role.WITCH, "ghost", ActionKind.POISON)
    assert engine.phase == Phase.DAY
    assert engine.eliminated_last_night == []
    assert engine.state.witch_poison_used is False

    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()
    assert _act(engine, Role.WITCH, ids["P4"], ActionKind.POISON)
    assert engine.state.witch_poison_used
    assert engine.eliminated_last_night == [ids["P4"]]


def test_bodyguard_cannot_protect_self() -> None:
    engine, ids = _make_revealed_game(Role.WEREWOLF, Role.BODYGUARD, Role.SEER, Role.VILLAGER, Role.VILLAGER)
    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()

    assert _act(engine, Role.BODYGUARD, ids["P2"]) is False
    assert _act(engine, Role.BODYGUARD, ids["P3"])
    assert engine.phase == Phase.DAY


def test_silence_lasts_until_next_night() -> None:
    engine, ids = _make_revealed_game(
        Role.WEREWOLF, Role.SPELLCASTER, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER
    )
    engine.start_night_phase()
    engine.skip_night_role()
    engine.skip_night_role()
    _act(engine, Role.SPELLCASTER, ids["P4"])

    assert engine.phase == Phase.DAY
    assert engine.state.get_player(ids["P4"]).silenced

    engine.start_night_phase()
    assert not engine.state.get_player(ids["P4"]).silenced


def test_night_without_night_roles_resolves_immediately() -> None:
    engine, _ = _make_revealed_game(Role.VILLAGER, Role.VILLAGER, Role.HUNTER, Role.VILLAGER, Role.VILLAGER)

    assert engine.start_night_phase()
    assert engine.night_queue == []
    assert engine.phase == Phase.RESULT
    assert engine.winner == Winner.VILLAGERS


def test_phase_guards_reject_out_of_order_calls() -> None:
    engine = ModeratorEngine()

    assert engine.start_day_phase() is False
    assert engine.start_night_phase() is False
    assert engine.complete_night_phase() is False
    assert engine.phase == Phase.SETUP


def test_reset_keeps_players_and_clears_game() -> None:
    engine, ids = _make_revealed_game(Role.WEREWOLF, Role.WEREWOLF, Role.VILLAGER, Role.VILLAGER, Role.SEER)
    engine.start_night_phase()
    engine.skip_night_role()
    _act(engine, Role.WEREWOLF, ids["P4"])
    assert engine.phase == Phase.RESULT

    assert engine.reset_game()

    assert engine.phase == Phase.SETUP
    assert engine.winner is None
    assert engine.state.custom_roles is None
    assert [p.player_id for p in engine.players] == list(ids.values())
    assert all(p.role is None and p.alive for p in engine.players)
    assert engine.eliminated_last_night == []


def test_hooks_fire_on_phase_change_and_death() -> None:
    engine, ids = _make_revealed_game(Role.WEREWOLF, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER)
    phases: list[Phase] = []
    deaths: list[str] = []
    engine.register_hook("on_phase_start", lambda state: phases.append(state.phase))
    engine.register_hook("on_player_death", lambda player: deaths.append(player.player_id))

    engine.start_night_phase()
    engine.skip_night_role()
    _act(engine, Role.WEREWOLF, ids["P3"])

    assert phases == [Phase.NIGHT, Phase.DAY]
    assert deaths == [ids["P3"]]
