import random
from collections import Counter

import pytest

from moderator.core.errors import RoleCountMismatch
from moderator.core.models import Player, Role
from moderator.engine.role_assignment import RoleSelection, assign_roles, count_roles, recommend_roles


def _make_players(count: int) -> list[Player]:
    return [Player(player_id=f"p{i}", name=f"P{i}") for i in range(1, count + 1)]


@pytest.mark.parametrize("count", range(5, 41))
def test_recommendation_length_matches_player_count(count: int) -> None:
    roles = recommend_roles(count)

    assert len(roles) == count
    assert Role.WEREWOLF in roles


@pytest.mark.parametrize("count", range(1, 41))
def test_formula_length_matches_without_curated_table(count: int) -> None:
    assert len(recommend_roles(count, table={})) == count


def test_recommendation_for_empty_table_is_empty() -> None:
    assert recommend_roles(0) == []
    assert recommend_roles(-3) == []


def test_curated_sets_are_used_for_small_games() -> None:
    assert recommend_roles(5) == [Role.WEREWOLF, Role.WEREWOLF, Role.VILLAGER, Role.VILLAGER, Role.SEER]
    assert Counter(recommend_roles(12))[Role.BODYGUARD] == 1
    assert Role.WITCH in recommend_roles(15)


def test_formula_unlocks_special_roles_by_size() -> None:
    roles = recommend_roles(16, table={})
    counts = Counter(roles)

    assert counts[Role.WEREWOLF] == 5
    for role in (Role.SEER, Role.DOCTOR, Role.WITCH, Role.BODYGUARD, Role.SPELLCASTER):
        assert counts[role] == 1
    assert counts[Role.VILLAGER] == 6


def test_curated_entry_of_wrong_length_is_fitted() -> None:
    table = {6: [Role.WEREWOLF, Role.SEER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER, Role.VILLAGER, Role.DOCTOR]}

    roles = recommend_roles(6, table=table)

    assert len(roles) == 6
    assert Counter(roles)[Role.VILLAGER] == 3


def test_assignment_is_a_permutation_of_the_role_list() -> None:
    players = _make_players(8)
    roles = recommend_roles(8)

    assigned = assign_roles(players, roles, random.Random(3))

    assert Counter(p.role for p in assigned) == Counter(roles)
    assert [p.player_id for p in assigned] == [p.player_id for p in players]
    assert all(p.role is None for p in players)


def test_assignment_is_reproducible_with_seed() -> None:
    players = _make_players(10)
    roles = recommend_roles(10)

    first = assign_roles(players, roles, random.Random(42))
    second = assign_roles(players, roles, random.Random(42))

    assert [p.role for p in first] == [p.role for p in second]


def test_assignment_rejects_mismatched_role_count() -> None:
    with pytest.raises(RoleCountMismatch) as excinfo:
        assign_roles(_make_players(5), [Role.WEREWOLF, Role.VILLAGER])

    assert excinfo.value.expected == 5
    assert excinfo.value.got == 2
    assert "must match the number of players" in str(excinfo.value)


def test_count_roles_follows_catalog_order() -> None:
    counts = count_roles([Role.SEER, Role.VILLAGER, Role.WEREWOLF, Role.VILLAGER])

    assert list(counts) == [Role.WEREWOLF, Role.VILLAGER, Role.SEER]
    assert counts[Role.VILLAGER] == 2


def test_selection_add_at_capacity_replaces_a_villager() -> None:
    selection = RoleSelection(capacity=5, roles=recommend_roles(5))

    selection.add(Role.WITCH)

    assert selection.total == 5
    assert selection.counts()[Role.VILLAGER] == 1
    assert Role.WITCH in selection.roles


def test_selection_add_without_villagers_drops_oldest() -> None:
    selection = RoleSelection(capacity=2, roles=[Role.WEREWOLF, Role.SEER])

    selection.add(Role.DOCTOR)

    assert selection.roles == [Role.SEER, Role.DOCTOR]


def test_selection_remove_pads_with_villager() -> None:
    selection = RoleSelection(capacity=5, roles=recommend_roles(5))

    assert selection.remove(Role.SEER) is True
    assert selection.is_complete
    assert selection.counts()[Role.VILLAGER] == 3
    assert selection.remove(Role.WITCH) is False


def test_selection_reconciles_to_new_capacity() -> None:
    selection = RoleSelection(capacity=5, roles=recommend_roles(5))
    selection.capacity = 7

    assert len(selection.reconciled()) == 7
    selection.capacity = 4
    assert Counter(selection.reconciled())[Role.VILLAGER] == 1
