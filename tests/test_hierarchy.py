from __future__ import annotations

import pytest

from orgsync.errors import CyclicHierarchyError, GithubApiError, NotFoundError
from orgsync.github.models import GithubTeam, TeamParent
from orgsync.sync.hierarchy import HierarchyReconciler

from conftest import FakeGithubClient, make_chart, make_state


def _tree():
    return make_chart(
        teams=[
            {"id": "root", "name": "Root"},
            {"id": "mid", "name": "Mid", "parent": "root"},
            {"id": "leaf", "name": "Leaf", "parent": "mid"},
        ],
        employees=[],
    )


def test_creates_parents_before_children(client):
    state = make_state()
    rec = HierarchyReconciler(_tree(), state, client)
    leaf = rec.create_team_if_missing("leaf")

    assert [c[1] for c in client.ops("create_team")] == ["org-root", "org-mid", "org-leaf"]
    root_id = state.teams["org-root"].id
    mid_id = state.teams["org-mid"].id
    assert client.ops("create_team")[0][2] is None
    assert client.ops("create_team")[1][2] == root_id
    assert client.ops("create_team")[2][2] == mid_id
    assert all(c[3] == "closed" for c in client.ops("create_team"))
    assert leaf.parent_name == "org-mid"
    assert [t.name for t in state.result.created_teams] == ["org-root", "org-mid", "org-leaf"]


def test_create_is_idempotent(client):
    state = make_state()
    rec = HierarchyReconciler(_tree(), state, client)
    first = rec.create_team_if_missing("leaf")
    calls = list(client.calls)
    second = rec.create_team_if_missing("leaf")
    rec.create_team_if_missing("mid")
    assert second is first
    assert client.calls == calls


def test_existing_team_with_matching_parent_is_left_alone(client):
    root = client.register(GithubTeam(id=1, name="org-root"))
    mid = client.register(GithubTeam(id=2, name="org-mid", parent=TeamParent(id=1, name="org-root")))
    state = make_state(teams=[root, mid])
    rec = HierarchyReconciler(_tree(), state, client)
    assert rec.create_team_if_missing("mid") is mid
    assert client.calls == []


def test_existing_team_with_wrong_parent_is_edited(client):
    root = client.register(GithubTeam(id=1, name="org-root"))
    other = client.register(GithubTeam(id=9, name="org-other"))
    mid = client.register(GithubTeam(id=2, name="org-mid", parent=TeamParent(id=9, name="org-other")))
    state = make_state(teams=[root, other, mid])
    rec = HierarchyReconciler(_tree(), state, client)

    edited = rec.create_team_if_missing("mid")

    assert client.ops("edit_team") == [("edit_team", "org-mid", 1, "closed")]
    assert edited.parent_name == "org-root"
    assert state.teams["org-mid"] is edited
    assert state.result.edited_teams == [edited]
    # a second pass sees the corrected parent
    rec.create_team_if_missing("mid")
    assert len(client.ops("edit_team")) == 1


def test_existing_child_without_parent_gets_parent(client):
    mid = client.register(GithubTeam(id=2, name="org-mid"))
    state = make_state(teams=[mid])
    rec = HierarchyReconciler(_tree(), state, client)
    rec.create_team_if_missing("mid")
    assert [c[1] for c in client.ops("create_team")] == ["org-root"]
    assert [c[1] for c in client.ops("edit_team")] == ["org-mid"]


def test_dry_run_makes_no_calls_but_updates_snapshot(client):
    other = GithubTeam(id=9, name="org-other")
    mid = GithubTeam(id=2, name="org-mid", parent=TeamParent(id=9, name="org-other"))
    state = make_state(teams=[other, mid], dry=True)
    rec = HierarchyReconciler(_tree(), state, client)

    rec.create_team_if_missing("leaf")

    assert client.calls == []
    assert state.teams["org-root"].id is None
    assert state.teams["org-mid"].parent_name == "org-root"
    assert state.teams["org-leaf"].parent_name == "org-mid"
    assert [t.name for t in state.result.created_teams] == ["org-root", "org-leaf"]
    assert [t.name for t in state.result.edited_teams] == ["org-mid"]


def test_unknown_team_raises(client):
    rec = HierarchyReconciler(_tree(), make_state(), client)
    with pytest.raises(NotFoundError):
        rec.create_team_if_missing("ghost")


def test_unknown_parent_raises(client):
    chart = make_chart(teams=[{"id": "orphan", "name": "Orphan", "parent": "ghost"}], employees=[])
    rec = HierarchyReconciler(chart, make_state(), client)
    with pytest.raises(NotFoundError):
        rec.create_team_if_missing("orphan")
    assert client.calls == []


def test_cyclic_hierarchy_raises(client):
    chart = make_chart(
        teams=[
            {"id": "a", "name": "A", "parent": "b"},
            {"id": "b", "name": "B", "parent": "a"},
        ],
        employees=[],
    )
    rec = HierarchyReconciler(chart, make_state(), client)
    with pytest.raises(CyclicHierarchyError) as excinfo:
        rec.create_team_if_missing("a")
    assert excinfo.value.path == ["a", "b", "a"]
    assert client.calls == []


def test_remove_team_records_and_evicts(client):
    legacy = GithubTeam(id=5, name="org-legacy")
    state = make_state(teams=[legacy])
    HierarchyReconciler(_tree(), state, client).remove_team(legacy)
    assert client.ops("delete_team") == [("delete_team", 5)]
    assert state.result.removed_teams == [legacy]
    assert "org-legacy" not in state.teams


def test_remove_team_failure_propagates_by_default():
    client = FakeGithubClient(fail_on={"delete_team": 5})
    legacy = GithubTeam(id=5, name="org-legacy")
    state = make_state(teams=[legacy])
    with pytest.raises(GithubApiError):
        HierarchyReconciler(_tree(), state, client).remove_team(legacy)
    assert state.result.removed_teams == []
    assert "org-legacy" in state.teams


def test_remove_team_failure_ignored_when_lenient():
    client = FakeGithubClient(fail_on={"delete_team": 5})
    legacy = GithubTeam(id=5, name="org-legacy")
    state = make_state(teams=[legacy])
    HierarchyReconciler(_tree(), state, client, delete_failure="ignore").remove_team(legacy)
    assert state.result.removed_teams == [legacy]
    assert "org-legacy" not in state.teams


def test_unknown_delete_policy_rejected(client):
    with pytest.raises(ValueError):
        HierarchyReconciler(_tree(), make_state(), client, delete_failure="retry")


def test_root_reset_removes_roots_and_clears_snapshot(client):
    root = GithubTeam(id=1, name="org-root")
    mid = GithubTeam(id=2, name="org-mid", parent=TeamParent(id=1, name="org-root"))
    state = make_state(teams=[root, mid])
    rec = HierarchyReconciler(_tree(), state, client)

    removed = rec.reset_root_teams()

    assert removed == [root]
    assert client.ops("delete_team") == [("delete_team", 1)]
    assert state.teams == {}


def test_root_reset_is_noop_without_roots_in_github(client):
    mid = GithubTeam(id=2, name="org-mid")
    state = make_state(teams=[mid])
    assert HierarchyReconciler(_tree(), state, client).reset_root_teams() == []
    assert state.teams == {"org-mid": mid}
    assert client.calls == []
