import pytest

from core.rbac import RoleHierarchy, RoleHierarchyError, UnknownRoleError


def test_rank_is_total_and_injective(hierarchy):
    ranks = [hierarchy.rank(role) for role in hierarchy.roles]
    assert len(set(ranks)) == len(hierarchy.roles)
    assert ranks == sorted(ranks)


def test_rank_follows_declared_order(hierarchy):
    assert hierarchy.rank("viewer") < hierarchy.rank("producer")
    assert hierarchy.rank("core") < hierarchy.rank("admin")
    assert hierarchy.highest == "admin"


def test_rank_unknown_role_raises(hierarchy):
    with pytest.raises(UnknownRoleError) as exc:
        hierarchy.rank("guest")
    assert exc.value.role == "guest"


def test_rank_none_raises(hierarchy):
    with pytest.raises(UnknownRoleError):
        hierarchy.rank(None)


@pytest.mark.parametrize("role, minimum, expected", [
    ("admin", "viewer", True),
    ("producer", "producer", True),
    ("viewer", "core", False),
    ("core", "admin", False),
])
def test_is_at_least(hierarchy, role, minimum, expected):
    assert hierarchy.is_at_least(role, minimum) is expected


def test_is_at_least_propagates_unknown_role(hierarchy):
    with pytest.raises(UnknownRoleError):
        hierarchy.is_at_least("guest", "viewer")


def test_at_least_lists_roles_from_floor(hierarchy):
    assert hierarchy.at_least("producer") == ("producer", "core", "admin")
    assert hierarchy.at_least("viewer") == hierarchy.roles


def test_highest_of(hierarchy):
    assert hierarchy.highest_of(["viewer", "core", "producer"]) == "core"
    with pytest.raises(ValueError):
        hierarchy.highest_of([])


def test_from_ranks_sorts_by_rank():
    hierarchy = RoleHierarchy.from_ranks({"admin": 30, "viewer": 0, "producer": 10})
    assert hierarchy.roles == ("viewer", "producer", "admin")


def test_from_ranks_rejects_ties():
    with pytest.raises(RoleHierarchyError):
        RoleHierarchy.from_ranks({"viewer": 1, "producer": 1})


def test_duplicate_role_rejected():
    with pytest.raises(RoleHierarchyError):
        RoleHierarchy(["viewer", "admin", "viewer"])


def test_empty_hierarchy_rejected():
    with pytest.raises(RoleHierarchyError):
        RoleHierarchy([])
