"""
DesignOS: Role Hierarchy

Total order over the closed role set.
Higher rank means more privilege; no two roles share a rank.
"""

from typing import Dict, Iterable, Mapping, Tuple

from core.rbac.errors import RoleHierarchyError, UnknownRoleError


class RoleHierarchy:

    def __init__(self, roles: Iterable[str]):
        """
        Args:
            roles: role identifiers ordered from least to most privileged
        """

        ordered = tuple(roles)

        if not ordered:
            raise RoleHierarchyError("Role hierarchy needs at least one role")

        ranks: Dict[str, int] = {}
        for position, role in enumerate(ordered):
            if not isinstance(role, str) or not role:
                raise RoleHierarchyError(f"Invalid role identifier: {role!r}")
            if role in ranks:
                raise RoleHierarchyError(f"Role listed twice: {role!r}")
            ranks[role] = position

        self._roles: Tuple[str, ...] = ordered
        self._ranks = ranks

    @classmethod
    def from_ranks(cls, ranks: Mapping[str, int]) -> "RoleHierarchy":
        """
        Build from an explicit role -> rank mapping.
        Ranks only need to be distinct; gaps are allowed.
        """

        seen: Dict[int, str] = {}
        for role, value in ranks.items():
            if value in seen:
                raise RoleHierarchyError(
                    f"Roles {seen[value]!r} and {role!r} share rank {value}"
                )
            seen[value] = role

        return cls(role for _, role in sorted(seen.items()))

    # =====================================================
    # QUERIES
    # =====================================================

    @property
    def roles(self) -> Tuple[str, ...]:
        return self._roles

    @property
    def highest(self) -> str:
        return self._roles[-1]

    def __contains__(self, role) -> bool:
        return role in self._ranks

    def __iter__(self):
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def rank(self, role: str) -> int:
        try:
            return self._ranks[role]
        except (KeyError, TypeError):
            raise UnknownRoleError(role) from None

    def is_at_least(self, role: str, minimum: str) -> bool:
        return self.rank(role) >= self.rank(minimum)

    def at_least(self, minimum: str) -> Tuple[str, ...]:
        floor = self.rank(minimum)
        return self._roles[floor:]

    def highest_of(self, roles: Iterable[str]) -> str:
        candidates = list(roles)
        if not candidates:
            raise ValueError("Cannot pick the highest role of an empty set")
        return max(candidates, key=self.rank)

    def __repr__(self) -> str:
        return f"RoleHierarchy({list(self._roles)!r})"
