"""
DesignOS: Access configuration errors

Raised while the role hierarchy and tab catalog are being built.
Per-request authorization never raises; it returns values.
"""


class AccessConfigError(Exception):
    """Base class for access configuration defects."""
    pass


class UnknownRoleError(AccessConfigError):
    """Raised when a role outside the closed role set is ranked."""

    def __init__(self, role):
        self.role = role
        super().__init__(f"Unknown role: {role!r}")


class RoleHierarchyError(AccessConfigError):
    """Raised when the role set is empty, repeats a role or ties two ranks."""
    pass


class DuplicateTabError(AccessConfigError):
    """Raised when two catalog entries share an id."""

    def __init__(self, tab_id):
        self.tab_id = tab_id
        super().__init__(f"Duplicate tab id: {tab_id!r}")


class InvalidTabError(AccessConfigError):
    """Raised when a catalog entry has no usable route path."""
    pass
