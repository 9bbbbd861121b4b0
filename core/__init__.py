"""
Core package for DesignOS.

Contains the access-control logic, independent of the web layer:
- rbac: role hierarchy, tab catalog, permission resolver
- session: per-session gate and its grace-period timer
"""
