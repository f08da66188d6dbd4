"""
Authorization feature module.

Implements the static role-permission table and the two-level organization
scoping rules that gate access to tasks, organizations and audit history.
"""
