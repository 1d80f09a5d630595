from __future__ import annotations

from typing import Any

PERM_WILDCARD = "*"
PERM_REPORT_WRITE = "report.write"
PERM_REPORT_REVIEW = "report.review"
PERM_CLIENT_WRITE = "client.write"
PERM_IDENTITY_WRITE = "identity.write"

ROLE_ADMIN = "admin"
ROLE_PCO = "pco"
ROLE_BOTH = "both"

ROLE_PERMISSIONS: dict[str, list[str]] = {
    ROLE_ADMIN: [PERM_REPORT_REVIEW, PERM_CLIENT_WRITE, PERM_IDENTITY_WRITE],
    ROLE_PCO: [PERM_REPORT_WRITE],
    ROLE_BOTH: [PERM_REPORT_WRITE, PERM_REPORT_REVIEW, PERM_CLIENT_WRITE, PERM_IDENTITY_WRITE],
}


def permissions_for_role(role: str) -> list[str]:
    return list(ROLE_PERMISSIONS.get(role, []))


def has_permission(claims: dict[str, Any], permission: str) -> bool:
    permissions = claims.get("permissions", [])
    if not isinstance(permissions, list):
        return False
    return permission in permissions or PERM_WILDCARD in permissions


def is_reviewer(claims: dict[str, Any]) -> bool:
    return has_permission(claims, PERM_REPORT_REVIEW)
