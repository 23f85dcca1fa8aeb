"""Record-level permission checks.

Permissions come from the user's position as (module, action) pairs,
e.g. ("form_records", "write"). Deleting needs the module's ``delete``
action; editing needs ``write``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

FORM_RECORDS_MODULE = "form_records"


class PermissionDenied(Exception):
    """Raised when a user may not edit or delete a record."""


@dataclass(frozen=True)
class PermissionCheck:
    allowed: bool
    is_admin: bool
    is_owner: bool
    error: Optional[str] = None


def has_permission(permissions: Iterable[tuple[str, str]], module: str, action: str) -> bool:
    return (module, action) in set(permissions)


def check_record_permission(
    permissions: Iterable[tuple[str, str]],
    user_id: str,
    record_created_by: Optional[str],
    action: str = "edit",
    module: str = FORM_RECORDS_MODULE,
) -> PermissionCheck:
    if action not in ("edit", "delete"):
        raise ValueError(f"Unknown record action '{action}'")

    permissions = set(permissions)
    is_owner = record_created_by is not None and record_created_by == user_id
    perm_action = "delete" if action == "delete" else "write"

    if has_permission(permissions, module, perm_action):
        return PermissionCheck(allowed=True, is_admin=True, is_owner=is_owner)

    return PermissionCheck(
        allowed=False,
        is_admin=False,
        is_owner=is_owner,
        error=f"You do not have permission to {action} this record",
    )


def require_permission(
    permissions: Iterable[tuple[str, str]],
    user_id: str,
    record_created_by: Optional[str],
    action: str = "edit",
    module: str = FORM_RECORDS_MODULE,
) -> PermissionCheck:
    check = check_record_permission(permissions, user_id, record_created_by, action, module)
    if not check.allowed:
        raise PermissionDenied(check.error)
    return check
