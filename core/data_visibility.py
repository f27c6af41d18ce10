# core/data_visibility.py

"""
Storage and per-caller resolution of role data visibility.

Overrides live in the Supabase table role_data_permissions, one row per
(organization_id, role). Owner and admin are never stored: they always
see every category, and attempts to change them fail before any
backend call.

Unlike the response cache, storage errors here are raised. Callers that
cannot load permissions must hide data, not show it.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from core.config import settings
from core.errors import (
    AuthorizationError,
    PermissionModificationError,
    PermissionStorageError,
    extract_supabase_error,
)
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.data_visibility import (
    ALL_DATA_CATEGORIES,
    CONFIGURABLE_ROLES,
    DEFAULT_ROLE_PERMISSIONS,
    DataCategory,
    RoleDataPermissions,
    UserRole,
    are_all_categories_visible,
    get_visible_categories,
    is_any_category_visible,
    is_category_visible,
    is_field_visible,
    is_privileged,
)

TABLE = "role_data_permissions"


def _require_client():
    client = get_supabase_client()
    if not client:
        raise PermissionStorageError("Supabase client not configured")
    return client


def _storage_error(operation: str, error: Exception) -> PermissionStorageError:
    detail = extract_supabase_error(error)
    logger.error(f"Error {operation}: {detail}")
    return PermissionStorageError(f"Error {operation}: {detail}", cause=error)


def _coerce_role(role) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise ValueError(f"Unknown role: {role}")


def _guard_configurable(role) -> UserRole:
    user_role = _coerce_role(role)
    if user_role not in CONFIGURABLE_ROLES:
        raise PermissionModificationError(user_role.value)
    return user_role


def _map_row(row: Dict[str, Any]) -> RoleDataPermissions:
    try:
        return RoleDataPermissions.from_row(row)
    except Exception as e:
        raise _storage_error("reading role permissions", e) from e


# ============================================================
# STORAGE OPERATIONS
# ============================================================

def fetch_role_permissions(organization_id: str) -> List[RoleDataPermissions]:
    """
    Fetch every stored override for an organization.

    Always reads Supabase: another worker may have changed the mapping.
    Returns an empty list when the organization has none.
    Raises PermissionStorageError if Supabase fails or a row is malformed.
    """
    client = _require_client()
    try:
        result = (
            client.table(TABLE)
            .select("*")
            .eq("organization_id", organization_id)
            .execute()
        )
    except Exception as e:
        raise _storage_error("fetching role permissions", e) from e

    return [_map_row(row) for row in (result.data or [])]


def get_role_permissions(organization_id: str, role) -> List[DataCategory]:
    """
    Visible categories for one role: the stored override when present,
    otherwise the compiled default. Owner/admin skip the lookup.
    """
    user_role = _coerce_role(role)
    if is_privileged(user_role):
        return list(ALL_DATA_CATEGORIES)

    client = _require_client()
    try:
        result = (
            client.table(TABLE)
            .select("visible_categories")
            .eq("organization_id", organization_id)
            .eq("role", user_role.value)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise _storage_error("fetching role permissions", e) from e

    if not result.data:
        return list(DEFAULT_ROLE_PERMISSIONS[user_role])

    row = {"organization_id": organization_id, "role": user_role.value, **result.data[0]}
    return _map_row(row).visible_categories


def update_role_permissions(organization_id: str, role, visible_categories: Iterable) -> None:
    """
    Store an override for an editor or viewer role (upsert).

    Raises PermissionModificationError for owner/admin before touching
    the database.
    """
    user_role = _guard_configurable(role)
    # Validate and de-duplicate, keeping the caller's order
    categories = list(dict.fromkeys(DataCategory(c) for c in visible_categories))

    client = _require_client()
    try:
        (
            client.table(TABLE)
            .upsert(
                {
                    "organization_id": organization_id,
                    "role": user_role.value,
                    "visible_categories": [c.value for c in categories],
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
                on_conflict="organization_id,role",
            )
            .execute()
        )
    except Exception as e:
        raise _storage_error("updating role permissions", e) from e

    logger.info(f"Updated {user_role.value} visibility for organization {organization_id}")


def reset_role_permissions(organization_id: str, role) -> None:
    """
    Delete the override for a role so lookups fall back to defaults.
    Same owner/admin rejection as update_role_permissions.
    """
    user_role = _guard_configurable(role)

    client = _require_client()
    try:
        (
            client.table(TABLE)
            .delete()
            .eq("organization_id", organization_id)
            .eq("role", user_role.value)
            .execute()
        )
    except Exception as e:
        raise _storage_error("resetting role permissions", e) from e

    logger.info(f"Reset {user_role.value} visibility for organization {organization_id}")


def delete_all_role_permissions(organization_id: str) -> None:
    """Drop every override for an organization (e.g. when it is deleted)."""
    client = _require_client()
    try:
        client.table(TABLE).delete().eq("organization_id", organization_id).execute()
    except Exception as e:
        raise _storage_error("deleting role permissions", e) from e


# ============================================================
# PER-CALLER RESOLVER
# ============================================================

class DataVisibility:
    """
    Visibility checks for one user in one organization.

    Permissions load once via load(). Until that succeeds every check
    answers "hidden": a loading or failed resolver never exposes data.
    """

    def __init__(self, organization_id: Optional[str], role, is_admin: bool = False):
        self.organization_id = organization_id
        self.role = role
        self.is_admin = is_admin

        self.permissions: List[RoleDataPermissions] = []
        self.is_loading = True
        self.error: Optional[str] = None
        self._load_failed = False

    @property
    def is_ready(self) -> bool:
        return not self.is_loading and not self._load_failed

    def load(self) -> "DataVisibility":
        if not self.organization_id:
            self.permissions = []
            self.is_loading = False
            return self

        self.is_loading = True
        self.error = None
        # Stays set unless the fetch completes
        self._load_failed = True
        try:
            self.permissions = fetch_role_permissions(self.organization_id)
            self._load_failed = False
        except PermissionStorageError as e:
            logger.error(f"Failed to load data visibility permissions: {e}")
            self.permissions = []
            self.error = str(e)
            self._load_failed = True
        finally:
            self.is_loading = False

        return self

    refresh = load

    # --------------------------------------------------------
    # Checks
    # --------------------------------------------------------
    def can_see_category(self, category) -> bool:
        if not self.is_ready:
            return False
        return is_category_visible(self.permissions, self.role, category)

    def can_see_field(self, field_name: str) -> bool:
        if not self.is_ready:
            return False
        return is_field_visible(
            self.permissions,
            self.role,
            field_name,
            unmapped_visible=settings.DATA_VISIBILITY_UNMAPPED_FIELDS_VISIBLE,
        )

    def can_see_any(self, categories: Iterable) -> bool:
        if not self.is_ready:
            return False
        return is_any_category_visible(self.permissions, self.role, categories)

    def can_see_all(self, categories: Iterable) -> bool:
        if not self.is_ready:
            return False
        return are_all_categories_visible(self.permissions, self.role, categories)

    def get_visible_categories(self) -> List[DataCategory]:
        if not self.is_ready:
            return []
        return get_visible_categories(self.permissions, self.role)

    def filter_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Copy of a show record with hidden fields removed."""
        return {k: v for k, v in record.items() if self.can_see_field(k)}

    # --------------------------------------------------------
    # Admin actions
    # --------------------------------------------------------
    def _require_admin(self, action: str):
        if not self.organization_id or not self.is_admin:
            raise AuthorizationError(f"Not authorized to {action} permissions")

    def update_permissions(self, target_role, categories: Iterable) -> None:
        self._require_admin("update")
        self.error = None
        try:
            update_role_permissions(self.organization_id, target_role, categories)
        except Exception as e:
            self.error = str(e) or "Failed to update permissions"
            raise
        self.load()

    def reset_to_defaults(self, target_role) -> None:
        self._require_admin("reset")
        self.error = None
        try:
            reset_role_permissions(self.organization_id, target_role)
        except Exception as e:
            self.error = str(e) or "Failed to reset permissions"
            raise
        self.load()
