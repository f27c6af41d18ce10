# routers/data_visibility.py

from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.data_visibility import (
    DataVisibility,
    fetch_role_permissions,
    reset_role_permissions,
    update_role_permissions,
)
from core.errors import (
    PermissionModificationError,
    PermissionStorageError,
    handle_supabase_error,
)
from core.logging_config import logger
from dependencies.auth import (
    CurrentUser,
    get_current_user,
    require_org_admin,
    require_org_member,
)
from models.data_visibility import (
    CONFIGURABLE_ROLES,
    DATA_CATEGORY_INFO,
    CategoryInfo,
    DataCategory,
    UserRole,
    get_visible_categories,
    is_privileged,
)

router = APIRouter(
    prefix="/data-visibility",
    tags=["Data Visibility"],
)


# ============================================================
# Pydantic Models
# ============================================================
class RolePermissionsUpdate(BaseModel):
    visible_categories: List[DataCategory]


class RoleVisibilityRead(BaseModel):
    role: UserRole
    visible_categories: List[DataCategory]
    is_custom: bool
    configurable: bool
    updated_at: Optional[datetime] = None


class MyVisibilityRead(BaseModel):
    organization_id: Optional[str] = None
    role: Optional[UserRole] = None
    visible_categories: List[DataCategory]


def _role_rows(organization_id: str) -> List[RoleVisibilityRead]:
    try:
        stored = fetch_role_permissions(organization_id)
    except PermissionStorageError as e:
        raise handle_supabase_error(e, "Fetch role permissions")

    by_role = {p.role: p for p in stored}
    rows = []
    for role in UserRole:
        override = None if is_privileged(role) else by_role.get(role)
        rows.append(RoleVisibilityRead(
            role=role,
            visible_categories=get_visible_categories(stored, role),
            is_custom=override is not None,
            configurable=role in CONFIGURABLE_ROLES,
            updated_at=override.updated_at if override else None,
        ))
    return rows


# ============================================================
# GET /data-visibility/categories
# ============================================================
@router.get(
    "/categories",
    summary="List data categories",
    response_model=Dict[DataCategory, CategoryInfo],
)
def list_categories(current_user: CurrentUser = Depends(get_current_user)):
    return DATA_CATEGORY_INFO


# ============================================================
# GET /data-visibility/me
# ============================================================
@router.get(
    "/me",
    summary="Categories visible to the current user",
    response_model=MyVisibilityRead,
)
def my_visibility(current_user: CurrentUser = Depends(get_current_user)):
    visibility = DataVisibility(
        current_user.organization_id,
        current_user.role,
        is_admin=current_user.is_org_admin,
    ).load()

    # Fail closed: an unknown state must not render data
    if visibility.error:
        raise HTTPException(500, "Failed to load data visibility permissions")

    return MyVisibilityRead(
        organization_id=current_user.organization_id,
        role=current_user.role,
        visible_categories=visibility.get_visible_categories(),
    )


# ============================================================
# GET /data-visibility/organizations/{organization_id}/roles
# ============================================================
@router.get(
    "/organizations/{organization_id}/roles",
    summary="Effective visibility for every role",
    response_model=List[RoleVisibilityRead],
)
def list_role_visibility(
    organization_id: str,
    current_user: CurrentUser = Depends(get_current_user),
):
    require_org_member(current_user, organization_id)
    return _role_rows(organization_id)


# ============================================================
# PUT /data-visibility/organizations/{organization_id}/roles/{role}
# ============================================================
@router.put(
    "/organizations/{organization_id}/roles/{role}",
    summary="Customize visibility for editor or viewer",
    response_model=List[RoleVisibilityRead],
)
def update_role_visibility(
    organization_id: str,
    role: UserRole,
    payload: RolePermissionsUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    require_org_admin(current_user, organization_id)

    try:
        update_role_permissions(organization_id, role, payload.visible_categories)
    except PermissionModificationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except PermissionStorageError as e:
        raise handle_supabase_error(e, "Update role permissions")

    logger.info(f"{current_user.email} updated {role} visibility in {organization_id}")
    return _role_rows(organization_id)


# ============================================================
# DELETE /data-visibility/organizations/{organization_id}/roles/{role}
# ============================================================
@router.delete(
    "/organizations/{organization_id}/roles/{role}",
    summary="Reset editor or viewer visibility to defaults",
    response_model=List[RoleVisibilityRead],
)
def reset_role_visibility(
    organization_id: str,
    role: UserRole,
    current_user: CurrentUser = Depends(get_current_user),
):
    require_org_admin(current_user, organization_id)

    try:
        reset_role_permissions(organization_id, role)
    except PermissionModificationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except PermissionStorageError as e:
        raise handle_supabase_error(e, "Reset role permissions")

    logger.info(f"{current_user.email} reset {role} visibility in {organization_id}")
    return _role_rows(organization_id)
