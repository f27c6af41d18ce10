# models/data_visibility.py

"""
Role-based data visibility: categories, defaults and pure resolution.

A data category groups related trade-show fields (budget, leads, ...).
Each organization role sees a set of categories. Owner and admin always
see everything; editor and viewer follow DEFAULT_ROLE_PERMISSIONS unless
the organization stored an override in role_data_permissions.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from models.enums import DataCategory, UserRole


PRIVILEGED_ROLES = frozenset({UserRole.owner, UserRole.admin})
CONFIGURABLE_ROLES = (UserRole.editor, UserRole.viewer)

ALL_DATA_CATEGORIES: List[DataCategory] = list(DataCategory)


class CategoryInfo(BaseModel):
    label: str
    description: str
    icon: str
    fields: List[str] = []


DATA_CATEGORY_INFO: Dict[DataCategory, CategoryInfo] = {
    DataCategory.basic: CategoryInfo(
        label="Basic Info",
        description="Show name, dates, location, booth details",
        icon="info",
        fields=["name", "location", "start_date", "end_date", "booth_number", "booth_size", "show_status"],
    ),
    DataCategory.budget: CategoryInfo(
        label="Budget & Costs",
        description="All financial data including costs and expenses",
        icon="dollar-sign",
        fields=[
            "cost", "shipping_cost", "electrical_cost", "labor_cost",
            "internet_cost", "standard_services_cost", "hotel_cost_per_night",
        ],
    ),
    DataCategory.logistics: CategoryInfo(
        label="Shipping & Logistics",
        description="Shipping info, tracking numbers, cutoff dates",
        icon="truck",
        fields=[
            "shipping_info", "tracking_number", "shipping_cutoff", "ship_to_site",
            "ship_to_warehouse", "booth_to_ship", "graphics_to_ship",
        ],
    ),
    DataCategory.travel: CategoryInfo(
        label="Travel & Hotel",
        description="Hotel reservations and travel arrangements",
        icon="plane",
        fields=["hotel_name", "hotel_address", "hotel_confirmed", "hotel_confirmation_number"],
    ),
    DataCategory.contacts: CategoryInfo(
        label="Show Contacts",
        description="Event organizer contact information",
        icon="users",
        fields=["show_contact_name", "show_contact_email", "management_company"],
    ),
    DataCategory.leads: CategoryInfo(
        label="Leads & ROI",
        description="Lead counts, qualified leads, revenue attribution",
        icon="bar-chart",
        fields=["total_leads", "qualified_leads", "meetings_booked", "deals_won", "revenue_attributed"],
    ),
    DataCategory.notes: CategoryInfo(
        label="Notes",
        description="General notes and post-show notes",
        icon="file-text",
        fields=["general_notes", "post_show_notes", "speaking_details", "sponsorship_details"],
    ),
    DataCategory.tasks: CategoryInfo(
        label="Tasks",
        description="Tasks and checklist items",
        icon="check-square",
        fields=[],
    ),
    DataCategory.documents: CategoryInfo(
        label="Documents",
        description="Attached files and documents",
        icon="folder",
        fields=["vendor_packet_path", "show_agenda_pdf_path", "hotel_confirmation_path", "shipping_label_path"],
    ),
    DataCategory.attendees: CategoryInfo(
        label="Attendees",
        description="Team member assignments and attendee list",
        icon="user-check",
        fields=["attendees_included", "total_attending", "attendee_list_received"],
    ),
}

FIELD_CATEGORY_MAP: Dict[str, DataCategory] = {
    field: category
    for category, info in DATA_CATEGORY_INFO.items()
    for field in info.fields
}


# Used when an organization has no override for the role
DEFAULT_ROLE_PERMISSIONS: Dict[UserRole, List[DataCategory]] = {
    UserRole.owner: ALL_DATA_CATEGORIES,
    UserRole.admin: ALL_DATA_CATEGORIES,
    UserRole.editor: [
        DataCategory.basic, DataCategory.logistics, DataCategory.travel, DataCategory.contacts,
        DataCategory.notes, DataCategory.tasks, DataCategory.documents, DataCategory.attendees,
    ],
    UserRole.viewer: [
        DataCategory.basic, DataCategory.logistics, DataCategory.travel, DataCategory.notes,
    ],
}


# ===============================================================
# STORED OVERRIDE
# ===============================================================

class RoleDataPermissions(BaseModel):
    """
    Mirrors one row of role_data_permissions.
    """
    id: Optional[str] = None
    organization_id: str
    role: UserRole
    visible_categories: List[DataCategory] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: dict) -> "RoleDataPermissions":
        known = set(DataCategory.list())
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            organization_id=str(row["organization_id"]),
            role=row["role"],
            # Drop tags this build doesn't know about instead of failing the whole fetch
            visible_categories=[c for c in (row.get("visible_categories") or []) if c in known],
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


# ===============================================================
# RESOLUTION
# ===============================================================

def _coerce_role(role) -> Optional[UserRole]:
    if not role:
        return None
    try:
        return UserRole(role)
    except ValueError:
        return None


def _find_override(
    permissions: Optional[Iterable[RoleDataPermissions]],
    role: UserRole,
) -> Optional[RoleDataPermissions]:
    for p in permissions or []:
        if p.role == role:
            return p
    return None


def is_privileged(role) -> bool:
    return _coerce_role(role) in PRIVILEGED_ROLES


def is_category_visible(
    permissions: Optional[Iterable[RoleDataPermissions]],
    role,
    category,
) -> bool:
    """
    Decide whether a role may see a data category.

    Owner/admin → always. Otherwise the organization's override for the
    role wins; without one the compiled default applies. A missing or
    unknown role sees nothing.
    """
    user_role = _coerce_role(role)
    if user_role is None:
        return False

    if user_role in PRIVILEGED_ROLES:
        return True

    override = _find_override(permissions, user_role)
    if override is not None:
        return category in override.visible_categories

    return category in DEFAULT_ROLE_PERMISSIONS.get(user_role, [])


def is_field_visible(
    permissions: Optional[Iterable[RoleDataPermissions]],
    role,
    field_name: str,
    unmapped_visible: bool = True,
) -> bool:
    """
    Decide whether a role may see a single show field.

    The field is resolved to its category through FIELD_CATEGORY_MAP.
    Fields outside every category return unmapped_visible.
    """
    user_role = _coerce_role(role)
    if user_role is None:
        return False

    if user_role in PRIVILEGED_ROLES:
        return True

    category = FIELD_CATEGORY_MAP.get(field_name)
    if category is None:
        return unmapped_visible

    return is_category_visible(permissions, user_role, category)


def get_visible_categories(
    permissions: Optional[Iterable[RoleDataPermissions]],
    role,
) -> List[DataCategory]:
    user_role = _coerce_role(role)
    if user_role is None:
        return []

    if user_role in PRIVILEGED_ROLES:
        return list(ALL_DATA_CATEGORIES)

    override = _find_override(permissions, user_role)
    if override is not None:
        return list(override.visible_categories)

    return list(DEFAULT_ROLE_PERMISSIONS.get(user_role, []))


def is_any_category_visible(permissions, role, categories: Iterable) -> bool:
    return any(is_category_visible(permissions, role, c) for c in categories)


def are_all_categories_visible(permissions, role, categories: Iterable) -> bool:
    return all(is_category_visible(permissions, role, c) for c in categories)
