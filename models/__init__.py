# -------------------------
# Enums
# -------------------------
from .enums import (
    BaseStrEnum,
    DataCategory,
    UserRole,
)

# -------------------------
# Data Visibility Models
# -------------------------
from .data_visibility import (
    ALL_DATA_CATEGORIES,
    CONFIGURABLE_ROLES,
    DATA_CATEGORY_INFO,
    DEFAULT_ROLE_PERMISSIONS,
    FIELD_CATEGORY_MAP,
    PRIVILEGED_ROLES,
    CategoryInfo,
    RoleDataPermissions,
)
