from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ORGANIZATION ROLE
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    """Role of a user inside their organization."""

    owner = "owner"
    admin = "admin"
    editor = "editor"
    viewer = "viewer"


# -----------------------------------------------------
# DATA CATEGORY
# -----------------------------------------------------
class DataCategory(BaseStrEnum):
    """Unit of visibility control for show data."""

    basic = "basic"            # Name, dates, location, booth info
    budget = "budget"          # All cost/financial data
    logistics = "logistics"    # Shipping info, tracking
    travel = "travel"          # Hotel, travel details
    contacts = "contacts"      # Show contacts
    leads = "leads"            # Lead counts, ROI metrics
    notes = "notes"
    tasks = "tasks"
    documents = "documents"    # Attached files
    attendees = "attendees"
