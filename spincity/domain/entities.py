"""Domain vocabulary: collection names, enums and derived values."""
from __future__ import annotations

from typing import Any, Mapping, Optional

USERS = "users"
CONTACTS = "contacts"
RENTALS = "rentals"
REPAIRS = "repairs"
INVENTORY = "inventory"
SALES = "sales"
VENDORS = "vendors"

COLLECTIONS = (USERS, CONTACTS, RENTALS, REPAIRS, INVENTORY, SALES, VENDORS)

# Entity collections an authenticated session loads into memory.
SESSION_COLLECTIONS = (CONTACTS, RENTALS, REPAIRS, INVENTORY, SALES, VENDORS)

ROLE_ADMIN = "Admin"
ROLE_USER = "User"
USER_ROLES = (ROLE_ADMIN, ROLE_USER)

STATUS_AVAILABLE = "Available"
STATUS_RENTED = "Rented"
STATUS_SOLD = "Sold"
STATUS_IN_REPAIR = "In Repair"
STATUS_DECOMMISSIONED = "Decommissioned"
INVENTORY_STATUSES = (
    STATUS_AVAILABLE,
    STATUS_RENTED,
    STATUS_SOLD,
    STATUS_IN_REPAIR,
    STATUS_DECOMMISSIONED,
)

REPAIR_OPEN = "Open"
REPAIR_IN_PROGRESS = "In Progress"
REPAIR_COMPLETED = "Completed"
REPAIR_CANCELLED = "Cancelled"
REPAIR_STATUSES = (REPAIR_OPEN, REPAIR_IN_PROGRESS, REPAIR_COMPLETED, REPAIR_CANCELLED)

RENTAL_PLAN_RATES = {
    "24-Month Value Plan": 39.99,
    "12-Month Smart Plan": 49.99,
    "6-Month Flex Plan": 59.99,
}

VENDOR_CODE_PREFIX = "V-"
VENDOR_CODE_FLOOR = 1000

DEFAULT_SMS_SETTINGS = {
    "login": "your-username",
    "password": "",
    "domain": "smsonlinegh.com",
    "protocol": "HTTPS",
    "port": "443",
}
DEFAULT_ADMIN_KEY = "admin"
ADMIN_KEY_MIN_LENGTH = 4


def default_admin_user(email: str) -> dict:
    return {
        "name": "Admin User",
        "email": email,
        "password": "admin",
        "role": ROLE_ADMIN,
        "avatar": "https://picsum.photos/seed/admin/40/40",
    }


def monthly_rate_for(plan: Optional[str]) -> Optional[float]:
    """Return the monthly rate derived from a rental plan, None when unknown."""
    if not plan:
        return None
    return RENTAL_PLAN_RATES.get(plan)


def vendor_code_number(code: Any) -> Optional[int]:
    if not isinstance(code, str) or not code.startswith(VENDOR_CODE_PREFIX):
        return None
    try:
        return int(code[len(VENDOR_CODE_PREFIX):])
    except ValueError:
        return None


def is_admin(user: Optional[Mapping[str, Any]]) -> bool:
    return bool(user) and user.get("role") == ROLE_ADMIN


def public_user(user: Optional[Mapping[str, Any]]) -> Optional[dict]:
    """Copy of a user record without its credential."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k != "password"}
