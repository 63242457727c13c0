"""Recommended values and presets for radio records.

Department, shift and status are stored as open strings. These tuples are the
values the front end offers; the API does not reject anything outside them.
"""

STATUS_ACTIVE = "active"
STATUS_MAINTENANCE = "maintenance"
STATUS_OFFLINE = "offline"
STATUS_RESERVED = "reserved"

STATUS_CHOICES = (
    STATUS_ACTIVE,
    STATUS_MAINTENANCE,
    STATUS_OFFLINE,
    STATUS_RESERVED,
)

DEPARTMENT_CHOICES = (
    "Operations",
    "Maintenance",
    "Safety",
    "Security",
    "Logistics",
    "Administration",
    "Emergency Response",
    "Environmental",
)

SHIFT_CHOICES = ("Day Shift", "Night Shift", "Swing Shift", "On-Call")

ACTION_ADD = "ADD"
ACTION_UPDATE = "UPDATE"
ACTION_DELETE = "DELETE"
ACTION_EXPORT = "EXPORT"
ACTION_BULK_IMPORT = "BULK_IMPORT"

ACTION_CHOICES = (
    ACTION_ADD,
    ACTION_UPDATE,
    ACTION_DELETE,
    ACTION_EXPORT,
    ACTION_BULK_IMPORT,
)

RADIO_TEMPLATES = (
    {
        "id": "tait-tp9300",
        "name": "Tait TP9300 (Handheld)",
        "model": "Tait TP9300",
        "version": "v3.0",
        "status": STATUS_ACTIVE,
        "notes": "Standard handheld radio for field operations",
    },
    {
        "id": "tait-tm9300",
        "name": "Tait TM9300 (Vehicle Mounted)",
        "model": "Tait TM9300",
        "version": "v3.0",
        "status": STATUS_ACTIVE,
        "notes": "Vehicle-mounted radio for mobile operations",
    },
)


def normalize_serial(value: str | None) -> str:
    """Return the canonical (stripped, uppercase) form of a serial number."""

    return (value or "").strip().upper()


__all__ = [
    "ACTION_ADD",
    "ACTION_BULK_IMPORT",
    "ACTION_CHOICES",
    "ACTION_DELETE",
    "ACTION_EXPORT",
    "ACTION_UPDATE",
    "DEPARTMENT_CHOICES",
    "RADIO_TEMPLATES",
    "SHIFT_CHOICES",
    "STATUS_ACTIVE",
    "STATUS_CHOICES",
    "STATUS_MAINTENANCE",
    "STATUS_OFFLINE",
    "STATUS_RESERVED",
    "normalize_serial",
]
