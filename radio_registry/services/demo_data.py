"""Demo fleet used to populate a fresh registry for evaluation."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..crud.radios import create_radio

LOGGER = logging.getLogger(__name__)

DEMO_OPERATOR = "Demo System"
DEMO_IP = "127.0.0.1"


def _radio(serial, model, version, user, department, location, shift, status, notes, radio_id=None):
    return {
        "serial_number": serial,
        "radio_id": radio_id,
        "model": model,
        "version": version,
        "user_name": user,
        "department": department,
        "location": location,
        "shift": shift,
        "status": status,
        "notes": notes,
    }


DEMO_RADIOS: List[Dict[str, Any]] = [
    _radio("TP001", "Tait TP9300", "v3.0", "John Smith", "Security", "Main Gate", "Day Shift", "active",
           "Handheld radio for security operations", radio_id="12345"),
    _radio("MTR002", "Motorola CP200", "v2.1", "Sarah Johnson", "Security", "North Patrol", "Night Shift", "active",
           "Backup radio for north perimeter"),
    _radio("KWD001", "Kenwood TK-3402", "R01.00.00", "Mike Wilson", "Maintenance", "Workshop", "Day Shift", "active",
           "Workshop communication radio"),
    _radio("KWD002", "Kenwood TK-3402", "R01.00.00", "Lisa Chen", "Maintenance", "Building B", "Swing Shift",
           "maintenance", "Maintenance rounds radio - currently in for service"),
    _radio("HYT001", "Hytera PD405", "v1.3", "David Brown", "Operations", "Control Room", "Day Shift", "active",
           "Control room communications"),
    _radio("HYT002", "Hytera PD405", "v1.3", "", "Operations", "Spare Equipment", "", "reserved",
           "Backup radio - unassigned"),
    _radio("MTR003", "Motorola XPR3300", "v3.0", "Amanda Davis", "Administration", "Office Complex", "Day Shift",
           "active", "Management communication radio"),
    _radio("ICM001", "Icom IC-F4029SDR", "v2.5", "Robert Taylor", "Emergency Response", "Fire Safety Station",
           "On-Call", "active", "Emergency response coordination"),
    _radio("ICM002", "Icom IC-F4029SDR", "v2.5", "Jennifer White", "Emergency Response", "Medical Station",
           "On-Call", "active", "Medical emergency communications"),
    _radio("VTX001", "Vertex VX-261", "v1.8", "Tom Anderson", "Logistics", "Warehouse", "Day Shift", "active",
           "Warehouse operations radio"),
    _radio("PIT001", "Motorola XPR7350", "v4.2", "Carlos Rodriguez", "Operations", "Pit Floor", "Day Shift", "active",
           "Heavy equipment operator radio"),
    _radio("ENV001", "Kenwood NX-3320", "v2.8", "Dr. Maria Santos", "Environmental", "Field Station", "Day Shift",
           "active", "Environmental monitoring radio"),
]


def seed_demo_data(db: Session) -> int:
    """Insert the demo fleet, skipping serials that already exist. Returns the number added."""

    added = 0
    for radio in DEMO_RADIOS:
        try:
            create_radio(db, {**radio, "operator_name": DEMO_OPERATOR}, ip_address=DEMO_IP)
        except ConflictError:
            LOGGER.info("Radio %s already exists, skipping", radio["serial_number"])
            continue
        added += 1
    return added
