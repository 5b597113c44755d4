"""
Fleet enumerations.

Status and license values shared by models and schemas.
"""

import enum


class DriverStatus(str, enum.Enum):
    """
    Driver duty status.
    
    Statuses:
        ON_DUTY: Available or currently driving
        OFF_DUTY: Not working right now
        ON_LEAVE: Away for an extended period
        INACTIVE: No longer driving for the company
    """
    ON_DUTY = "on_duty"
    OFF_DUTY = "off_duty"
    ON_LEAVE = "on_leave"
    INACTIVE = "inactive"


class LicenseType(str, enum.Enum):
    """Commercial driver's license class."""
    CLASS_A = "class_a"
    CLASS_B = "class_b"
    CLASS_C = "class_c"


class VehicleStatus(str, enum.Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"
