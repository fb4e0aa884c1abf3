"""
HEALTH MONITOR - Database Enums
===============================
Enumerated values stored on users and used for history filtering.
"""

from enum import Enum


class BloodGroup(str, Enum):
    """Blood groups offered at registration. OTHERS requires a custom value."""
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"
    OTHERS = "Others"


class FilterPeriod(str, Enum):
    """History windows, relative to the server clock."""
    DAY = "day"
    MONTH = "month"
    YEAR = "year"
