"""
HEALTH MONITOR - Database Package
=================================
Pluggable data store: in-process maps for development and tests,
SQLAlchemy for production.
"""

import logging
from typing import Optional

from .config import DatabaseConfig
from .connection import DatabaseManager
from .entities import (
    NewUser, User, NewPatientRecord, PatientRecord,
    NewVitalSample, VitalSample, DeviceBinding,
)
from .enums import BloodGroup, FilterPeriod
from .store import DataStore, MemoryStore, period_bounds
from .repositories import SQLStore

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "sql")


def build_store(backend: str = "memory", database_url: Optional[str] = None) -> DataStore:
    """
    Create the configured DataStore backend.

    Args:
        backend: "memory" or "sql"
        database_url: SQLAlchemy URL for the sql backend (environment if omitted)
    """
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        config = DatabaseConfig(url=database_url) if database_url else DatabaseConfig()
        return SQLStore(DatabaseManager(config))
    raise ValueError(f"Unknown storage backend '{backend}'. Expected one of {STORAGE_BACKENDS}")


__all__ = [
    'DatabaseConfig',
    'DatabaseManager',
    'NewUser',
    'User',
    'NewPatientRecord',
    'PatientRecord',
    'NewVitalSample',
    'VitalSample',
    'DeviceBinding',
    'BloodGroup',
    'FilterPeriod',
    'DataStore',
    'MemoryStore',
    'SQLStore',
    'period_bounds',
    'build_store',
]
