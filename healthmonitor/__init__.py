"""
HEALTH MONITOR - Core Package
=============================
Authentication, data access and device ingestion for the patient
health-monitoring API.
"""

__version__ = "1.0.0"
