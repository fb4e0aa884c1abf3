"""Health Monitor API application package."""
