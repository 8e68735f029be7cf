# clickhouse_hosting/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class HostingError(Exception):
    """Base class for all hosting errors."""
    pass


# -----------------------------
# Validation / Registration Errors
# -----------------------------

class ResourceValidationError(HostingError, ValueError):
    """Required argument missing or malformed."""

    def __init__(self, param_name: str, message: str):
        self.param_name = param_name
        super().__init__(f"{param_name}: {message}")


class ResourceNameConflictError(HostingError):
    """Resource name already used somewhere in the application model."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cannot add resource '{name}': a resource with that name already exists.")


# -----------------------------
# Resolution Errors
# -----------------------------

class UnresolvedReferenceError(HostingError):
    """Parameter has no value or endpoint is not allocated yet."""
    pass


class DistributedApplicationError(HostingError):
    """Fatal error raised while the application is starting."""
    pass


# -----------------------------
# Server Administration Errors
# -----------------------------

class DatabaseCreationError(HostingError):
    """Administrative CREATE DATABASE call failed."""

    def __init__(self, database_name: str, message: str):
        self.database_name = database_name
        super().__init__(f"Failed to create database '{database_name}': {message}")
