# Custom exceptions for navistore

class NaviStoreError(Exception):
    """Base exception for all application-specific errors."""
    pass

class SchemaError(NaviStoreError):
    """Raised if the navigation database schema is missing or cannot be created."""
    pass

class ConfigError(NaviStoreError):
    """Raised for configuration-related problems."""
    pass


class InvalidTableError(NaviStoreError):
    """Raised when a table name or partition id is not one the store knows."""

    def __init__(self, table: object, message: str = ""):
        self.table = table
        text = f"Unknown table '{table}'."
        if message:
            text += f" {message}"
        super().__init__(text)
