"""Domain errors and failure typing."""


class LocatorError(Exception):
    """Base class for locator failures."""

    error_code = "LOCATOR_ERROR"


class ConfigError(LocatorError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class InventoryError(LocatorError):
    """Raised when an inventory source cannot be opened or read."""

    error_code = "INVENTORY_ERROR"


class InputError(LocatorError):
    """Raised for missing or blank caller input."""

    error_code = "INPUT_ERROR"


class NotFoundError(LocatorError):
    """Raised when an address cannot be geocoded."""

    error_code = "NOT_FOUND"


class CoordinateRangeError(LocatorError, ValueError):
    """Raised when a latitude or longitude lies outside its valid domain."""

    error_code = "COORDINATE_OUT_OF_RANGE"


class TransformError(LocatorError):
    """Raised when the projection library fails on a single call."""

    error_code = "TRANSFORM_ERROR"
