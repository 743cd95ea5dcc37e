"""
Custom exceptions for IE Translation Tools.
"""

class IEToolsError(Exception):
    """Base exception for IE Translation Tools."""
    pass

class ParseError(IEToolsError):
    """Raised when a game source file cannot be parsed."""
    pass

class RegistryError(IEToolsError):
    """Raised when the string registry is used against its data model."""
    pass

class ConfigError(IEToolsError):
    """Raised when configuration-related errors occur."""
    pass

class ReportError(IEToolsError):
    """Raised when a report cannot be written."""
    pass
