"""Custom exceptions for the sizing toolkit."""

from typing import Optional, Dict, Any


class KubeSizerException(Exception):
    """Base exception for kubesizer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInput(KubeSizerException):
    """Raised when a sizing input cannot produce a valid result."""

    def __init__(self, field: str, reason: str, value: Any = None):
        self.field = field
        self.reason = reason
        self.value = value
        super().__init__(f"{field} {reason}", {"field": field, "value": value})


class DiscoveryException(KubeSizerException):
    """Raised when cluster queries fail."""

    def __init__(self, discovery_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.discovery_type = discovery_type
        super().__init__(f"Discovery failed for {discovery_type}: {message}", details)


class ClientConnectionException(KubeSizerException):
    """Raised when client connections fail."""

    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class ConfigurationException(KubeSizerException):
    """Raised when configuration is invalid."""
    pass
