"""
BrushQuest error taxonomy

Every error carries the HTTP status it maps to. Handlers let these propagate;
main.py converts them into JSON error bodies at the application boundary.
"""

from typing import Optional


class BrushQuestError(Exception):
    """Base class for errors surfaced to API clients"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(BrushQuestError):
    """Missing or malformed request fields"""
    status_code = 400


class AuthenticationError(BrushQuestError):
    """Admin password rejected"""
    status_code = 401


class NotFoundError(BrushQuestError):
    """Requested row does not exist"""
    status_code = 404


class MethodNotAllowedError(BrushQuestError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)


class ConflictError(BrushQuestError):
    """Row was changed by another request (e.g. suggestion already approved)"""
    status_code = 409


class ProviderError(BrushQuestError):
    """Upstream AI or storage call failed"""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider} error: {message}")


class MalformedOutputError(BrushQuestError):
    """LLM output did not contain parseable JSON"""


class SchemaMismatchError(BrushQuestError):
    """LLM output parsed as JSON but had the wrong shape"""

    def __init__(self, schema: str, details: str):
        self.schema = schema
        super().__init__(f"Generated {schema} did not match expected shape: {details}")


class ConfigurationError(BrushQuestError):
    """A required environment setting is missing"""


class PersistenceError(BrushQuestError):
    """Database operation failed"""
