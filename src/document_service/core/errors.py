"""
Domain Errors

Exceptions raised by the access gate and the document pipeline. The HTTP
layer maps them to uniform responses; ``reason`` is for logs and the audit
trail only and is never sent to the client.
"""

from typing import Optional


class DocumentServiceError(Exception):
    """Base class for document portal errors"""


class AuthenticationError(DocumentServiceError):
    """No valid user session or guest token"""

    def __init__(self, reason: str = "authentication failed"):
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(DocumentServiceError):
    """Authenticated, but not allowed to touch this dossier or resource"""

    def __init__(self, reason: str = "access denied"):
        super().__init__(reason)
        self.reason = reason


class NotFoundError(DocumentServiceError):
    """Resource is absent, soft-deleted, or belongs to another dossier"""

    def __init__(self, resource: str, resource_id: Optional[int] = None):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(DocumentServiceError):
    """Request collides with existing state"""


class DocumentValidationError(ValueError):
    """User-correctable problem with an upload or request field"""


class StorageError(DocumentServiceError):
    """Blob storage backend failed or is unreachable"""
