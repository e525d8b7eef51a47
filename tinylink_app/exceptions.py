"""
Typed errors raised by the link service and link stores.

Routers translate these into HTTP status codes; nothing below the API layer
knows about HTTP.
"""


class LinkError(Exception):
    """Base class for all link errors"""


class ValidationError(LinkError):
    """Malformed URL or short code (caller error, never retried)"""


class CodeConflictError(LinkError):
    """The short code is already taken"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Code '{code}' already exists. Please choose a different code.")


class GenerationExhaustedError(LinkError):
    """No free random code was found within the attempt bound"""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique code after {attempts} attempts. Please try again."
        )


class LinkNotFoundError(LinkError):
    """No link exists for the short code"""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Link '{code}' not found")


class StorageUnavailableError(LinkError):
    """Transient storage failure (connection loss, lock or call timeout)"""
