# prompto/core/errors.py
"""
Error taxonomy shared by the manager and every transport.

Each class carries a stable ``kind`` so remote transports can tell errors
apart without parsing messages.
"""

from typing import Optional


class PromptoError(Exception):
    """Base exception for prompt lifecycle errors"""

    kind = "PromptoError"

    @property
    def message(self) -> str:
        return str(self)


class MissingCredentialError(PromptoError):
    """No API key could be resolved for the call"""

    kind = "MissingCredential"


class PromptNotFoundError(PromptoError):
    """The target prompt does not exist in the hub"""

    kind = "NotFound"

    def __init__(self, prompt_id: str, message: Optional[str] = None):
        super().__init__(message or f'Prompt "{prompt_id}" was not found.')
        self.prompt_id = prompt_id


class PromptAlreadyExistsError(PromptoError):
    """Raised by create when the caller asked not to overwrite"""

    kind = "AlreadyExists"

    def __init__(self, prompt_id: str):
        super().__init__(f'Prompt "{prompt_id}" already exists.')
        self.prompt_id = prompt_id


class UnsupportedTemplateTypeError(PromptoError):
    """The stored template is not a plain string and cannot be merged"""

    kind = "UnsupportedTemplateType"


class InvalidInputFormatError(PromptoError):
    """Malformed or conflicting caller input"""

    kind = "InvalidInputFormat"


class HubTransportError(PromptoError):
    """Any failure reported by the prompt hub or the network in between"""

    kind = "TransportError"

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
