# prompto/hub/base.py
"""
Prompt Hub Client
=================
Abstraction of the remote service that stores prompts.
The manager only talks to this interface, so tests can swap in an
in-memory hub and deployments can share one HTTP session.

Mỗi client phải implement:
- prompt_exists(), get_prompt(), pull_prompt_commit()
- push_prompt(), delete_prompt(), list_prompts()
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp

from prompto.prompts.models import PromptRecord


class ProviderStatus(str, Enum):
    """Provider health status"""
    HEALTHY = "healthy"
    UNAVAILABLE = "unavailable"


@dataclass
class ProviderConfig:
    """
    Configuration for a hub client.

    Attributes:
        name: Unique provider name
        timeout: Total request timeout in seconds (None = no timeout)
    """
    name: str
    timeout: Optional[float] = None


class PromptHubClient(ABC):
    """
    Base class for prompt hub clients.

    Errors from the hub are raised as HubTransportError and are never
    retried here.
    """

    def __init__(self, config: Optional[ProviderConfig] = None):
        self.config = config or ProviderConfig(name=self.name)
        self._status = ProviderStatus.UNAVAILABLE
        self._http_session: Optional[aiohttp.ClientSession] = None
        self._owns_session = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider identifier"""
        pass

    @property
    def status(self) -> ProviderStatus:
        return self._status

    @property
    def is_available(self) -> bool:
        return self._status == ProviderStatus.HEALTHY

    async def initialize(self) -> None:
        """Prepare the client. No network I/O happens here."""
        self._status = ProviderStatus.HEALTHY

    async def health_check(self) -> ProviderStatus:
        return self._status

    async def shutdown(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._http_session and not self._http_session.closed:
            await self._http_session.close()
        self._http_session = None
        self._owns_session = False
        self._status = ProviderStatus.UNAVAILABLE

    def set_http_session(self, session: aiohttp.ClientSession) -> None:
        """
        Set shared HTTP session from outside.
        A shared session is left open on shutdown.
        """
        self._http_session = session
        self._owns_session = False

    async def get_http_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session"""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
            self._owns_session = True
        return self._http_session

    # === Hub primitives ===

    @abstractmethod
    async def prompt_exists(self, prompt_id: str) -> bool:
        pass

    @abstractmethod
    async def get_prompt(self, prompt_id: str) -> Optional[PromptRecord]:
        """Metadata of a prompt, None when it does not exist."""
        pass

    @abstractmethod
    async def pull_prompt_commit(self, prompt_id: str) -> Dict[str, Any]:
        """Serialized manifest of the requested (default: latest) commit."""
        pass

    @abstractmethod
    async def push_prompt(
        self,
        prompt_id: str,
        manifest: Dict[str, Any],
        *,
        description: Optional[str] = None,
        readme: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_public: bool = False
    ) -> str:
        """Create or overwrite a prompt; returns its location URL."""
        pass

    @abstractmethod
    async def delete_prompt(self, prompt_id: str) -> None:
        pass

    @abstractmethod
    def list_prompts(
        self,
        query: Optional[str] = None,
        is_public: Optional[bool] = None,
        is_archived: Optional[bool] = None
    ) -> AsyncIterator[PromptRecord]:
        """Iterate over prompts in hub order."""
        pass

    def __repr__(self) -> str:
        return f"<PromptHubClient: {self.name} [{self._status.value}]>"
