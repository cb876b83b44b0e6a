"""
Prompt Hub Clients
==================
Clients kết nối với remote prompt hub.
"""

from prompto.hub.base import PromptHubClient, ProviderConfig, ProviderStatus
from prompto.hub.langsmith_provider import LangSmithHubProvider

__all__ = ['PromptHubClient', 'ProviderConfig', 'ProviderStatus', 'LangSmithHubProvider']
