"""Pytest configuration and shared fixtures for prompto tests."""

from typing import Any, AsyncIterator, Dict, List, Optional

import pytest
from pydantic import SecretStr

from prompto.core.settings import settings
from prompto.hub.base import PromptHubClient
from prompto.prompts.codec import template_codec
from prompto.prompts.manager import PromptManager
from prompto.prompts.models import PromptRecord


class FakeHub(PromptHubClient):
    """In-memory prompt hub that records every primitive it serves."""

    def __init__(self):
        super().__init__()
        self.records: Dict[str, PromptRecord] = {}
        self.manifests: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.pushes: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return "fake"

    def seed(
        self,
        prompt_id: str,
        template: Any = "Hello {{name}}",
        template_format: str = "mustache",
        variables: Optional[List[str]] = None,
        manifest: Optional[Dict[str, Any]] = None,
        **record_fields
    ) -> PromptRecord:
        if manifest is None:
            manifest = template_codec.build_manifest(
                template, template_format, variables if variables is not None else ["name"]
            )
        record = PromptRecord(prompt_id=prompt_id, **record_fields)
        self.records[prompt_id] = record
        self.manifests[prompt_id] = manifest
        return record

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def prompt_exists(self, prompt_id: str) -> bool:
        self.calls.append(("prompt_exists", prompt_id))
        return prompt_id in self.records

    async def get_prompt(self, prompt_id: str) -> Optional[PromptRecord]:
        self.calls.append(("get_prompt", prompt_id))
        return self.records.get(prompt_id)

    async def pull_prompt_commit(self, prompt_id: str) -> Dict[str, Any]:
        self.calls.append(("pull_prompt_commit", prompt_id))
        return self.manifests[prompt_id]

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
        self.calls.append(("push_prompt", prompt_id))
        push = {
            "prompt_id": prompt_id,
            "manifest": manifest,
            "description": description,
            "readme": readme,
            "tags": tags,
            "is_public": is_public,
        }
        self.pushes.append(push)
        self.records[prompt_id] = PromptRecord(
            prompt_id=prompt_id,
            description=description,
            readme=readme,
            tags=list(tags or []),
            is_public=is_public,
        )
        self.manifests[prompt_id] = manifest
        return f"https://smith.test/prompts/{prompt_id.split('/')[-1]}/abcd1234"

    async def delete_prompt(self, prompt_id: str) -> None:
        self.calls.append(("delete_prompt", prompt_id))
        del self.records[prompt_id]
        del self.manifests[prompt_id]

    async def list_prompts(
        self,
        query: Optional[str] = None,
        is_public: Optional[bool] = None,
        is_archived: Optional[bool] = None
    ) -> AsyncIterator[PromptRecord]:
        self.calls.append(("list_prompts", query, is_public, is_archived))
        for record in list(self.records.values()):
            if query and query not in record.prompt_id:
                continue
            yield record


class RecordingFactory:
    """Manager factory that remembers which API keys it was given."""

    def __init__(self, hub: FakeHub):
        self.hub = hub
        self.keys: List[str] = []

    def __call__(self, api_key: str) -> PromptManager:
        self.keys.append(api_key)
        return PromptManager(api_key, hub=self.hub)


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    """Tests start without an environment credential."""
    monkeypatch.setattr(settings, "LANGSMITH_API_KEY", None)


@pytest.fixture
def env_api_key(monkeypatch) -> str:
    monkeypatch.setattr(settings, "LANGSMITH_API_KEY", SecretStr("env-key"))
    return "env-key"


@pytest.fixture
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def manager(hub: FakeHub) -> PromptManager:
    return PromptManager("test-key", hub=hub)


@pytest.fixture
def factory(hub: FakeHub) -> RecordingFactory:
    return RecordingFactory(hub)
