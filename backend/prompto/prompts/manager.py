# prompto/prompts/manager.py
"""
Prompt Lifecycle Manager
========================
Five operations over the remote hub: list, get (render), create, update, delete.

No local state survives between calls; every operation re-reads what it
needs from the hub. Existence checks followed by writes are not atomic:
two concurrent updates of one prompt can both pass the probe, and the
later publish wins.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from prompto.core.constants import LIST_IS_ARCHIVED, LIST_IS_PUBLIC
from prompto.core.errors import (
    PromptAlreadyExistsError,
    PromptNotFoundError,
    UnsupportedTemplateTypeError,
)
from prompto.core.logging import logger
from prompto.hub.base import PromptHubClient
from prompto.hub.langsmith_provider import LangSmithHubProvider
from prompto.prompts.codec import TemplateCodec, template_codec
from prompto.prompts.models import PromptDefinition, PromptRecord, PromptUpdate


class PromptManager:
    """
    Owns the prompt lifecycle for one credential.

    Usage:
        async with PromptManager(api_key) as manager:
            prompts = await manager.list_prompts()
            text = await manager.get_prompt("org/welcome", {"name": "Ava"})
    """

    def __init__(
        self,
        api_key: str,
        hub: Optional[PromptHubClient] = None,
        codec: Optional[TemplateCodec] = None
    ):
        self.api_key = api_key
        self.hub = hub or LangSmithHubProvider(api_key)
        self.codec = codec or template_codec

    async def __aenter__(self) -> "PromptManager":
        await self.hub.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.hub.shutdown()

    async def list_prompts(self, query: Optional[str] = None) -> List[PromptRecord]:
        """
        Private, non-archived prompts, most recently updated first.
        Ties keep the order the hub returned them in.
        """
        records = [
            record
            async for record in self.hub.list_prompts(
                query=query, is_public=LIST_IS_PUBLIC, is_archived=LIST_IS_ARCHIVED
            )
        ]
        return sorted(records, key=lambda r: r.updated_sort_key, reverse=True)

    async def get_prompt(
        self,
        prompt_id: str,
        variables: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        """
        Render a prompt.

        Returns:
            Rendered text, or None when the prompt does not exist. A prompt
            deleted between the probe and the fetch surfaces as a
            HubTransportError instead.
        """
        if not await self.hub.prompt_exists(prompt_id):
            logger.debug(f"Prompt {prompt_id} not found")
            return None

        manifest = await self.hub.pull_prompt_commit(prompt_id)
        return self.codec.render(manifest, variables or {})

    async def create_prompt(
        self,
        prompt_id: str,
        definition: PromptDefinition,
        fail_if_exists: bool = False
    ) -> str:
        """
        Publish a new prompt.

        An existing prompt with the same id is overwritten unless
        fail_if_exists is set.

        Returns:
            Location URL of the published version
        """
        full = self.codec.apply_defaults(definition)
        manifest = self.codec.build_manifest(
            full.template, full.template_format, full.template_variables
        )

        if fail_if_exists and await self.hub.prompt_exists(prompt_id):
            raise PromptAlreadyExistsError(prompt_id)

        location = await self.hub.push_prompt(
            prompt_id,
            manifest,
            description=full.description,
            readme=full.readme,
            tags=full.tags,
            is_public=full.is_public,
        )
        logger.info(f"Published prompt {prompt_id}: {location}")
        return location

    async def update_prompt(self, prompt_id: str, update: PromptUpdate) -> str:
        """
        Merge a partial update into the current remote state and republish.

        Precedence per field: update value > remote value > codec default
        (format only).

        Raises:
            PromptNotFoundError: the prompt does not exist (no further I/O)
            UnsupportedTemplateTypeError: the remote template is not a plain
                string, even when the update supplies a new one
        """
        self.codec.validate_format(update.template_format)

        if not await self.hub.prompt_exists(prompt_id):
            raise PromptNotFoundError(prompt_id)

        record, manifest = await asyncio.gather(
            self.hub.get_prompt(prompt_id),
            self.hub.pull_prompt_commit(prompt_id),
        )
        if record is None:
            raise PromptNotFoundError(prompt_id)
        current = self.codec.read_manifest(manifest)
        if not isinstance(current.template, str):
            raise UnsupportedTemplateTypeError(
                f'Prompt "{prompt_id}" is not a plain string template; '
                f"only plain string templates can be updated."
            )

        template = update.template if update.template is not None else current.template

        template_format = (
            update.template_format
            or current.template_format
            or self.codec.default_format
        )
        template_variables = _first_set(update.template_variables, current.template_variables, [])

        merged_manifest = self.codec.build_manifest(template, template_format, template_variables)
        location = await self.hub.push_prompt(
            prompt_id,
            merged_manifest,
            description=_first_set(update.description, record.description),
            readme=_first_set(update.readme, record.readme),
            tags=_first_set(update.tags, record.tags, []),
            is_public=_first_set(update.is_public, record.is_public, False),
        )
        logger.info(f"Updated prompt {prompt_id} ({', '.join(update.provided_fields()) or 'no field changes'}): {location}")
        return location

    async def delete_prompt(self, prompt_id: str) -> None:
        """Delete an existing prompt. There is no undo."""
        if not await self.hub.prompt_exists(prompt_id):
            raise PromptNotFoundError(prompt_id)
        await self.hub.delete_prompt(prompt_id)
        logger.info(f"Deleted prompt {prompt_id}")


def _first_set(*values):
    for value in values:
        if value is not None:
            return value
    return None


def create_manager(
    api_key: str,
    http_session: Optional[aiohttp.ClientSession] = None
) -> PromptManager:
    """Build a fresh manager for one call, optionally on a shared session."""
    hub = LangSmithHubProvider(api_key)
    if http_session is not None:
        hub.set_http_session(http_session)
    return PromptManager(api_key, hub=hub)
