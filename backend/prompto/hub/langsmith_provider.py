# prompto/hub/langsmith_provider.py
"""
LangSmith Provider
==================
Provider kết nối với LangSmith Prompt Hub REST API.

Cung cấp các methods để:
- Kiểm tra prompt tồn tại / lấy metadata
- Lấy manifest của commit mới nhất
- Publish (tạo repo nếu cần + commit mới)
- Xóa prompt
- Liệt kê prompts (tự động phân trang)
"""

from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp

from prompto.core.constants import LIST_PAGE_SIZE
from prompto.core.errors import HubTransportError
from prompto.core.logging import logger
from prompto.core.settings import settings
from prompto.hub.base import PromptHubClient, ProviderConfig, ProviderStatus
from prompto.prompts.codec import parse_prompt_identifier
from prompto.prompts.models import PromptRecord


def _flag(value: bool) -> str:
    return "true" if value else "false"


class LangSmithHubProvider(PromptHubClient):
    """
    Provider cho LangSmith Prompt Hub.

    One instance serves one API key; tenant settings are fetched lazily and
    cached on the instance only.
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[ProviderConfig] = None,
        api_url: Optional[str] = None,
        web_url: Optional[str] = None
    ):
        super().__init__(config or ProviderConfig(name="langsmith", timeout=settings.HUB_TIMEOUT_SECONDS))
        self._api_key = api_key
        self.api_url = (api_url or settings.LANGSMITH_ENDPOINT).rstrip("/")
        self.web_url = (web_url or settings.web_url).rstrip("/")
        self._tenant: Optional[Dict[str, Any]] = None

    @property
    def name(self) -> str:
        return "langsmith"

    @property
    def _headers(self) -> Dict[str, str]:
        return {"x-api-key": self._api_key, "Accept": "application/json"}

    async def health_check(self) -> ProviderStatus:
        """Check LangSmith API connectivity"""
        try:
            await self._request("GET", "/info")
            self._status = ProviderStatus.HEALTHY
        except HubTransportError as e:
            logger.error(f"LangSmith health check failed: {e}")
            self._status = ProviderStatus.UNAVAILABLE
        return self._status

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        allow_404: bool = False
    ) -> Optional[Any]:
        """
        Send one request to the hub.

        Returns:
            Decoded JSON body, {} for empty bodies, None for an allowed 404
        """
        url = f"{self.api_url}{path}"
        session = await self.get_http_session()
        logger.debug(f"LangSmith {method} {path}")

        try:
            async with session.request(
                method, url, params=params, json=json_body, headers=self._headers
            ) as response:
                if allow_404 and response.status == 404:
                    return None
                if response.status >= 400:
                    detail = await response.text()
                    raise HubTransportError(
                        f"LangSmith {method} {path} failed with HTTP {response.status}: {detail}",
                        status=response.status,
                    )
                body = await response.text()
                if not body:
                    return {}
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise HubTransportError(f"LangSmith {method} {path} failed: {e}") from e

    # === Tenant ===

    async def _get_tenant(self) -> Dict[str, Any]:
        if self._tenant is None:
            self._tenant = await self._request("GET", "/settings") or {}
        return self._tenant

    async def _ensure_owner(self, owner: str, name: str) -> None:
        """Writes are only allowed inside the caller's own tenant."""
        if owner == "-":
            return
        tenant = await self._get_tenant()
        if tenant.get("tenant_handle") != owner:
            raise HubTransportError(
                f"Cannot modify prompt '{name}' owned by '{owner}': "
                f"it does not belong to your workspace."
            )

    async def prompt_url(self, name: str, commit_hash: Optional[str]) -> str:
        url = f"{self.web_url}/prompts/{name}"
        if commit_hash:
            url = f"{url}/{commit_hash[:8]}"
        tenant = await self._get_tenant()
        if tenant.get("id"):
            url = f"{url}?organizationId={tenant['id']}"
        return url

    # === Prompt Operations ===

    async def get_prompt(self, prompt_id: str) -> Optional[PromptRecord]:
        owner, name, _ = parse_prompt_identifier(prompt_id)
        data = await self._request("GET", f"/repos/{owner}/{name}", allow_404=True)
        if not data or not data.get("repo"):
            return None
        return PromptRecord.from_hub(data["repo"])

    async def prompt_exists(self, prompt_id: str) -> bool:
        return await self.get_prompt(prompt_id) is not None

    async def pull_prompt_commit(self, prompt_id: str) -> Dict[str, Any]:
        owner, name, commit = parse_prompt_identifier(prompt_id)
        data = await self._request("GET", f"/commits/{owner}/{name}/{commit}")
        manifest = (data or {}).get("manifest")
        if manifest is None:
            raise HubTransportError(f"LangSmith returned no manifest for {prompt_id}")
        return manifest

    async def _latest_commit_hash(self, owner: str, name: str) -> Optional[str]:
        data = await self._request(
            "GET", f"/commits/{owner}/{name}/", params={"limit": 1, "offset": 0}
        )
        commits = (data or {}).get("commits") or []
        return commits[0].get("commit_hash") if commits else None

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
        """
        Publish a prompt: create or update the repo metadata, then commit
        the manifest on top of the latest commit.

        Returns:
            Location URL of the new commit
        """
        owner, name, _ = parse_prompt_identifier(prompt_id)
        await self._ensure_owner(owner, name)

        metadata = {
            "description": description,
            "readme": readme,
            "tags": list(tags or []),
            "is_public": is_public,
        }

        if await self.prompt_exists(prompt_id):
            await self._request("PATCH", f"/repos/{owner}/{name}", json_body=metadata)
        else:
            await self._request("POST", "/repos/", json_body={"repo_handle": name, **metadata})

        parent_commit = await self._latest_commit_hash(owner, name)
        try:
            result = await self._request(
                "POST",
                f"/commits/{owner}/{name}",
                json_body={"manifest": manifest, "parent_commit": parent_commit},
            )
            commit_hash = ((result or {}).get("commit") or {}).get("commit_hash")
        except HubTransportError as e:
            if e.status != 409:
                raise
            # Manifest identical to the latest commit: nothing new to store
            logger.info(f"No template changes for {prompt_id}; keeping commit {parent_commit}")
            commit_hash = parent_commit

        return await self.prompt_url(name, commit_hash)

    async def delete_prompt(self, prompt_id: str) -> None:
        owner, name, _ = parse_prompt_identifier(prompt_id)
        await self._ensure_owner(owner, name)
        await self._request("DELETE", f"/repos/{owner}/{name}")

    async def list_prompts(
        self,
        query: Optional[str] = None,
        is_public: Optional[bool] = None,
        is_archived: Optional[bool] = None
    ) -> AsyncIterator[PromptRecord]:
        offset = 0
        while True:
            params: Dict[str, Any] = {
                "limit": LIST_PAGE_SIZE,
                "offset": offset,
                "sort_field": "updated_at",
                "sort_direction": "desc",
            }
            if is_public is not None:
                params["is_public"] = _flag(is_public)
            if is_archived is not None:
                params["is_archived"] = _flag(is_archived)
            if query:
                params["query"] = query
                params["match_prefix"] = "true"

            data = await self._request("GET", "/repos/", params=params) or {}
            repos = data.get("repos") or []
            for repo in repos:
                yield PromptRecord.from_hub(repo)

            offset += len(repos)
            total = data.get("total")
            if len(repos) < LIST_PAGE_SIZE or (total is not None and offset >= total):
                break
