# prompto/prompts/models.py
"""
Prompt Data Model
=================
- PromptDefinition: desired full state of a prompt (create input)
- PromptUpdate: partial definition, absent field = keep remote value
- PromptRecord: read-only projection of a hub prompt
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class PromptDefinition:
    """
    Full prompt definition.

    Fields left as None are filled by TemplateCodec.apply_defaults()
    (format=mustache, variables=[], is_public=False, tags=[]).
    """
    template: str
    template_format: Optional[str] = None
    template_variables: Optional[List[str]] = None
    description: Optional[str] = None
    readme: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None


@dataclass
class PromptUpdate:
    """Partial definition. None means "leave unchanged", never "clear"."""
    template: Optional[str] = None
    template_format: Optional[str] = None
    template_variables: Optional[List[str]] = None
    description: Optional[str] = None
    readme: Optional[str] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None

    def provided_fields(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.provided_fields()


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse hub ISO timestamps; naive values are taken as UTC. None if unparseable."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class PromptRecord:
    """
    Read-only view of a prompt as returned by the hub.

    Attributes:
        prompt_id: "owner/name", the only identity key
        updated_at / created_at: ISO timestamps as sent by the hub
    """
    prompt_id: str
    updated_at: Optional[str] = None
    created_at: Optional[str] = None
    is_public: bool = False
    is_archived: bool = False
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None
    readme: Optional[str] = None
    num_commits: int = 0
    last_commit_hash: Optional[str] = None

    @classmethod
    def from_hub(cls, repo: Dict[str, Any]) -> "PromptRecord":
        prompt_id = repo.get("full_name")
        if not prompt_id:
            prompt_id = f"{repo.get('owner') or '-'}/{repo.get('repo_handle', '')}"
        return cls(
            prompt_id=prompt_id,
            updated_at=repo.get("updated_at"),
            created_at=repo.get("created_at"),
            is_public=bool(repo.get("is_public", False)),
            is_archived=bool(repo.get("is_archived", False)),
            tags=list(repo.get("tags") or []),
            description=repo.get("description"),
            readme=repo.get("readme"),
            num_commits=repo.get("num_commits") or 0,
            last_commit_hash=repo.get("last_commit_hash"),
        )

    @property
    def updated_datetime(self) -> Optional[datetime]:
        return _parse_timestamp(self.updated_at)

    @property
    def updated_sort_key(self) -> datetime:
        """Missing or unparseable timestamps sort last."""
        return self.updated_datetime or _OLDEST

    def to_dict(self) -> Dict[str, Any]:
        return {
            "promptId": self.prompt_id,
            "description": self.description,
            "readme": self.readme,
            "tags": self.tags,
            "isPublic": self.is_public,
            "isArchived": self.is_archived,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "numCommits": self.num_commits,
            "lastCommitHash": self.last_commit_hash,
        }
