# prompto/prompts/codec.py
"""
Template Codec
==============
Chuẩn hoá mọi input "lệch chuẩn" về một PromptDefinition thống nhất:
- Variables: list[str] | list[{name|key}] | {key: ...} -> list[str]
- Template/README: inline text hoặc file reference (không được cả hai)
- Visibility: cờ public/private độc lập -> True / False / None
- Manifest: serialize/deserialize LangChain PromptTemplate và render
"""

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from langchain_core.load import dumpd, load
from langchain_core.prompts import PromptTemplate

from prompto.core.constants import DEFAULT_TEMPLATE_FORMAT, TEMPLATE_FORMATS
from prompto.core.errors import InvalidInputFormatError, UnsupportedTemplateTypeError
from prompto.prompts.models import PromptDefinition


# === Variable input shapes ===

@dataclass(frozen=True)
class StringList:
    """["name", "role"]"""
    names: Tuple[str, ...]


@dataclass(frozen=True)
class ObjectList:
    """[{"name": "name"}, {"key": "role"}]"""
    items: Tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class KeyedMap:
    """{"name": "x", "role": "y"} - only the keys matter"""
    mapping: Mapping[str, Any]


VariableInput = Union[StringList, ObjectList, KeyedMap]


@dataclass
class ManifestContent:
    """Fields of a stored manifest that take part in merge-on-update."""
    template: Any
    template_format: Optional[str]
    template_variables: Optional[List[str]]


def parse_prompt_identifier(identifier: str) -> Tuple[str, str, str]:
    """
    Split "owner/name[:commit]" into its parts.

    A bare "name" belongs to the caller's own tenant (owner "-"); the commit
    defaults to "latest".
    """
    if (
        not identifier
        or not identifier.strip()
        or identifier.count("/") > 1
        or identifier.startswith("/")
        or identifier.endswith("/")
    ):
        raise InvalidInputFormatError(f"Invalid prompt identifier: {identifier!r}")

    owner_name, _, commit = identifier.partition(":")
    if "/" in owner_name:
        owner, name = owner_name.split("/", 1)
    else:
        owner, name = "-", owner_name

    if not owner or not name:
        raise InvalidInputFormatError(f"Invalid prompt identifier: {identifier!r}")
    return owner, name, commit or "latest"


class TemplateCodec:
    """
    Normalization and (de)serialization of prompt definitions.

    Stateless; every method either returns a canonical value or raises
    InvalidInputFormatError.
    """

    default_format = DEFAULT_TEMPLATE_FORMAT

    # --- JSON / CLI style inputs ---

    def load_json_option(self, raw: Any, option: str) -> Any:
        """Decode a JSON string option; non-strings pass through untouched."""
        if not isinstance(raw, str):
            return raw
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidInputFormatError(f"Invalid JSON for {option}: {e.msg}") from e

    def parse_variable_pairs(self, pairs: Iterable[str]) -> Dict[str, str]:
        """["name=Ava", "expr=a=b"] -> {"name": "Ava", "expr": "a=b"}"""
        result: Dict[str, str] = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not key or not sep:
                raise InvalidInputFormatError(
                    f'Invalid variable "{pair}". Use key=value (e.g. --var audience=developers).'
                )
            result[key] = value
        return result

    # --- Variables ---

    def classify_variables(self, raw: Any) -> VariableInput:
        """Map raw input onto one of the three accepted shapes."""
        if isinstance(raw, Mapping):
            return KeyedMap(mapping=raw)

        if isinstance(raw, (list, tuple)):
            if all(isinstance(item, str) for item in raw):
                return StringList(names=tuple(raw))
            if all(isinstance(item, Mapping) for item in raw):
                return ObjectList(items=tuple(raw))

        raise InvalidInputFormatError(
            "Variables must be an array of strings, an array of objects with "
            "a 'name' or 'key' field, or an object."
        )

    def normalize_variables(self, raw: Any) -> List[str]:
        """
        Canonical ordered list of variable names.

        Accepts the JSON text of any supported shape as well.
        """
        shape = self.classify_variables(self.load_json_option(raw, "variables"))

        if isinstance(shape, StringList):
            return list(shape.names)

        if isinstance(shape, KeyedMap):
            return [str(key) for key in shape.mapping.keys()]

        names = []
        for item in shape.items:
            name = item.get("name", item.get("key"))
            if not isinstance(name, str) or not name:
                raise InvalidInputFormatError(
                    f"Variable object {dict(item)!r} has no 'name' or 'key' field."
                )
            names.append(name)
        return names

    def normalize_tags(self, raw: Any) -> List[str]:
        tags = self.load_json_option(raw, "tags")
        if not isinstance(tags, (list, tuple)) or not all(isinstance(t, str) for t in tags):
            raise InvalidInputFormatError("Tags must be an array of strings.")
        return list(tags)

    def validate_format(self, template_format: Optional[str]) -> Optional[str]:
        if template_format is not None and template_format not in TEMPLATE_FORMATS:
            raise InvalidInputFormatError(
                f"Invalid template format {template_format!r}. Must be one of: {TEMPLATE_FORMATS}"
            )
        return template_format

    # --- Text sources and flags ---

    def resolve_text(
        self,
        inline: Optional[str],
        file_path: Optional[str],
        label: str,
        required: bool = False
    ) -> Optional[str]:
        """
        Pick inline text or the content of a file.

        Both given is ambiguous; neither given is only an error when required.
        """
        if inline is not None and file_path is not None:
            raise InvalidInputFormatError(f"Provide either --{label} or --{label}-file, not both.")

        if file_path is not None:
            try:
                return Path(file_path).read_text(encoding="utf-8")
            except OSError as e:
                raise InvalidInputFormatError(f"Cannot read {label} file {file_path}: {e}") from e

        if inline is None and required:
            raise InvalidInputFormatError(f"Provide --{label} or --{label}-file.")
        return inline

    def resolve_visibility(self, public: bool = False, private: bool = False) -> Optional[bool]:
        """True/False for exactly one flag, None for "no opinion"."""
        if public and private:
            raise InvalidInputFormatError("Choose either --public or --private, not both.")
        if public:
            return True
        if private:
            return False
        return None

    # --- Definitions ---

    def apply_defaults(self, definition: PromptDefinition) -> PromptDefinition:
        """Fill every missing field of a create request."""
        if not isinstance(definition.template, str):
            raise InvalidInputFormatError("Prompt template must be a string.")
        return replace(
            definition,
            template_format=self.validate_format(definition.template_format) or self.default_format,
            template_variables=list(definition.template_variables or []),
            tags=list(definition.tags or []),
            is_public=bool(definition.is_public) if definition.is_public is not None else False,
        )

    # --- Manifests ---

    def build_manifest(
        self,
        template: str,
        template_format: str,
        template_variables: List[str]
    ) -> Dict[str, Any]:
        """Serialize a string template the way the hub stores it."""
        try:
            prompt = PromptTemplate(
                template=template,
                input_variables=list(template_variables),
                template_format=template_format,
            )
        except ValueError as e:
            raise InvalidInputFormatError(f"Invalid {template_format} template: {e}") from e

        manifest = dumpd(prompt)
        kwargs = manifest.setdefault("kwargs", {})
        kwargs["template"] = template
        kwargs["template_format"] = template_format
        kwargs["input_variables"] = list(template_variables)
        return manifest

    def read_manifest(self, manifest: Any) -> ManifestContent:
        """Extract template, format and variables from a stored manifest."""
        if not isinstance(manifest, Mapping):
            return ManifestContent(template=manifest, template_format=None, template_variables=None)

        kwargs = manifest.get("kwargs")
        if not isinstance(kwargs, Mapping):
            kwargs = manifest

        template_format = kwargs.get("template_format")
        lc_id = manifest.get("id") or []
        if template_format is None and lc_id and lc_id[-1] == "PromptTemplate":
            # LangChain omits its own default when serializing
            template_format = "f-string"

        variables = kwargs.get("input_variables")
        return ManifestContent(
            template=kwargs.get("template"),
            template_format=template_format,
            template_variables=list(variables) if isinstance(variables, (list, tuple)) else None,
        )

    def render(self, manifest: Mapping[str, Any], variables: Optional[Mapping[str, Any]] = None) -> str:
        """Load a stored manifest and render it with the given variables."""
        try:
            prompt = load(dict(manifest))
        except (ValueError, KeyError, TypeError, ImportError, NotImplementedError) as e:
            raise UnsupportedTemplateTypeError(f"Cannot load stored prompt: {e}") from e

        if not hasattr(prompt, "invoke"):
            raise UnsupportedTemplateTypeError(
                f"Stored prompt of type {type(prompt).__name__} cannot be rendered."
            )

        try:
            value = prompt.invoke(dict(variables or {}))
        except KeyError as e:
            raise InvalidInputFormatError(f"Missing prompt variables: {e}") from e

        if hasattr(value, "to_string"):
            return value.to_string()
        return str(value)


template_codec = TemplateCodec()
