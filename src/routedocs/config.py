from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from routedocs.errors import InvalidOptionsError, MissingMetadataError

SWAGGER_VERSION = "2.0"
DEFAULT_RESPONSES: dict[str, str] = {"200": "Success"}
DEFAULT_MAX_DEPTH = 32


def _response_description(value: Any) -> str:
    # accepts "Success" or {"description": "Success"}
    if isinstance(value, Mapping):
        return str(value.get("description", "") or "")
    return "" if value is None else str(value)


class GenerateOptions(BaseModel):
    """Options for a single generate_spec call.

    default_responses: status -> description injected for every status not
        declared explicitly. None (or an empty mapping) disables injection.
    strict: unsupported schema types and malformed paths abort generation
        instead of being skipped with a warning.
    max_depth: maximum schema nesting depth before SchemaDepthError.
    tag_strategy: callable(route, template) -> list of tag names.
    on_warning: callable(GenerationWarning) invoked for every recorded warning.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    default_responses: Optional[dict[str, str]] = Field(
        default_factory=lambda: dict(DEFAULT_RESPONSES), alias="defaultResponses"
    )
    strict: bool = False
    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=1, alias="maxDepth")
    swagger_version: str = Field(SWAGGER_VERSION, alias="swaggerVersion")
    tag_strategy: Optional[Callable[..., Any]] = Field(None, alias="tagStrategy")
    on_warning: Optional[Callable[..., Any]] = Field(None, alias="onWarning")

    @field_validator("default_responses", mode="before")
    @classmethod
    def _normalize_default_responses(cls, v: Any) -> Any:
        if not v:
            return None
        if not isinstance(v, Mapping):
            raise ValueError("defaultResponses must be a mapping of status -> description")
        return {str(k): _response_description(d) for k, d in v.items()}


class SpecInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    version: str

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class SpecMetadata(BaseModel):
    """Top-level document metadata. Unknown keys (host, schemes, ...) pass through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    info: SpecInfo
    base_path: str = Field(alias="basePath")
    tags: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_objects(cls, v: Any) -> Any:
        if v is None:
            return []
        return [{"name": t} if isinstance(t, str) else t for t in v]


def resolve_options(options: Union[GenerateOptions, Mapping[str, Any], None]) -> GenerateOptions:
    if options is None:
        return GenerateOptions()
    if isinstance(options, GenerateOptions):
        return options
    try:
        return GenerateOptions.model_validate(dict(options))
    except (ValidationError, TypeError, ValueError) as exc:
        raise InvalidOptionsError(f"invalid generate options: {exc}") from exc


def resolve_metadata(metadata: Union[SpecMetadata, Mapping[str, Any], None]) -> SpecMetadata:
    if isinstance(metadata, SpecMetadata):
        return metadata
    if metadata is None:
        raise MissingMetadataError(["info.title", "info.version", "basePath"])
    try:
        return SpecMetadata.model_validate(dict(metadata))
    except ValidationError as exc:
        missing = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err["loc"])
            if loc not in missing:
                missing.append(loc)
        raise MissingMetadataError(missing) from exc
