from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]
RequestType = Literal["json", "form", "multipart"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, populate_by_name=True)


def _status_keys(v: Any) -> Any:
    if v is None:
        return {}
    if isinstance(v, Mapping):
        return {str(k): spec for k, spec in v.items()}
    return v


class OutputSpec(_Frozen):
    body: Any = None
    headers: Any = None
    description: Optional[str] = None


# status keys arrive as ints (201) or strings ("201"); documents key them by string
OutputMap = Annotated[dict[str, OutputSpec], BeforeValidator(_status_keys)]


class ParameterOverride(_Frozen):
    name: str
    description: Optional[str] = None
    location: Optional[str] = Field(None, alias="in")


class ValidationSpec(_Frozen):
    type: Optional[RequestType] = None
    body: Any = None
    query: Any = None
    header: Any = None
    params: Any = None
    output: OutputMap = Field(default_factory=dict)


class RouteMeta(_Frozen):
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[tuple[str, ...]] = None
    operation_id: Optional[str] = Field(None, alias="operationId")
    deprecated: Optional[bool] = None
    parameters: tuple[ParameterOverride, ...] = ()
    output: OutputMap = Field(default_factory=dict)
    extra: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_swagger(cls, data: Any) -> Any:
        # routers keep doc metadata under meta["swagger"]; unknown keys go to extra
        if not isinstance(data, Mapping):
            return data
        if "swagger" in data and isinstance(data["swagger"], Mapping):
            data = data["swagger"]
        known = set()
        for name, f in cls.model_fields.items():
            known.add(name)
            if f.alias:
                known.add(f.alias)
        out = {k: v for k, v in data.items() if k in known}
        extra = dict(out.get("extra") or {})
        extra.update({k: v for k, v in data.items() if k not in known})
        out["extra"] = extra
        return out


class RouteDescriptor(_Frozen):
    """A method + path + optional validation/metadata bundle registered with a router."""

    methods: tuple[HttpMethod, ...]
    path: str
    validation: Optional[ValidationSpec] = Field(None, alias="validate")
    meta: Optional[RouteMeta] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_method(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if "methods" not in data and "method" in data:
            data["methods"] = data.pop("method")
        methods = data.get("methods")
        if isinstance(methods, str):
            methods = [methods]
        if methods is not None:
            data["methods"] = tuple(str(m).upper().strip() for m in methods)
        return data


class CollectedRoute(_Frozen):
    """A route as held by the collector: the descriptor plus the prefix it was registered under."""

    route: RouteDescriptor
    prefix: str = ""
    order: int = 0


class GenerationWarning(_Frozen):
    route: str
    message: str

