import copy
import logging

import pytest

from routedocs.errors import (
    CyclicSchemaError,
    InvalidOptionsError,
    MalformedPathError,
    MissingMetadataError,
    UnsupportedSchemaTypeError,
)
from routedocs.generator import SpecGenerator
from routedocs.routing.router import Router
from routedocs.schema.types import BooleanSchema, ObjectSchema, StringSchema

META = {"info": {"title": "Example API", "version": "1.1"}, "basePath": "/"}


class UnknownNode:
    kind = "alternatives"
    description = None
    default = None
    enum = None
    is_required = False


def signup_validate():
    return {
        "type": "json",
        "body": {"username": StringSchema(min_length=3, max_length=30).required()},
        "output": {200: {"body": {"userId": StringSchema(description="Newly created user id")}}},
    }


def test_generates_document_with_top_level_keys():
    gen = SpecGenerator()
    router = Router()
    router.post("/signup", meta={"swagger": {"summary": "User Signup"}}, validate=signup_validate())
    gen.add_router(router)

    spec = gen.generate_spec(META)

    assert all(k in spec for k in ("info", "basePath", "swagger", "paths", "tags"))
    assert spec["swagger"] == "2.0"
    assert spec["info"] == {"title": "Example API", "version": "1.1"}

    op = spec["paths"]["/signup"]["post"]
    assert op["summary"] == "User Signup"
    assert op["consumes"] == ["application/json"]
    body = op["parameters"][0]
    assert body["in"] == "body"
    username = body["schema"]["properties"]["username"]
    assert username == {"type": "string", "minLength": 3, "maxLength": 30}
    assert body["schema"]["required"] == ["username"]
    assert op["responses"]["200"]["schema"]["properties"]["userId"]["description"] == "Newly created user id"


def test_route_parameters_with_override_description():
    gen = SpecGenerator()
    router = Router()
    router.get(
        "/:action/:id/",
        meta={"swagger": {"summary": "User Signup", "parameters": [{"name": "action", "description": "action to take"}]}},
        validate=signup_validate(),
    )
    gen.add_router(router)

    spec = gen.generate_spec(META)

    assert "/{action}/{id}/" in spec["paths"]
    op = spec["paths"]["/{action}/{id}/"]["get"]
    assert [p["name"] for p in op["parameters"]] == ["action", "id"]
    assert len(op["parameters"]) == 2
    action = next(p for p in op["parameters"] if p["name"] == "action")
    assert action["description"] == "action to take"


def test_empty_default_responses():
    gen = SpecGenerator()
    router = Router()
    router.get("/empty-default-response", validate={"output": {201: {"body": {"ok": BooleanSchema()}}}})
    gen.add_router(router)

    spec = gen.generate_spec(META, {"defaultResponses": None})

    assert "200" not in spec["paths"]["/empty-default-response"]["get"]["responses"]


def test_default_response_injected_when_enabled():
    gen = SpecGenerator()
    router = Router()
    router.get("/output", validate={"output": {201: {"body": {"ok": BooleanSchema()}}}})
    gen.add_router(router)

    responses = gen.generate_spec(META)["paths"]["/output"]["get"]["responses"]

    assert "200" in responses and "201" in responses


def test_output_outside_validate_merges():
    gen = SpecGenerator()
    router = Router()
    router.get(
        "/output-outside-validate",
        validate={"output": {201: {"body": {"ok": BooleanSchema()}}}},
        meta={"swagger": {"output": {200: {"body": {"items": StringSchema()}}}}},
    )
    gen.add_router(router)

    spec = gen.generate_spec(META, {"defaultResponses": None})

    responses = spec["paths"]["/output-outside-validate"]["get"]["responses"]
    assert set(responses) == {"200", "201"}


def test_router_prefix():
    gen = SpecGenerator()
    router = Router(prefix="/api")
    router.get("/signup", meta={"swagger": {"summary": "User Signup"}}, validate={})
    gen.add_router(router)

    assert "/api/signup" in gen.generate_spec(META)["paths"]


def test_prefix_option_replaces_router_prefix():
    gen = SpecGenerator()
    router = Router(prefix="/api")
    router.get("/signup", meta={"swagger": {"summary": "User Signup"}}, validate={})
    gen.add_router(router, prefix="/other-api")

    paths = gen.generate_spec(META)["paths"]
    assert "/other-api/signup" in paths
    assert "/api/signup" not in paths


def test_last_registration_wins():
    gen = SpecGenerator()
    first = Router()
    first.post("/items", meta={"summary": "first"}, validate={"body": {"a": StringSchema()}})
    second = Router()
    second.post("/items", meta={"summary": "second"}, validate={"body": {"b": StringSchema()}})
    gen.add_router(first)
    gen.add_router(second)

    op = gen.generate_spec(META)["paths"]["/items"]["post"]
    assert op["summary"] == "second"
    assert list(op["parameters"][0]["schema"]["properties"]) == ["b"]


def test_generate_is_idempotent_and_does_not_mutate_inputs():
    gen = SpecGenerator()
    router = Router(prefix="/api")
    router.post("/signup", validate=signup_validate())
    router.get("/users/:id", validate={"query": {"full": BooleanSchema()}})
    gen.add_router(router)
    before = copy.deepcopy([r.model_dump() for r in gen.routes])

    a = gen.generate_spec(META)
    b = gen.generate_spec(META)

    assert a == b
    assert a is not b
    assert [r.model_dump() for r in gen.routes] == before


def test_tags_default_to_first_segment_and_dedupe():
    gen = SpecGenerator()
    router = Router()
    router.get("/users")
    router.get("/users/:id")
    router.get("/orders", meta={"tags": ["billing"]})
    router.get("/:id")
    gen.add_router(router)

    meta = dict(META, tags=[{"name": "users", "description": "User accounts"}])
    spec = gen.generate_spec(meta)

    assert spec["tags"] == [{"name": "users", "description": "User accounts"}, {"name": "billing"}]
    assert spec["paths"]["/users/{id}"]["get"]["tags"] == ["users"]
    assert "tags" not in spec["paths"]["/{id}"]["get"]


def test_custom_tag_strategy():
    gen = SpecGenerator()
    router = Router()
    router.get("/v1/users")
    gen.add_router(router)

    spec = gen.generate_spec(META, {"tagStrategy": lambda route, template: [template.literals[-1]]})
    assert spec["tags"] == [{"name": "users"}]


def test_metadata_extras_pass_through():
    gen = SpecGenerator()
    spec = gen.generate_spec(dict(META, host="api.example.com", schemes=["https"]))

    assert spec["host"] == "api.example.com"
    assert spec["schemes"] == ["https"]
    assert spec["paths"] == {}


@pytest.mark.parametrize(
    "metadata",
    [
        None,
        {"basePath": "/"},
        {"info": {"title": "x"}, "basePath": "/"},
        {"info": {"title": "x", "version": "1"}},
    ],
)
def test_missing_metadata(metadata):
    with pytest.raises(MissingMetadataError):
        SpecGenerator().generate_spec(metadata)


def test_invalid_options():
    with pytest.raises(InvalidOptionsError):
        SpecGenerator().generate_spec(META, {"maxDepth": 0})
    with pytest.raises(InvalidOptionsError):
        SpecGenerator().generate_spec(META, {"noSuchOption": True})


def test_malformed_path_skips_route_with_warning():
    gen = SpecGenerator()
    router = Router()
    router.get("/bad/:")
    router.get("/good")
    gen.add_router(router)

    report = gen.generate_report(META)

    assert list(report.document["paths"]) == ["/good"]
    assert len(report.warnings) == 1
    assert report.warnings[0].route == "GET /bad/:"


def test_malformed_path_strict():
    gen = SpecGenerator()
    router = Router()
    router.get("/bad/:")
    gen.add_router(router)

    with pytest.raises(MalformedPathError):
        gen.generate_spec(META, {"strict": True})


def test_unsupported_field_warns_and_is_omitted(caplog):
    gen = SpecGenerator()
    router = Router()
    router.post("/things", validate={"body": {"name": StringSchema(), "choice": UnknownNode()}})
    gen.add_router(router)
    received = []

    with caplog.at_level(logging.WARNING, logger="routedocs"):
        report = gen.generate_report(META, {"onWarning": received.append})

    schema = report.document["paths"]["/things"]["post"]["parameters"][0]["schema"]
    assert list(schema["properties"]) == ["name"]
    assert len(report.warnings) == 1
    assert "body.choice" in report.warnings[0].message
    assert received == list(report.warnings)
    assert "body.choice" in caplog.text


def test_unsupported_field_strict_aborts():
    gen = SpecGenerator()
    router = Router()
    router.post("/things", validate={"body": {"choice": UnknownNode()}})
    gen.add_router(router)

    with pytest.raises(UnsupportedSchemaTypeError):
        gen.generate_spec(META, {"strict": True})


def test_cyclic_schema_aborts_generation():
    props = {}
    node = ObjectSchema(properties=props)
    props["child"] = node
    gen = SpecGenerator()
    router = Router()
    router.post("/loop", validate={"body": node})
    gen.add_router(router)

    with pytest.raises(CyclicSchemaError):
        gen.generate_spec(META)


def test_body_on_get_is_not_a_parameter():
    gen = SpecGenerator()
    router = Router()
    router.get("/search", validate={"body": {"q": StringSchema()}, "query": {"page": StringSchema()}})
    gen.add_router(router)

    report = gen.generate_report(META)
    op = report.document["paths"]["/search"]["get"]
    assert [p["in"] for p in op["parameters"]] == ["query"]
    assert "consumes" not in op
    assert op["x-requestBody"]["schema"]["properties"] == {"q": {"type": "string"}}
    assert any("x-requestBody" in w.message for w in report.warnings)


def test_form_body_becomes_form_data_parameters():
    gen = SpecGenerator()
    router = Router()
    router.post("/upload", validate={"type": "multipart", "body": {"title": StringSchema().required()}})
    gen.add_router(router)

    op = gen.generate_spec(META)["paths"]["/upload"]["post"]
    assert op["consumes"] == ["multipart/form-data"]
    assert op["parameters"] == [{"name": "title", "in": "formData", "required": True, "type": "string"}]


def test_multi_method_route_and_meta_extras():
    gen = SpecGenerator()
    router = Router()
    router.route(
        ["GET", "HEAD"],
        "/health",
        meta={"swagger": {"operationId": "health", "produces": ["text/plain"], "deprecated": True}},
    )
    gen.add_router(router)

    ops = gen.generate_spec(META)["paths"]["/health"]
    assert set(ops) == {"get", "head"}
    assert ops["get"]["operationId"] == "health"
    assert ops["get"]["produces"] == ["text/plain"]
    assert ops["head"]["deprecated"] is True
    ops["get"]["responses"]["200"]["description"] = "changed"
    assert ops["head"]["responses"]["200"]["description"] == "Success"


def test_get_body_keeps_required_bounded_fields():
    gen = SpecGenerator()
    router = Router()
    router.get("/signup", meta={"swagger": {"summary": "User Signup"}}, validate=signup_validate())
    gen.add_router(router)

    op = gen.generate_spec(META)["paths"]["/signup"]["get"]

    assert op["parameters"] == []
    body = op["x-requestBody"]
    assert body["required"] is True
    assert body["schema"]["required"] == ["username"]
    assert body["schema"]["properties"]["username"] == {"type": "string", "minLength": 3, "maxLength": 30}


def test_constrained_and_suffixed_params_are_documented():
    gen = SpecGenerator()
    router = Router()
    router.get("/users/:id(\\d+)")
    router.get("/files/:name.json")
    gen.add_router(router)

    report = gen.generate_report(META, {"strict": True})
    paths = report.document["paths"]

    assert list(paths) == ["/users/{id}", "/files/{name}.json"]
    assert [p["name"] for p in paths["/users/{id}"]["get"]["parameters"]] == ["id"]
    assert [p["name"] for p in paths["/files/{name}.json"]["get"]["parameters"]] == ["name"]
    assert report.warnings == ()


def test_summary_and_description_always_present():
    gen = SpecGenerator()
    router = Router()
    router.get("/plain")
    router.get("/documented", meta={"summary": "S", "description": "D"})
    gen.add_router(router)

    paths = gen.generate_spec(META)["paths"]
    assert paths["/plain"]["get"]["summary"] == ""
    assert paths["/plain"]["get"]["description"] == ""
    assert paths["/documented"]["get"]["summary"] == "S"
    assert paths["/documented"]["get"]["description"] == "D"
