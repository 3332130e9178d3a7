import pytest

from pdf4me_connector.endpoints import ENDPOINTS, RequestBodyBuilder, ResponseKind, get_endpoint
from pdf4me_connector.errors import ValidationError


def test_each_endpoint_declares_its_async_flag_key() -> None:
    assert get_endpoint("Merge").async_key == "async"
    assert get_endpoint("Optimize").async_key == "async"
    assert get_endpoint("ConvertToPdf").async_key == "IsAsync"
    assert get_endpoint("SplitPdf").response_kind == ResponseKind.JSON
    assert all(spec.path == f"/api/v2/{name}" for name, spec in ENDPOINTS.items())


def test_unknown_endpoint_is_rejected() -> None:
    with pytest.raises(ValidationError):
        get_endpoint("Teleport")


def test_builder_sets_async_flag_and_required_fields() -> None:
    body = (
        RequestBodyBuilder(get_endpoint("Rotate"))
        .set("docContent", "JVBERi0=")
        .set("docName", "a.pdf")
        .set("rotationType", "Clockwise")
        .build()
    )

    assert body == {
        "docContent": "JVBERi0=",
        "docName": "a.pdf",
        "rotationType": "Clockwise",
        "IsAsync": True,
    }


def test_builder_reports_missing_required_fields() -> None:
    builder = RequestBodyBuilder(get_endpoint("Protect")).set("docContent", "JVBERi0=").set("docName", " ")

    with pytest.raises(ValidationError) as exc_info:
        builder.build()

    assert "docName" in str(exc_info.value)
    assert "password" in str(exc_info.value)


def test_builder_rejects_unknown_and_reserved_fields() -> None:
    builder = RequestBodyBuilder(get_endpoint("Optimize"))

    with pytest.raises(ValidationError):
        builder.set("colour", "red")
    with pytest.raises(ValidationError):
        builder.set("async", False)


def test_set_optional_skips_blank_values() -> None:
    builder = RequestBodyBuilder(get_endpoint("Stamp"))
    builder.set("docContent", "JVBERi0=").set("docName", "a.pdf").set("text", "DRAFT")
    builder.set_optional("alignX", "").set_optional("pages", None).set_optional("opacity", 50)

    body = builder.build()

    assert "alignX" not in body
    assert "pages" not in body
    assert body["opacity"] == 50


def test_profiles_can_supply_required_fields() -> None:
    body = (
        RequestBodyBuilder(get_endpoint("Optimize"))
        .set("docContent", "JVBERi0=")
        .set("docName", "a.pdf")
        .with_profiles('{"optimizeProfile": "Max", "imageQuality": 40}')
        .build()
    )

    assert body["optimizeProfile"] == "Max"
    assert body["profiles"] == '{"imageQuality":40}'
    assert body["async"] is True
