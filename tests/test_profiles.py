import json

from pdf4me_connector.hooks.observability import EventLogger
from pdf4me_connector.profiles import sanitize_profiles


def test_smart_quotes_and_missing_braces_are_normalized() -> None:
    body = {"docName": "a.pdf", "profiles": "“outputDataFormat”: “base64”"}

    sanitize_profiles(body)

    assert json.loads(body["profiles"]) == {"outputDataFormat": "base64"}


def test_single_quoted_profiles_are_accepted() -> None:
    body = {"profiles": "{'compressionLevel': 3, 'keepMetadata': true}"}

    sanitize_profiles(body)

    assert body["profiles"] == '{"compressionLevel":3,"keepMetadata":true}'


def test_recognized_keys_are_lifted_without_overriding_body() -> None:
    body = {"docName": "a.pdf", "pages": "", "rotation": 45, "profiles": '{"pages": "1-3", "rotation": 90, "dpi": 300}'}

    sanitize_profiles(body, recognized_keys=("pages", "rotation"))

    assert body["pages"] == "1-3"
    assert body["rotation"] == 45
    assert json.loads(body["profiles"]) == {"dpi": 300}


def test_profiles_removed_when_everything_is_lifted() -> None:
    body = {"profiles": {"pages": "2"}}

    sanitize_profiles(body, recognized_keys=("pages",))

    assert body == {"pages": "2"}


def test_blank_profiles_are_dropped() -> None:
    body = {"docName": "a.pdf", "profiles": "   "}

    sanitize_profiles(body)

    assert body == {"docName": "a.pdf"}


def test_unparseable_profiles_are_dropped_with_warning() -> None:
    logger = EventLogger()
    body = {"docName": "a.pdf", "profiles": "this is not json at all"}

    sanitize_profiles(body, logger=logger)

    assert "profiles" not in body
    warnings = logger.list_events("warning")
    assert len(warnings) == 1
    assert warnings[0].name == "profiles"


def test_body_without_profiles_is_untouched() -> None:
    body = {"docName": "a.pdf"}

    sanitize_profiles(body, recognized_keys=("docName",))

    assert body == {"docName": "a.pdf"}
