import json
import re
from collections.abc import Mapping
from pathlib import Path

import pytest

from safe_stringify.config import SanitizerOptions
from safe_stringify.encoding import stringify
from safe_stringify.redaction import RedactionPolicy, join_path
from safe_stringify.traversal import prepare_for_serialization

FIXTURE_PATH = Path(__file__).parent / "fixtures" / "01-example-payload.json"
SUBSYSTEM_JSON = '{"name":"fs reader","widgetsAdded":10}'


@pytest.fixture
def fixture_payload() -> dict:
    with FIXTURE_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def _plain(payload: object) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def test_redacts_nothing_by_default(fixture_payload: dict) -> None:
    assert stringify(fixture_payload) == _plain(fixture_payload)


def test_only_redacts_inside_redacted_paths(fixture_payload: dict) -> None:
    assert stringify(fixture_payload, None, None, {"redactedKeys": ["subsystem"]}) == _plain(fixture_payload)
    redacted = stringify(
        fixture_payload,
        None,
        None,
        {"redactedKeys": ["subsystem"], "redactedPaths": ["events.[].metaData"]},
    )
    assert redacted == _plain(fixture_payload).replace(SUBSYSTEM_JSON, '"[REDACTED]"')


def test_ignores_case_when_redacting_keys(fixture_payload: dict) -> None:
    assert stringify(fixture_payload, None, None, {"redactedKeys": ["SuBsYsTeM"]}) == _plain(fixture_payload)
    redacted = stringify(
        fixture_payload,
        None,
        None,
        {"redactedKeys": ["SuBsYsTeM"], "redactedPaths": ["events.[].metaData"]},
    )
    assert redacted == _plain(fixture_payload).replace(SUBSYSTEM_JSON, '"[REDACTED]"')


def test_redacts_with_patterns(fixture_payload: dict) -> None:
    redacted = stringify(
        fixture_payload,
        None,
        None,
        {
            "redactedKeys": [re.compile("na*"), re.compile("widget(s?)added", re.IGNORECASE)],
            "redactedPaths": ["events.[].metaData"],
        },
    )
    assert redacted == _plain(fixture_payload).replace(
        SUBSYSTEM_JSON,
        '{"name":"[REDACTED]","widgetsAdded":"[REDACTED]"}',
    )


def test_snake_case_options_and_pattern_strings() -> None:
    options = SanitizerOptions(redacted_key_patterns=["^x-"], redacted_paths=["headers"])
    payload = {"headers": {"X-Token": "a", "x-trace": "b", "accept": "json"}}
    assert prepare_for_serialization(payload, options) == {
        "headers": {"X-Token": "a", "x-trace": "[REDACTED]", "accept": "json"}
    }


def test_redacted_values_are_not_read_or_counted() -> None:
    class _Config(Mapping):
        def __getitem__(self, key: str) -> str:
            if key == "password":
                raise AssertionError("redacted value was read")
            return "ops"

        def __iter__(self):
            return iter(["password", "user"])

        def __len__(self) -> int:
            return 2

    payload = {"config": _Config()}
    options = {"redactedKeys": ["password"], "redactedPaths": ["config"], "max_edges": 2, "min_preserved_depth": 0}
    assert prepare_for_serialization(payload, options) == {"config": {"password": "[REDACTED]", "user": "ops"}}


def test_redaction_applies_to_object_attributes() -> None:
    class _Credentials:
        def __init__(self) -> None:
            self.user = "ops"
            self.token = "s3cr3t"

    payload = {"auth": _Credentials()}
    options = {"redactedKeys": ["token"], "redactedPaths": ["auth"]}
    assert prepare_for_serialization(payload, options) == {"auth": {"user": "ops", "token": "[REDACTED]"}}


def test_path_prefix_matches_whole_segments_only() -> None:
    policy = RedactionPolicy.build(["subsystem"], ["events.[].meta"])
    assert policy.path_matches("events.[].meta")
    assert policy.path_matches("events.[].meta.inner")
    assert not policy.path_matches("events.[].metaData")
    assert not policy.path_matches("events")


def test_policy_requires_both_keys_and_paths() -> None:
    assert not RedactionPolicy.build(["password"], []).should_redact("", "password")
    assert not RedactionPolicy.build([], [""]).should_redact("", "password")
    assert RedactionPolicy.build(["PASSWORD"], [""]).should_redact("", "Password")


def test_root_path_covers_every_depth() -> None:
    policy = RedactionPolicy.build(["token"], [""])
    assert policy.path_matches("a")
    assert policy.path_matches("events.[].metaData")

    payload = {"token": "t", "a": {"token": "t2", "list": [{"token": "t3"}]}}
    assert prepare_for_serialization(payload, {"redactedKeys": ["token"], "redactedPaths": [""]}) == {
        "token": "[REDACTED]",
        "a": {"token": "[REDACTED]", "list": [{"token": "[REDACTED]"}]},
    }


def test_join_path() -> None:
    assert join_path(("events", "[]", "metaData")) == "events.[].metaData"
    assert join_path(()) == ""
