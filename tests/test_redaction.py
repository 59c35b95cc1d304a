from types import MappingProxyType

import pytest

from oai_proxy.core.config import CONFIG_FIELDS, load_config
from oai_proxy.core.redaction import (
    REDACTED,
    SENSITIVE_FIELDS,
    check_sensitive_fields,
    display_value,
    list_config,
)


def test_sensitive_fields_exist_in_schema():
    check_sensitive_fields(CONFIG_FIELDS)
    assert SENSITIVE_FIELDS <= {spec.attr for spec in CONFIG_FIELDS}


def test_unknown_sensitive_field_is_rejected():
    with pytest.raises(ValueError, match="bogus_key"):
        check_sensitive_fields(CONFIG_FIELDS, {"proxy_key", "bogus_key"})


def test_port_only_environment():
    listed = list_config(load_config({"PORT": "8080"}))
    assert listed["port"] == "8080"
    for key in ("proxyKey", "openaiKey", "googleSheetsKey", "googleSheetsSpreadsheetId", "promptLoggingBackend"):
        assert key not in listed


def test_defaults_listing_in_schema_order():
    listed = list_config(load_config({}))
    assert list(listed) == [
        "port",
        "modelRateLimit",
        "maxOutputTokens",
        "rejectDisallowed",
        "rejectSampleRate",
        "rejectMessage",
        "logLevel",
        "checkKeys",
        "quotaDisplayMode",
        "promptLogging",
        "queueMode",
    ]
    assert listed["rejectDisallowed"] == "false"
    assert listed["rejectSampleRate"] == "0.2"


def test_sensitive_values_are_masked():
    env = {
        "PROXY_KEY": "sk-abc123",
        "OPENAI_KEY": "sk-1,sk-2",
        "GOOGLE_SHEETS_KEY": "ZXhhbXBsZQ==",
        "GOOGLE_SHEETS_SPREADSHEET_ID": "1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms",
        "REJECT_SAMPLE_RATE": "0.5",
    }
    listed = list_config(load_config(env))
    assert listed["proxyKey"] == REDACTED
    assert listed["openaiKey"] == REDACTED
    assert listed["googleSheetsKey"] == REDACTED
    assert listed["googleSheetsSpreadsheetId"] == REDACTED
    assert listed["rejectSampleRate"] == "0.5"
    rendered = " ".join(listed.values())
    for secret in env.values():
        if secret != "0.5":
            assert secret not in rendered


def test_mask_does_not_depend_on_value_type():
    listed = list_config(load_config({"PROXY_KEY": "42", "GOOGLE_SHEETS_KEY": "true"}))
    assert listed["proxyKey"] == REDACTED
    assert listed["googleSheetsKey"] == REDACTED


def test_absent_and_undefined_values_are_omitted():
    listed = list_config(load_config({"PROXY_KEY": "", "REJECT_MESSAGE": "undefined", "LOG_LEVEL": "null"}))
    assert "proxyKey" not in listed
    assert "rejectMessage" not in listed
    assert "logLevel" not in listed


def test_listing_is_idempotent():
    config = load_config({"PROXY_KEY": "secret", "QUEUE_MODE": "random"})
    assert list_config(config) == list_config(config)


def test_display_value():
    assert display_value(None) == ""
    assert display_value(True) == "true"
    assert display_value(False) == "false"
    assert display_value(7860) == "7860"
    assert display_value(0.2) == "0.2"
    assert display_value(["a", 1, True]) == "a,1,true"
    assert display_value({"k": 2}) == '{"k":2}'
    assert display_value(1.0) == "1"
    assert display_value(("a", 2)) == "a,2"
    assert display_value(MappingProxyType({"k": MappingProxyType({"n": (1, 2)})})) == '{"k":{"n":[1,2]}}'
    assert display_value("text") == "text"


def test_composite_listing_is_stable():
    config = load_config({"QUEUE_MODE": '["fair"]'})
    before = list_config(config)
    with pytest.raises(AttributeError):
        config.queue_mode.append("random")
    assert list_config(config) == before
    assert before["queueMode"] == "fair"


def test_integral_numbers_display_without_fraction():
    listed = list_config(load_config({"REJECT_SAMPLE_RATE": "1.0", "MAX_OUTPUT_TOKENS": "1e3"}))
    assert listed["rejectSampleRate"] == "1"
    assert listed["maxOutputTokens"] == "1000"
