from __future__ import annotations

from wanderlog._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "cityName": "Lisbon",
        "token": "tok-1",
        "Authorization": "Bearer tok-1",
        "password": "pw",
        "nested": {"accessToken": "abc", "email": "a@b.c", "notes": "fine"},
    }

    redacted = redact_for_log(payload)
    assert redacted["cityName"] == "Lisbon"
    assert redacted["token"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["password"] == "<redacted>"
    assert redacted["nested"]["accessToken"] == "<redacted>"
    assert redacted["nested"]["email"] == "<redacted>"
    assert redacted["nested"]["notes"] == "fine"


def test_redact_for_log_masks_bearer_values_under_any_key() -> None:
    redacted = redact_for_log({"header": "bearer secret", "items": ["Bearer other", 1, None]})
    assert redacted["header"] == "Bearer <redacted>"
    assert redacted["items"] == ["Bearer <redacted>", 1, None]


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
