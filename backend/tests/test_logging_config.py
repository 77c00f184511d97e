from app.core.logging_config import CENSORED, censor_sensitive_data


def test_sensitive_fields_are_censored():
    event = censor_sensitive_data(
        None,
        "info",
        {"event": "genai_call", "api_key": "AIza-secret", "extra": {"Authorization": "Bearer x"}, "model": "m"},
    )
    assert event["api_key"] == CENSORED
    assert event["extra"]["Authorization"] == CENSORED
    assert event["event"] == "genai_call"
    assert event["model"] == "m"


def test_key_query_param_is_masked_in_strings():
    event = censor_sensitive_data(
        None,
        "warning",
        {"event": "POST https://genai.test/v1beta/models/m:generateContent?key=AIza123&alt=json failed"},
    )
    assert "AIza123" not in event["event"]
    assert f"?key={CENSORED}&alt=json" in event["event"]
