from pacstatus.metric import _normalize_api_endpoint, api_call_count, record_api_call


def test_record_api_call_tracks_endpoint_label():
    before = api_call_count.labels(endpoint="check-runs/xxx")._value.get()
    record_api_call(endpoint="/repos/org/repo/check-runs/42")
    after = api_call_count.labels(endpoint="check-runs/xxx")._value.get()
    assert after == before + 1


def test_normalize_api_endpoint_examples():
    assert _normalize_api_endpoint("/app/installations/123/access_tokens") == (
        "installation_token"
    )
    assert _normalize_api_endpoint(
        "/repos/org/repo/commits/abc/check-runs?app_id=5"
    ) == "commits/check-runs"
    assert _normalize_api_endpoint("/repos/org/repo/check-runs") == "check-runs"
    assert _normalize_api_endpoint("/repos/org/repo/statuses/abc") == "statuses"
    assert _normalize_api_endpoint("/repos/org/repo/issues/3/comments") == (
        "issues/comments"
    )
