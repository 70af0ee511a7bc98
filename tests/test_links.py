from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from power3_core import config
from power3_core.errors import LinkError
from power3_core.links import (
    effective_show_results,
    generate_link_code,
    is_link_valid,
    link_status,
    mark_used,
    new_link,
    new_links,
    parse_ts,
    require_valid,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_link_codes_are_random_alphanumeric():
    codes = {generate_link_code() for _ in range(50)}
    assert len(codes) == 50
    assert all(len(c) == config.LINK_CODE_LENGTH and c.isalnum() for c in codes)
    assert len(generate_link_code(8)) == 8


def test_new_link_defaults():
    link = new_link(now=NOW)
    assert link["is_used"] is False
    assert link["used_at"] is None
    assert link["single_use"] is config.LINK_SINGLE_USE_DEFAULT
    assert link["show_results_immediately"] is None
    assert parse_ts(link["created_at"]) == NOW


def test_batch_generation_is_capped(monkeypatch):
    monkeypatch.setattr(config, "BATCH_LINKS_MAX", 3, raising=False)
    assert len(new_links(10)) == 3
    assert new_links(-4) == []
    assert len({l["link_code"] for l in new_links(3)}) == 3


def test_single_use_link_is_retired_after_use():
    link = new_link(single_use=True, now=NOW)
    assert link_status(link, NOW) == "valid"

    used = mark_used(link, NOW)
    assert link["is_used"] is False  # original left untouched
    assert used["used_at"] == NOW.isoformat()
    assert link_status(used, NOW) == "used"
    assert not is_link_valid(used, NOW)


def test_multi_use_link_stays_valid_after_use():
    used = mark_used(new_link(single_use=False, now=NOW), NOW)
    assert link_status(used, NOW) == "valid"


def test_expiry_wins_over_usage():
    link = new_link(expires_at="2024-05-01T11:00:00Z", single_use=True, now=NOW)
    assert link_status(mark_used(link, NOW), NOW) == "expired"
    assert link_status(link, NOW - timedelta(hours=2)) == "valid"


def test_naive_expiry_is_treated_as_utc():
    link = new_link(expires_at="2024-05-01T13:00:00", now=NOW)
    assert is_link_valid(link, NOW)
    assert not is_link_valid(link, NOW + timedelta(hours=2))


def test_require_valid_reports_reason():
    with pytest.raises(LinkError) as unknown:
        require_valid(None, "ABC")
    assert unknown.value.reason == "unknown"

    used = mark_used(new_link(single_use=True, now=NOW), NOW)
    with pytest.raises(LinkError) as retired:
        require_valid(used, used["link_code"], NOW)
    assert retired.value.reason == "used"
    assert retired.value.code == used["link_code"]


@pytest.mark.parametrize(
    "per_link, global_setting, expected",
    [
        (None, True, True),
        (None, False, False),
        (False, True, False),
        (True, False, True),
    ],
)
def test_effective_show_results(per_link, global_setting, expected):
    link = new_link(show_results=per_link, now=NOW)
    assert effective_show_results(link, global_setting) is expected


def test_show_results_without_link_is_false():
    assert effective_show_results(None, True) is False


def test_new_link_normalizes_expiry():
    link = new_link(expires_at="2024-05-01T11:00:00Z", now=NOW)
    assert link["expires_at"] == "2024-05-01T11:00:00+00:00"
    assert new_link(expires_at="", now=NOW)["expires_at"] is None
    with pytest.raises(ValueError):
        new_link(expires_at="next friday", now=NOW)
