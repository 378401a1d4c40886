from ifa_architect.models import ProposalSettings
from ifa_architect.proposal_settings import (
    describe_requests,
    resolve_requests,
    set_count,
    toggle_sub_category,
    toggle_type,
)


def test_default_settings_request_three_stocks():
    requests = resolve_requests(ProposalSettings())
    assert [(r.type, r.count) for r in requests] == [("Stock", 3)]


def test_requests_follow_canonical_order_regardless_of_insertion():
    settings = ProposalSettings(proposal_counts={"ETF": 1, "Bond": 2, "Stock": 1, "Crypto": 1})
    assert [r.type for r in resolve_requests(settings)] == ["Stock", "Bond", "ETF", "Crypto"]


def test_zero_count_equals_absent_key():
    with_zero = ProposalSettings(proposal_counts={"Stock": 2, "Bond": 0})
    without = ProposalSettings(proposal_counts={"Stock": 2})
    assert resolve_requests(with_zero) == resolve_requests(without)


def test_toggle_off_and_on_preserves_sub_categories():
    settings = toggle_sub_category(ProposalSettings(), "Stock", "半導体")
    off = toggle_type(settings, "Stock")
    assert off.proposal_counts["Stock"] == 0
    assert resolve_requests(off) == []
    assert off.proposal_details["Stock"] == ["半導体"]

    on = toggle_type(off, "Stock")
    assert on.proposal_counts["Stock"] == 1
    assert resolve_requests(on)[0].sub_categories == ("半導体",)


def test_set_count_clamps():
    settings = ProposalSettings()
    assert set_count(settings, "Bond", 25).proposal_counts["Bond"] == 10
    assert set_count(settings, "Bond", 0).proposal_counts["Bond"] == 1
    assert set_count(settings, "Bond", "x").proposal_counts["Bond"] == 1


def test_toggle_sub_category_twice_removes_it():
    settings = toggle_sub_category(ProposalSettings(), "Bond", "米国国債")
    assert settings.proposal_details["Bond"] == ["米国国債"]
    assert toggle_sub_category(settings, "Bond", "米国国債").proposal_details["Bond"] == []


def test_unknown_sub_category_is_ignored():
    settings = ProposalSettings()
    assert toggle_sub_category(settings, "Stock", "宇宙旅行") is settings


def test_describe_requests():
    settings = toggle_sub_category(ProposalSettings(proposal_counts={"Stock": 3}), "Stock", "半導体")
    settings = toggle_sub_category(settings, "Stock", "銀行")
    assert describe_requests(resolve_requests(settings)) == "株式 (Stock): 3銘柄 (特に希望するセクター/種別: 半導体、銀行)"
