import pytest

from ifa_architect.models import AnalysisScores, SlideContent, SlideType
from ifa_architect.normalizer import (
    BAR_COLOR,
    DEFAULT_DISCLAIMER,
    DEFAULT_INSIGHT,
    PIE_COLORS,
    SCENARIO_COLORS,
    SHAPERS,
    CompsView,
    GenericView,
    MarketGrowthView,
    RebalanceView,
    ScenarioView,
    TitleView,
    is_sell_row,
    normalize_slide,
    radar_axes,
)


def _slide(slide_type, **fields):
    return SlideContent(id="1", type=slide_type, title="t", **fields)


def test_every_slide_type_has_a_shaper():
    assert set(SHAPERS) == set(SlideType)


def test_full_deck_normalizes(full_deck):
    views = [normalize_slide(s) for s in full_deck.slides]
    assert isinstance(views[0], TitleView)
    assert views[-1].body_text == DEFAULT_DISCLAIMER


def test_rebalance_partitions_sell_and_buy_lines():
    slide = _slide(SlideType.REBALANCE_PROPOSAL, table_data=[
        {"label": "売却: トヨタ自動車", "value1": "500,000"},
        {"label": "A社", "value1": -100},
        {"label": "購入: NVIDIA", "value1": "600,000"},
    ])
    view = normalize_slide(slide)
    assert isinstance(view, RebalanceView)
    assert [line.label for line in view.sell] == ["トヨタ自動車", "A社"]
    assert [line.label for line in view.buy] == ["NVIDIA"]
    assert not view.nothing_to_sell


def test_rebalance_with_only_buys_has_nothing_to_sell():
    view = normalize_slide(_slide(SlideType.REBALANCE_PROPOSAL, table_data=[{"label": "Buy: Apple", "value1": 1}]))
    assert view.nothing_to_sell
    assert view.buy[0].label == "Apple"


@pytest.mark.parametrize("row, expected", [
    ({"label": "Sell Apple", "value1": 5}, True),
    ({"label": "SELL: Apple", "value1": 5}, True),
    ({"label": "一部売却 トヨタ", "value1": 5}, True),
    ({"label": "購入: Bestseller Holdings", "value1": "500,000"}, False),
    ({"label": "Bestseller Holdings", "value1": "500,000"}, False),
    ({"label": "Upsell Media", "value1": 100}, False),
    ({"label": "Apple", "value1": "▲300"}, True),
    ({"label": "Apple", "value1": "300"}, False),
    ({"label": "Apple"}, False),
])
def test_is_sell_row(row, expected):
    assert is_sell_row(row) is expected


def test_scenario_points_are_colored_by_scenario():
    view = normalize_slide(_slide(SlideType.SCENARIO_ANALYSIS, chart_data=[
        {"name": "楽観シナリオ", "value": 10},
        {"name": "Base", "value": 4},
        {"name": "Bear case", "value": -6},
    ]))
    assert isinstance(view, ScenarioView)
    assert [p.color for p in view.points] == [SCENARIO_COLORS["Bull"], SCENARIO_COLORS["Base"], SCENARIO_COLORS["Bear"]]
    assert view.body_text


@pytest.mark.parametrize("slide_type, kind", [
    (SlideType.RISK_ANALYSIS, "pie"),
    (SlideType.ASSET_OVERVIEW, "pie"),
    (SlideType.EXPECTED_EFFECT, "bar"),
])
def test_chart_kind_by_slide_type(slide_type, kind):
    view = normalize_slide(_slide(slide_type, chart_data=[{"name": "a", "value": 1}, {"name": "b", "value": "2"}]))
    assert view.chart.kind == kind
    assert [p.value for p in view.chart.points] == [1.0, 2.0]
    expected_colors = PIE_COLORS[:2] if kind == "pie" else [BAR_COLOR, BAR_COLOR]
    assert [p.color for p in view.chart.points] == expected_colors


def test_comps_rows_without_explanation_have_no_gap_note():
    view = normalize_slide(_slide(SlideType.FUNDAMENTAL_ANALYSIS, table_data=[
        {"metric": "PER", "label": "A vs B", "value1": 20.0, "value2": 15},
        {"metric": "PBR", "label": "A vs B", "value1": 2, "value2": 1, "explanation": "ブランド力"},
    ]))
    assert isinstance(view, CompsView)
    assert [r.has_gap_note for r in view.rows] == [False, True]
    assert view.rows[0].value1 == "20"


def test_market_growth_view():
    view = normalize_slide(_slide(SlideType.MARKET_GROWTH, bullet_points=["需要拡大"], table_data=[{"label": "2030", "value1": "1,200"}]))
    assert isinstance(view, MarketGrowthView)
    assert view.key_drivers == ("需要拡大",)
    assert view.growth_bars[0].value == 1200.0


def test_generic_view_numbers_points_and_reads_table():
    view = normalize_slide(_slide(SlideType.PROPOSAL_LIST, bullet_points=["a", "b"], table_data=[{"label": "NVIDIA", "value1": 5}]))
    assert isinstance(view, GenericView)
    assert view.numbered_points == ((1, "a"), (2, "b"))
    assert view.table == (("NVIDIA", "5"),)
    assert view.chart is None
    assert view.insight == DEFAULT_INSIGHT


def test_sources_line():
    view = normalize_slide(_slide(SlideType.TITLE, sources=[{"title": "IMF", "page": "p.3"}, {"title": "BOJ"}]))
    assert view.sources_line == "IMF (p.3), BOJ"


def test_normalize_does_not_mutate_slide():
    slide = _slide(SlideType.REBALANCE_PROPOSAL, table_data=[{"label": "売却: X", "value1": 1}])
    normalize_slide(slide)
    assert slide.table_data == [{"label": "売却: X", "value1": 1}]


def test_radar_axes():
    scores = AnalysisScores(suitability=8, market=9, growth=7, valuation=6, risk=5)
    axes = radar_axes(scores)
    assert [a.subject for a in axes] == ["適合性", "市場環境", "成長性", "割安性", "安全性"]
    assert [a.score for a in axes] == [8, 9, 7, 6, 5]
    assert all(a.full_mark == 10 for a in axes)
    assert radar_axes(None) == []


def test_buy_rows_with_sell_in_the_name_stay_on_the_buy_side():
    view = normalize_slide(_slide(SlideType.REBALANCE_PROPOSAL, table_data=[
        {"label": "購入: Bestseller Holdings", "value1": "500,000"},
        {"label": "Buy: Upsell Media", "value1": 200},
    ]))
    assert view.nothing_to_sell
    assert [line.label for line in view.buy] == ["Bestseller Holdings", "Upsell Media"]
