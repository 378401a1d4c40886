"""
Slide content normalizer.

Each slide type has its own view shape. `normalize_slide` is a total dispatch
over SlideType: it reads the loosely typed tableData/chartData rows of a
stored slide and returns the typed view the renderer and the deck exporter
consume. The stored slide is never mutated.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ifa_architect.ledger import parse_amount
from ifa_architect.models import AnalysisScores, SlideContent, SlideType

logger = logging.getLogger(__name__)

SELL_MARKERS = ("売却",)
BUY_PREFIXES = ("購入:", "購入：", "Buy:")
_SELL_WORD_RE = re.compile(r"(?<![A-Za-z])sell(?![A-Za-z])", re.IGNORECASE)
LABEL_PREFIXES = ("売却: ", "Sell: ", "購入: ", "Buy: ")

PIE_CHART_TYPES = {SlideType.RISK_ANALYSIS, SlideType.ASSET_OVERVIEW}
PIE_COLORS = ["#1e3a8a", "#3b82f6", "#60a5fa", "#93c5fd", "#bfdbfe"]
BAR_COLOR = "#3b82f6"

SCENARIO_COLORS = {"Bull": "#4ade80", "Base": "#94a3b8", "Bear": "#f87171"}
SCENARIO_MARKERS = {"Bull": ("Bull", "楽観"), "Bear": ("Bear", "悲観")}

RADAR_AXES = (
    ("suitability", "適合性"),
    ("market", "市場環境"),
    ("growth", "成長性"),
    ("valuation", "割安性"),
    ("risk", "安全性"),
)
RADAR_FULL_MARK = 10

DEFAULT_SCENARIO_TEXT = "市場環境の変化に応じた3つのシナリオ分析です。"
DEFAULT_COMPS_TEXT = "対象銘柄と競合他社の主要指標を比較し、現在のバリュエーションの妥当性を検証します。"
DEFAULT_INSIGHT = "AIによる分析: ポートフォリオの分散効果と長期的な成長ポテンシャルを最大化するための構成となっています。"
DEFAULT_DISCLAIMER = (
    "本資料は、情報提供を目的として作成されたものであり、証券その他の金融商品の売買の勧誘を目的としたものではありません。"
    "本資料に含まれる情報は、信頼できると判断した情報源から入手したものですが、その正確性・完全性を保証するものではありません。"
    "投資判断は、最終的にはお客様ご自身で行っていただきますようお願いいたします。"
    "過去の実績は将来の運用成果を保証するものではありません。"
)
NOTHING_TO_SELL = "売却対象なし"


# ---------------------------------------------------------------------------
# View variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChartPoint:
    name: str
    value: float
    color: str


@dataclass(frozen=True)
class Chart:
    kind: str  # "pie" | "bar"
    points: Tuple[ChartPoint, ...]


@dataclass(frozen=True)
class TradeLine:
    label: str
    value: str


@dataclass(frozen=True)
class CompsRow:
    metric: str
    label: str
    value1: str
    value2: str
    explanation: Optional[str] = None

    @property
    def has_gap_note(self) -> bool:
        return bool(self.explanation)


@dataclass(frozen=True)
class ScenarioPoint:
    name: str
    value: float
    scenario: str  # Bull | Base | Bear
    color: str


@dataclass(frozen=True)
class RadarAxis:
    key: str
    subject: str
    score: int
    full_mark: int = RADAR_FULL_MARK


@dataclass(frozen=True)
class SlideView:
    slide_type: SlideType
    title: str
    subtitle: Optional[str]
    sources_line: Optional[str]


@dataclass(frozen=True)
class TitleView(SlideView):
    pass


@dataclass(frozen=True)
class DisclaimerView(SlideView):
    body_text: str = DEFAULT_DISCLAIMER


@dataclass(frozen=True)
class RebalanceView(SlideView):
    body_text: Optional[str] = None
    sell: Tuple[TradeLine, ...] = ()
    buy: Tuple[TradeLine, ...] = ()

    @property
    def nothing_to_sell(self) -> bool:
        return not self.sell


@dataclass(frozen=True)
class ScenarioView(SlideView):
    body_text: str = DEFAULT_SCENARIO_TEXT
    points: Tuple[ScenarioPoint, ...] = ()


@dataclass(frozen=True)
class CompsView(SlideView):
    body_text: str = DEFAULT_COMPS_TEXT
    rows: Tuple[CompsRow, ...] = ()


@dataclass(frozen=True)
class MarketGrowthView(SlideView):
    body_text: Optional[str] = None
    key_drivers: Tuple[str, ...] = ()
    growth_bars: Tuple[ChartPoint, ...] = ()


@dataclass(frozen=True)
class GenericView(SlideView):
    body_text: Optional[str] = None
    numbered_points: Tuple[Tuple[int, str], ...] = ()
    table: Tuple[Tuple[str, str], ...] = ()
    chart: Optional[Chart] = None
    insight: str = DEFAULT_INSIGHT


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _number(value: Any) -> float:
    parsed = parse_amount(value)
    return parsed if parsed is not None else 0.0


def _strip_prefix(label: str) -> str:
    for prefix in LABEL_PREFIXES:
        label = label.replace(prefix, "")
    return label


def is_sell_row(row: Dict[str, Any]) -> bool:
    """
    Sell when the label carries a sell marker or the primary value is negative.
    An explicit buy prefix always means buy.
    """
    label = _text(row.get("label")).strip()
    if label.startswith(BUY_PREFIXES):
        return False
    if any(marker in label for marker in SELL_MARKERS) or _SELL_WORD_RE.search(label):
        return True
    value = row.get("value1")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value < 0
    return _text(value).strip().startswith(("-", "−", "－", "▲"))


def classify_scenario(name: str) -> str:
    for scenario, markers in SCENARIO_MARKERS.items():
        if any(marker in name for marker in markers):
            return scenario
    return "Base"


def chart_kind(slide_type: SlideType) -> str:
    return "pie" if slide_type in PIE_CHART_TYPES else "bar"


def radar_axes(scores: Optional[AnalysisScores]) -> List[RadarAxis]:
    """The five radar axes in fixed order, or [] when scores are absent."""
    if scores is None:
        return []
    return [RadarAxis(key, subject, getattr(scores, key)) for key, subject in RADAR_AXES]


def _sources_line(slide: SlideContent) -> Optional[str]:
    if not slide.sources:
        return None
    return ", ".join(s.title + (f" ({s.page})" if s.page else "") for s in slide.sources)


def _base(slide: SlideContent) -> Dict[str, Any]:
    return {
        "slide_type": slide.type,
        "title": slide.title,
        "subtitle": slide.subtitle,
        "sources_line": _sources_line(slide),
    }


def _chart(slide: SlideContent) -> Optional[Chart]:
    if not slide.chart_data:
        return None
    kind = chart_kind(slide.type)
    points = tuple(
        ChartPoint(
            name=_text(p.get("name")),
            value=_number(p.get("value")),
            color=PIE_COLORS[i % len(PIE_COLORS)] if kind == "pie" else BAR_COLOR,
        )
        for i, p in enumerate(slide.chart_data)
    )
    return Chart(kind, points)


# ---------------------------------------------------------------------------
# Per-type shaping
# ---------------------------------------------------------------------------

def _title_view(slide: SlideContent) -> SlideView:
    return TitleView(**_base(slide))


def _disclaimer_view(slide: SlideContent) -> SlideView:
    return DisclaimerView(**_base(slide), body_text=slide.body_text or DEFAULT_DISCLAIMER)


def _rebalance_view(slide: SlideContent) -> SlideView:
    sell, buy = [], []
    for row in slide.table_data or []:
        line = TradeLine(_strip_prefix(_text(row.get("label"))), _text(row.get("value1")))
        (sell if is_sell_row(row) else buy).append(line)
    return RebalanceView(**_base(slide), body_text=slide.body_text, sell=tuple(sell), buy=tuple(buy))


def _scenario_view(slide: SlideContent) -> SlideView:
    points = []
    for p in slide.chart_data or []:
        name = _text(p.get("name"))
        scenario = classify_scenario(name)
        points.append(ScenarioPoint(name, _number(p.get("value")), scenario, SCENARIO_COLORS[scenario]))
    return ScenarioView(**_base(slide), body_text=slide.body_text or DEFAULT_SCENARIO_TEXT, points=tuple(points))


def _comps_view(slide: SlideContent) -> SlideView:
    rows = tuple(
        CompsRow(
            metric=_text(r.get("metric")),
            label=_text(r.get("label")),
            value1=_text(r.get("value1")),
            value2=_text(r.get("value2")),
            explanation=_text(r.get("explanation")) or None,
        )
        for r in slide.table_data or []
    )
    return CompsView(**_base(slide), body_text=slide.body_text or DEFAULT_COMPS_TEXT, rows=rows)


def _market_growth_view(slide: SlideContent) -> SlideView:
    bars = tuple(
        ChartPoint(_text(r.get("label")), _number(r.get("value1")), BAR_COLOR)
        for r in slide.table_data or []
    )
    return MarketGrowthView(
        **_base(slide),
        body_text=slide.body_text,
        key_drivers=tuple(slide.bullet_points or ()),
        growth_bars=bars,
    )


def _generic_view(slide: SlideContent) -> SlideView:
    table = tuple(
        (_text(r.get("label")), _text(r.get("value1")) or _text(r.get("metric")))
        for r in slide.table_data or []
    )
    return GenericView(
        **_base(slide),
        body_text=slide.body_text,
        numbered_points=tuple(enumerate(slide.bullet_points or (), start=1)),
        table=table,
        chart=_chart(slide),
        insight=slide.ai_analysis or DEFAULT_INSIGHT,
    )


SHAPERS: Dict[SlideType, Callable[[SlideContent], SlideView]] = {
    SlideType.TITLE: _title_view,
    SlideType.EXECUTIVE_SUMMARY: _generic_view,
    SlideType.ASSET_OVERVIEW: _generic_view,
    SlideType.INDIVIDUAL_ANALYSIS: _generic_view,
    SlideType.RISK_ANALYSIS: _generic_view,
    SlideType.SCENARIO_ANALYSIS: _scenario_view,
    SlideType.CONCLUSION_PART1: _generic_view,
    SlideType.PROPOSAL_LIST: _generic_view,
    SlideType.REBALANCE_PROPOSAL: _rebalance_view,
    SlideType.EXPECTED_EFFECT: _generic_view,
    SlideType.SELECTION_REASON: _generic_view,
    SlideType.MARKET_GROWTH: _market_growth_view,
    SlideType.FUNDAMENTAL_ANALYSIS: _comps_view,
    SlideType.BUSINESS_STRENGTH: _generic_view,
    SlideType.DISCLAIMER: _disclaimer_view,
}


def normalize_slide(slide: SlideContent) -> SlideView:
    return SHAPERS[slide.type](slide)
