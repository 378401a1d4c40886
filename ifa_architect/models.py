"""
Record types shared by every stage of the proposal builder.

Field names are snake_case in Python; the JSON exchanged with the LLM and the
HTTP surface uses camelCase aliases (``profitLoss``, ``tableData`` ...).
Both spellings are accepted on input.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ifa_architect.config import LOW_CONFIDENCE_THRESHOLD


ASSET_TYPES = {
    "Stock": "株式",
    "Bond": "債券",
    "Mutual Fund": "投資信託",
    "ETF": "ETF",
    "Insurance": "保険",
    "Cash": "現金",
    "Other": "その他",
}

# Asset types that can be requested in a proposal, in display order
PROPOSAL_TYPE_ORDER = ["Stock", "Mutual Fund", "Bond", "Insurance", "ETF"]

SUB_CATEGORIES: Dict[str, List[str]] = {
    "Stock": [
        "テクノロジー", "半導体",
        "自動車", "機械", "電機・精密",
        "商社", "銀行", "金融", "不動産",
        "医薬品", "ヘルスケア",
        "食品", "小売", "消費財", "サービス",
        "エネルギー", "素材", "化学", "鉄鋼",
        "建設", "運輸", "通信", "電力・ガス",
        "高配当株", "バリュー株", "グロース株",
    ],
    "Mutual Fund": ["全世界株式", "米国株式 (S&P500)", "先進国株式", "新興国株式", "国内株式", "バランス型", "債券型", "REIT"],
    "Bond": ["米国国債", "国内国債", "先進国社債", "ハイイールド債"],
    "ETF": ["高配当", "グロース", "セクター別", "コモディティ (金など)", "債券ETF"],
    "Insurance": ["終身保険", "医療保険", "個人年金保険", "変額保険"],
}

PREFECTURES = [
    "北海道", "青森県", "岩手県", "宮城県", "秋田県", "山形県", "福島県",
    "茨城県", "栃木県", "群馬県", "埼玉県", "千葉県", "東京都", "神奈川県",
    "新潟県", "富山県", "石川県", "福井県", "山梨県", "長野県", "岐阜県",
    "静岡県", "愛知県", "三重県", "滋賀県", "京都府", "大阪府", "兵庫県",
    "奈良県", "和歌山県", "鳥取県", "島根県", "岡山県", "広島県", "山口県",
    "徳島県", "香川県", "愛媛県", "高知県", "福岡県", "佐賀県", "長崎県",
    "熊本県", "大分県", "宮崎県", "鹿児島県", "沖縄県",
]

FAMILY_OPTIONS = [
    "独身",
    "独身 (子供あり)",
    "既婚 (子供なし)",
    "既婚 (子供あり)",
    "既婚 (子供独立済)",
    "高齢夫婦のみ",
    "二世帯同居",
    "その他",
]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalysisScores(CamelModel):
    """Five-axis AI score, each 1-10. For ``risk`` 10 means safest."""
    suitability: int = Field(ge=1, le=10)
    market: int = Field(ge=1, le=10)
    growth: int = Field(ge=1, le=10)
    valuation: int = Field(ge=1, le=10)
    risk: int = Field(ge=1, le=10)


class Asset(CamelModel):
    id: str = ""
    name: str
    code: Optional[str] = None
    ticker: Optional[str] = None
    type: str = "Stock"
    amount: float = 0.0
    quantity: Optional[float] = None
    current_price: Optional[float] = None
    profit_loss: Optional[float] = None
    currency: str = "JPY"
    allocation: Optional[float] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    # Fundamentals
    per: Optional[float] = None
    pbr: Optional[float] = None
    revenue_growth: Optional[float] = None
    gross_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    description: Optional[str] = None
    reason: Optional[str] = None

    analysis_scores: Optional[AnalysisScores] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_required(cls, value):
        return 0.0 if value is None else value

    @field_validator("analysis_scores", mode="before")
    @classmethod
    def _drop_partial_scores(cls, value):
        # A radar needs all five axes; anything incomplete is treated as absent
        if value is None or isinstance(value, AnalysisScores):
            return value
        try:
            return AnalysisScores.model_validate(value)
        except ValueError:
            return None

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence is not None and self.confidence < LOW_CONFIDENCE_THRESHOLD


class ClientProfile(CamelModel):
    age: int = 50
    gender: str = "男性"
    region: str = "東京都"
    risk_tolerance: str = "中 (バランス)"
    investment_horizon: str = "中期 (3-10年)"
    goals: str = "資産保全と適度な成長"
    family_structure: str = "既婚 (子供あり)"
    current_holdings: List[Asset] = Field(default_factory=list)


class ProposalSettings(CamelModel):
    proposal_counts: Dict[str, int] = Field(
        default_factory=lambda: {"Stock": 3, "Mutual Fund": 0, "Bond": 0, "Insurance": 0, "ETF": 0}
    )
    proposal_details: Dict[str, List[str]] = Field(
        default_factory=lambda: {t: [] for t in PROPOSAL_TYPE_ORDER}
    )


class SlideType(str, Enum):
    TITLE = "Title"
    EXECUTIVE_SUMMARY = "ExecutiveSummary"
    ASSET_OVERVIEW = "AssetOverview"
    INDIVIDUAL_ANALYSIS = "IndividualAnalysis"
    RISK_ANALYSIS = "RiskAnalysis"
    SCENARIO_ANALYSIS = "ScenarioAnalysis"
    CONCLUSION_PART1 = "ConclusionPart1"
    PROPOSAL_LIST = "ProposalList"
    REBALANCE_PROPOSAL = "RebalanceProposal"
    EXPECTED_EFFECT = "ExpectedEffect"
    SELECTION_REASON = "SelectionReason"
    MARKET_GROWTH = "MarketGrowth"
    FUNDAMENTAL_ANALYSIS = "FundamentalAnalysis"
    BUSINESS_STRENGTH = "BusinessStrength"
    DISCLAIMER = "Disclaimer"


class SourceReference(CamelModel):
    title: str = Field(min_length=1)
    url: Optional[str] = None
    page: Optional[str] = None
    snippet: Optional[str] = None


class SlideContent(CamelModel):
    id: str
    type: SlideType
    title: str
    subtitle: Optional[str] = None
    body_text: Optional[str] = None
    bullet_points: Optional[List[str]] = None
    # Row shape depends on `type`; see ifa_architect.normalizer
    table_data: Optional[List[Dict[str, Any]]] = None
    chart_data: Optional[List[Dict[str, Any]]] = None
    notes: Optional[str] = None
    sources: Optional[List[SourceReference]] = None
    ai_analysis: Optional[str] = None


class PresentationData(CamelModel):
    title: str
    client_name: str = "お客様"
    slides: List[SlideContent] = Field(min_length=1)


class ProfileHints(CamelModel):
    """Partial profile fields extracted from an uploaded document."""
    age: Optional[int] = None
    gender: Optional[str] = None
    region: Optional[str] = None
    risk_tolerance: Optional[str] = None
    goals: Optional[str] = None
    family_structure: Optional[str] = None


class ParseResult(CamelModel):
    assets: List[Asset] = Field(default_factory=list)
    profile_hints: Optional[ProfileHints] = None
