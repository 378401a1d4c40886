import os
import tempfile

# Keep audit logs and exported decks out of the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="ifa_logs_"))
os.environ.setdefault("EXPORT_DIR", tempfile.mkdtemp(prefix="ifa_reports_"))

import pytest

from ifa_architect.models import Asset, ClientProfile, PresentationData


@pytest.fixture
def sample_holdings():
    return [
        Asset(id="h-1", name="トヨタ自動車", code="7203", type="Stock", amount=1_200_000, profit_loss=200_000, confidence=1.0),
        Asset(id="h-2", name="米国国債 10年", code="BOND-UST10", type="Bond", amount=800_000, profit_loss=-50_000, confidence=0.95),
    ]


@pytest.fixture
def sample_profile(sample_holdings):
    return ClientProfile(age=62, region="神奈川県", current_holdings=sample_holdings)


@pytest.fixture
def full_deck_payload():
    """Generator output covering every slide type, camelCase as returned by the model."""
    return {
        "title": "資産運用提案書",
        "clientName": "山田 太郎",
        "slides": [
            {"id": "1", "type": "Title", "title": "資産運用提案書", "subtitle": "2026年10月"},
            {"id": "2", "type": "ExecutiveSummary", "title": "要約", "bulletPoints": ["国内株式に偏重", "債券比率が低い"]},
            {"id": "3", "type": "AssetOverview", "title": "保有資産", "chartData": [{"name": "株式", "value": 60}, {"name": "債券", "value": 40}]},
            {"id": "4", "type": "IndividualAnalysis", "title": "個別分析", "bodyText": "トヨタ自動車は安定"},
            {"id": "5", "type": "RiskAnalysis", "title": "リスク分析", "chartData": [{"name": "為替", "value": 30}, {"name": "金利", "value": 70}]},
            {"id": "6", "type": "ScenarioAnalysis", "title": "シナリオ", "chartData": [
                {"name": "Bull (楽観)", "value": 12}, {"name": "Base", "value": 5}, {"name": "Bear (悲観)", "value": -8}]},
            {"id": "7", "type": "ConclusionPart1", "title": "結論", "bodyText": "分散が必要"},
            {"id": "8", "type": "ProposalList", "title": "提案銘柄", "tableData": [{"label": "NVIDIA", "value1": "1,000,000"}]},
            {"id": "9", "type": "RebalanceProposal", "title": "売買計画", "tableData": [
                {"label": "売却: トヨタ自動車", "value1": -500000}, {"label": "購入: NVIDIA", "value1": 500000}]},
            {"id": "10", "type": "ExpectedEffect", "title": "期待効果", "chartData": [{"name": "現状", "value": 4}, {"name": "提案後", "value": 6}]},
            {"id": "11", "type": "SelectionReason", "title": "選定理由", "bulletPoints": ["成長性", "割安性"]},
            {"id": "12", "type": "MarketGrowth", "title": "市場成長", "bulletPoints": ["AI需要"], "tableData": [{"label": "2030", "value1": 25}]},
            {"id": "13", "type": "FundamentalAnalysis", "title": "類似会社比較", "tableData": [
                {"metric": "PER", "label": "NVIDIA vs AMD", "value1": 45, "value2": 38, "explanation": "成長期待の差"}]},
            {"id": "14", "type": "BusinessStrength", "title": "事業の強み", "bodyText": "エコシステム"},
            {"id": "15", "type": "Disclaimer", "title": "免責事項"},
        ],
    }


@pytest.fixture
def full_deck(full_deck_payload):
    return PresentationData.model_validate(full_deck_payload)
