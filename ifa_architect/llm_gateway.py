"""
LLM-backed implementations of the external AI capabilities.

Every call goes through `invoke_llm`, which applies the shared quota retry
policy and rotates the provider key after a quota rejection. These functions
raise on failure; the degradation policy (placeholder, fallback deck, empty
import, unchanged text) belongs to the callers.
"""

import base64
import json
import logging
import os
from typing import Any, List, Sequence

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.prompts import PromptTemplate

from ifa_architect import config
from ifa_architect.models import Asset, ClientProfile, ParseResult, ProfileHints, SlideType
from ifa_architect.proposal_settings import ProposalRequest, describe_requests
from ifa_architect.utils.error_handler import ExternalServiceError, MalformedPayloadError, is_quota_error, quota_retry
from ifa_architect.utils.llm_provider import get_llm, rotate_key
from ifa_architect.utils.payload import decode_json, response_text

logger = logging.getLogger(__name__)

MAX_SOURCE_LINKS = 5

SLIDE_OUTLINE = """
【レポート構成 (以下の順序でJSONを生成)】

== 第1部: 現状分析 (Current Analysis) ==
1. Title: 表紙
2. ExecutiveSummary: 現状ポートフォリオの要約と課題
3. AssetOverview: 現在の保有資産の状況 (chartData: 資産クラス別の構成比)
4. IndividualAnalysis: 保有銘柄の分析
5. RiskAnalysis: リスク分析 (chartData: リスク要因別の構成比)
6. ScenarioAnalysis: 市場シナリオ分析 (chartData: Bull/Base/Bear の予想リターン)
7. ConclusionPart1: 現状分析の結論

== 第2部: 組み換え提案 (Rebalancing Proposal) ==
8. ProposalList: 提案銘柄一覧
9. RebalanceProposal: 具体的な売買計画 (tableData: label に「売却: 」または「購入: 」、value1 に金額。売却は負の値)
10. ExpectedEffect: 期待効果分析
11. SelectionReason: 選定理由
12. MarketGrowth: 市場の成長性 (Deep Researchの市場データを引用すること)
13. FundamentalAnalysis: 類似会社比較 (Deep Researchの競合比較データを引用すること)
    - tableData の各行は metric, label, value1 (提案銘柄), value2 (競合他社), explanation (乖離理由)
14. BusinessStrength: 事業の強み
15. Disclaimer: 免責事項
"""

SYSTEM_INSTRUCTION = (
    "あなたは、超富裕層向けプライベートバンクに所属するトップTierのIFA（資産アドバイザー）です。\n"
    "提供された「Deep Research Report」の情報を最大限に活用し、論理的かつ数値的根拠に基づいた資産運用提案書を作成してください。\n"
    + SLIDE_OUTLINE
    + "\n出力は次のキーを持つJSONオブジェクトのみ: title, clientName, slides。"
    + " slides の各要素は id, type, title を必須とし、任意で subtitle, bodyText, bulletPoints, tableData,"
    + " chartData (name, value), notes, sources (title, page), aiAnalysis を持つ。"
    + f" type は {', '.join(t.value for t in SlideType)} のいずれか。"
)

RESEARCH_PROMPT = PromptTemplate.from_template(
    "You are a financial research assistant. Please find the latest financial data and market trends "
    "for the following assets to prepare an investment proposal.\n\n"
    "Client context: age {age}, risk tolerance {risk_tolerance}, horizon {horizon}\n"
    "Target Assets: {asset_names}\n\n"
    "Required Information:\n"
    "1. **Financial Fundamentals**: latest PER, PBR, ROE and Operating Margin for each company.\n"
    "2. **Competitor Comparison**: 1-2 key competitors for each target asset and their PER/PBR.\n"
    "3. **Market Trends**: market size (CAGR) and growth drivers for the sectors these assets belong to.\n"
    "4. **Risk Factors**: specific recent geopolitical, regulatory or economic risks.\n\n"
    "Please summarize the findings in a structured text format."
)

RECOMMENDATION_PROMPT = PromptTemplate.from_template(
    "【顧客プロファイル】\n"
    "- 年齢: {age}歳\n- 性別: {gender}\n- 居住地: {region}\n- リスク許容度: {risk_tolerance}\n\n"
    "【提案リクエスト】\n以下のカテゴリで具体的な推奨銘柄を挙げてください: {requests}\n\n"
    "各銘柄について、プロのIFAとして【5つの観点】に基づき推奨理由を具体的に記述してください。\n"
    "出力形式(JSON配列のみ):\n"
    '[{{"name": "銘柄名", "code": "コード", "type": "Stock", "currentPrice": 0, "currency": "JPY/USD", '
    '"reason": "1. 適合性: ...", '
    '"analysisScores": {{"suitability": 8, "market": 9, "growth": 7, "valuation": 8, "risk": 6}}}}]'
)

REPORT_PROMPT = PromptTemplate.from_template(
    "【顧客情報】\n"
    "- 年齢: {age}歳, 性別: {gender}, 居住地: {region}\n"
    "- リスク許容度: {risk_tolerance}\n- 投資目標: {goals}\n\n"
    "【現在の保有資産】\n{holdings}\n\n"
    "【提案する資産】\n{proposed}\n\n"
    "【Deep Research 調査結果 (このデータを最優先で使用してください)】\n{research}\n\n"
    "上記情報を基に、PresentationData形式のJSONを生成してください。"
)

REWRITE_PROMPT = PromptTemplate.from_template(
    'オリジナル: "{current_text}"\n指示: {instruction}\n書き直した日本語テキストのみを返してください。'
)

PARSE_PROMPT = (
    "このドキュメントに含まれる情報を読み取り、JSONデータとして抽出してください。\n"
    "「顧客情報」と「保有金融資産情報(銘柄名、コード、保有数量(株数/口数)、評価額、損益)」を抽出してください。\n"
    "各資産には読み取りの確からしさを confidence (0.0-1.0) として付与してください。\n\n"
    "出力フォーマット: Strict Valid JSON. Do not use Markdown code blocks.\n"
    '{ "profile": { "age": number, "gender": "string", "region": "string", "riskTolerance": "string", '
    '"goals": "string", "familyStructure": "string" }, '
    '"assets": [ { "name": "string", "code": "string", "type": "Stock", "quantity": number, '
    '"amount": number, "profitLoss": number, "currency": "JPY", "confidence": number } ] }'
)


def _provider() -> str:
    return os.getenv("LLM_PROVIDER", config.LLM_PROVIDER).lower()


async def invoke_llm(prompt: Any, *, fast: bool = True, temperature: float = 0.3, tools: list = None):
    """Invoke the configured LLM with quota-aware retry and key rotation."""
    provider = _provider()

    async def _call():
        llm = get_llm(temperature=temperature, fast=fast)
        if tools:
            llm = llm.bind_tools(tools)
        try:
            return await llm.ainvoke(prompt)
        except Exception as e:
            if is_quota_error(e):
                rotate_key(provider)
            raise

    return await quota_retry()(_call)()


def _assets_json(assets: Sequence[Asset]) -> str:
    return json.dumps([a.to_payload() for a in assets], ensure_ascii=False)


def _grounding_links(response: Any) -> List[str]:
    metadata = getattr(response, "response_metadata", None) or {}
    grounding = metadata.get("grounding_metadata") or {}
    urls = []
    for chunk in grounding.get("grounding_chunks") or []:
        uri = (chunk.get("web") or {}).get("uri")
        if uri:
            urls.append(uri)
    return urls[:MAX_SOURCE_LINKS]


async def request_deep_research(profile: ClientProfile, assets: Sequence[Asset]) -> str:
    """Best-effort market research on the proposed assets (search-grounded on Gemini)."""
    logger.info("[Deep Research] Starting research for %d assets...", len(assets))
    asset_names = ", ".join(f"{a.name} ({a.code or ''})" for a in assets)
    prompt = RESEARCH_PROMPT.format(
        age=profile.age,
        risk_tolerance=profile.risk_tolerance,
        horizon=profile.investment_horizon,
        asset_names=asset_names,
    )
    tools = [{"google_search": {}}] if _provider() in ("google", "gemini") else None
    response = await invoke_llm(prompt, fast=True, temperature=0.2, tools=tools)

    text = response_text(response).strip()
    if not text:
        raise ExternalServiceError("Empty research response")
    links = _grounding_links(response)
    if links:
        text += "\n\nReferenced Sources:\n" + "\n".join(links)
    return text


async def request_recommendations(profile: ClientProfile, requests: List[ProposalRequest]) -> List[Any]:
    prompt = RECOMMENDATION_PROMPT.format(
        age=profile.age,
        gender=profile.gender,
        region=profile.region,
        risk_tolerance=profile.risk_tolerance,
        requests=describe_requests(requests),
    )
    response = await invoke_llm(prompt, fast=True, temperature=0.4)
    payload = decode_json(response_text(response))
    if isinstance(payload, dict):
        payload = payload.get("recommendations") or payload.get("assets")
    if not isinstance(payload, list):
        raise MalformedPayloadError("Recommendations must be a JSON array")
    return payload


async def request_proposal_document(
    profile: ClientProfile,
    holdings: Sequence[Asset],
    proposed_assets: Sequence[Asset],
    research_text: str,
) -> Any:
    """Generate the 15-slide proposal. Returns the decoded (unvalidated) JSON."""
    prompt = REPORT_PROMPT.format(
        age=profile.age,
        gender=profile.gender,
        region=profile.region,
        risk_tolerance=profile.risk_tolerance,
        goals=profile.goals,
        holdings=_assets_json(holdings),
        proposed=_assets_json(proposed_assets),
        research=research_text,
    )
    messages = [SystemMessage(content=SYSTEM_INSTRUCTION), HumanMessage(content=prompt)]
    response = await invoke_llm(messages, fast=False, temperature=0.3)
    return decode_json(response_text(response))


async def request_text_rewrite(current_text: str, instruction: str) -> str:
    prompt = REWRITE_PROMPT.format(current_text=current_text, instruction=instruction)
    response = await invoke_llm(prompt, fast=True, temperature=0.5)
    text = response_text(response).strip()
    if not text:
        raise ExternalServiceError("Empty rewrite response")
    return text


def _document_part(encoded: str, mime_type: str) -> dict:
    if _provider() in ("google", "gemini"):
        return {"type": "media", "mime_type": mime_type, "data": encoded}
    return {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}}


async def request_document_parse(file_bytes: bytes, mime_type: str) -> ParseResult:
    encoded = base64.b64encode(file_bytes).decode("ascii")
    message = HumanMessage(content=[
        _document_part(encoded, mime_type),
        {"type": "text", "text": PARSE_PROMPT},
    ])
    response = await invoke_llm([message], fast=True, temperature=0.0)
    payload = decode_json(response_text(response))
    if not isinstance(payload, dict):
        raise MalformedPayloadError("Document parse result must be a JSON object")
    assets = []
    for raw in payload.get("assets") or []:
        try:
            assets.append(Asset.model_validate(raw))
        except ValueError as e:
            logger.warning("Skipping unreadable extracted asset: %s", e)

    hints = payload.get("profile") or payload.get("extractedProfile") or payload.get("profileHints")
    try:
        profile_hints = ProfileHints.model_validate(hints) if isinstance(hints, dict) else None
    except ValueError as e:
        logger.warning("Ignoring unreadable profile hints: %s", e)
        profile_hints = None
    return ParseResult(assets=assets, profile_hints=profile_hints)
