"""
Popular assets offered for manual selection on the rebalance step.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class StockDefinition:
    name: str
    code: str
    type: str
    currency: str


POPULAR_ASSETS = [
    StockDefinition("トヨタ自動車", "7203", "Stock", "JPY"),
    StockDefinition("ソニーグループ", "6758", "Stock", "JPY"),
    StockDefinition("三菱UFJフィナンシャル・グループ", "8306", "Stock", "JPY"),
    StockDefinition("東京エレクトロン", "8035", "Stock", "JPY"),
    StockDefinition("キーエンス", "6861", "Stock", "JPY"),
    StockDefinition("任天堂", "7974", "Stock", "JPY"),
    StockDefinition("三菱商事", "8058", "Stock", "JPY"),
    StockDefinition("Apple", "AAPL", "Stock", "USD"),
    StockDefinition("Microsoft", "MSFT", "Stock", "USD"),
    StockDefinition("NVIDIA", "NVDA", "Stock", "USD"),
    StockDefinition("eMAXIS Slim 全世界株式(オール・カントリー)", "FUND-ACWI", "Mutual Fund", "JPY"),
    StockDefinition("eMAXIS Slim 米国株式(S&P500)", "FUND-SP500", "Mutual Fund", "JPY"),
    StockDefinition("iシェアーズ・コア S&P500 ETF", "IVV", "ETF", "USD"),
    StockDefinition("バンガード・トータル・ストック・マーケットETF", "VTI", "ETF", "USD"),
    StockDefinition("米国国債 10年", "BOND-UST10", "Bond", "USD"),
    StockDefinition("個人向け国債 変動10年", "BOND-JGB10F", "Bond", "JPY"),
]


def search_catalog(query: str, catalog: List[StockDefinition] = POPULAR_ASSETS) -> List[StockDefinition]:
    """Case-insensitive substring match on name or code."""
    if not query:
        return []
    lower = query.lower()
    return [a for a in catalog if lower in a.name.lower() or lower in a.code.lower()]
