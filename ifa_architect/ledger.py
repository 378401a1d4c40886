"""
Holding ledger: the client's current holdings or the proposed (rebalanced)
positions, with the aggregate figures shown under the holdings table.

A ledger is an immutable value; every operation returns a new ledger so that
session transitions stay pure.
"""

import logging
import math
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple

from ifa_architect.models import Asset

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = {"amount", "quantity", "current_price", "profit_loss", "allocation"}
_FULL_WIDTH_DIGITS = str.maketrans("０１２３４５６７８９", "0123456789")
_SEPARATORS_RE = re.compile(r"[,，]")


def mint_id(prefix: str) -> str:
    """Locally unique identifier, independent of the asset's display name."""
    return f"{prefix}-{uuid.uuid4().hex}"


def parse_amount(raw: Any) -> Optional[float]:
    """
    Normalize a user-entered number.

    Full-width digits become ASCII digits and thousands separators are removed.
    '' and '-' mean zero. Returns None when the input is not numeric, in which
    case the caller keeps the previous value.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        normalized = raw
    else:
        normalized = _SEPARATORS_RE.sub("", str(raw).translate(_FULL_WIDTH_DIGITS)).strip()
        normalized = normalized.replace("－", "-").replace("．", ".")
        if normalized in ("", "-"):
            return 0.0
    try:
        value = float(normalized)
    except (ValueError, OverflowError):
        return None
    # nan, inf and overflowing literals are not amounts
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class LedgerTotals:
    total_amount: float
    total_profit_loss: float
    invested_base: float
    return_pct: float


@dataclass(frozen=True)
class HoldingLedger:
    assets: Tuple[Asset, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, assets: Iterable[Asset]) -> "HoldingLedger":
        return cls(tuple(assets))

    def __len__(self):
        return len(self.assets)

    def __iter__(self):
        return iter(self.assets)

    def ids(self) -> set:
        return {a.id for a in self.assets}

    def get(self, asset_id: str) -> Optional[Asset]:
        return next((a for a in self.assets if a.id == asset_id), None)

    def add(self, asset: Asset, id_prefix: str = "holding") -> "HoldingLedger":
        """Append a copy of `asset` under a freshly minted id."""
        existing = self.ids()
        new_id = mint_id(id_prefix)
        while new_id in existing:
            new_id = mint_id(id_prefix)
        return HoldingLedger(self.assets + (asset.model_copy(deep=True, update={"id": new_id}),))

    def update(self, asset_id: str, field_name: str, value: Any) -> "HoldingLedger":
        """Set one field of one entry. Unknown id or unparseable number is a no-op."""
        target = self.get(asset_id)
        if target is None:
            return self

        attr = _resolve_field(field_name)
        if attr is None or attr == "id":
            logger.warning("Ignoring update of unknown field %r", field_name)
            return self

        if attr in NUMERIC_FIELDS:
            number = parse_amount(value)
            if number is None:
                return self
            value = number

        try:
            updated = Asset.model_validate({**target.model_dump(), attr: value})
        except ValueError:
            logger.warning("Rejected value %r for %s", value, attr)
            return self
        return HoldingLedger(tuple(updated if a.id == asset_id else a for a in self.assets))

    def remove(self, asset_id: str) -> "HoldingLedger":
        return HoldingLedger(tuple(a for a in self.assets if a.id != asset_id))

    def totals(self) -> LedgerTotals:
        total_amount = sum(a.amount or 0.0 for a in self.assets)
        total_profit_loss = sum(a.profit_loss or 0.0 for a in self.assets)
        invested_base = total_amount - total_profit_loss
        return_pct = (total_profit_loss / invested_base) * 100 if invested_base > 0 else 0.0
        return LedgerTotals(total_amount, total_profit_loss, invested_base, return_pct)

    def low_confidence(self) -> Tuple[Asset, ...]:
        """Entries whose extraction confidence must be flagged to the user."""
        return tuple(a for a in self.assets if a.is_low_confidence)


def holding_return_pct(asset: Asset) -> float:
    """Per-row return in percent, 0 when the invested base is not positive."""
    invested = (asset.amount or 0.0) - (asset.profit_loss or 0.0)
    return ((asset.profit_loss or 0.0) / invested) * 100 if invested > 0 else 0.0


def _resolve_field(name: str) -> Optional[str]:
    fields = Asset.model_fields
    if name in fields:
        return name
    for attr, info in fields.items():
        if info.alias == name:
            return attr
    return None
