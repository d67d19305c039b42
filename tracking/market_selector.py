"""
Market Selector
Picks the market and outcome token to follow inside an event payload
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from common import MarketSelectionError, SelectorConstants

logger = logging.getLogger(__name__)

# Gamma sends list fields either as native JSON arrays or as JSON-encoded strings
EncodedList = Union[List[Any], str, None]


def decode_list(value: EncodedList, field_name: str = "list") -> List[str]:
    """
    Decode an encoded-list field into a list of strings.

    Args:
        value: Native list, JSON-encoded string, or None
        field_name: Name used in error messages

    Raises:
        MarketSelectionError: If the value is not a list in either encoding
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value) if value.strip() else []
        except json.JSONDecodeError as e:
            raise MarketSelectionError(f"Market {field_name} is not valid JSON: {e}")
    if not isinstance(value, list):
        raise MarketSelectionError(f"Market {field_name} is not a list (got {type(value).__name__})")
    return [str(item) for item in value]


def _normalize(text: Any) -> str:
    return str(text).strip().lower()


@dataclass
class Selection:
    """The market and token chosen for tracking"""
    market: Dict[str, Any]
    token_id: str
    label: str

    @property
    def question(self) -> str:
        return self.market.get('question') or self.market.get('title') or ''


class MarketSelector:
    """Chooses one market and one outcome token for a target outcome name"""

    def select(self, event: Dict[str, Any], target_outcome: str) -> Selection:
        """
        Pick the market and token tracking target_outcome.

        Market preference: outcome list contains the target, then a binary
        yes/no market, then a market whose text mentions the target, then
        the first market.

        Raises:
            MarketSelectionError: If the event has no markets or the token
                cannot be resolved
        """
        markets = event.get('markets') if isinstance(event, dict) else None
        if not isinstance(markets, list) or not markets:
            slug = event.get('slug', '?') if isinstance(event, dict) else '?'
            raise MarketSelectionError(f"No markets found in event {slug}")

        market = self._choose_market(markets, target_outcome)
        token_id, label = self.extract_token(market, target_outcome)
        logger.debug(f"Selected market {market.get('id', '?')} token {token_id[:12]}... as '{label}'")
        return Selection(market=market, token_id=token_id, label=label)

    def _choose_market(self, markets: List[Dict[str, Any]], target_outcome: str) -> Dict[str, Any]:
        target = _normalize(target_outcome or "")
        candidates = [m for m in markets if isinstance(m, dict)]
        if not candidates:
            raise MarketSelectionError("Event markets are not objects")

        if target:
            for market in candidates:
                if target in {_normalize(o) for o in self._safe_outcomes(market)}:
                    return market

        for market in candidates:
            if SelectorConstants.BINARY_OUTCOME in {_normalize(o) for o in self._safe_outcomes(market)}:
                return market

        if target:
            for market in candidates:
                for key in SelectorConstants.TEXT_FIELDS:
                    text = market.get(key)
                    if isinstance(text, str) and target in text.lower():
                        return market

        return candidates[0]

    @staticmethod
    def _safe_outcomes(market: Dict[str, Any]) -> List[str]:
        # Malformed markets are skipped while ranking, and reported once chosen
        try:
            return decode_list(market.get('outcomes'), 'outcomes')
        except MarketSelectionError:
            return []

    def extract_token(self, market: Dict[str, Any], target_outcome: Optional[str]) -> Tuple[str, str]:
        """
        Resolve (token_id, label) inside one market.

        Raises:
            MarketSelectionError: On mismatched lists, missing target, or empty token
        """
        outcomes = decode_list(market.get('outcomes'), 'outcomes')
        token_ids = decode_list(market.get('clobTokenIds'), 'clobTokenIds')

        if not outcomes or len(outcomes) != len(token_ids):
            raise MarketSelectionError(
                f"Market outcomes/tokenIds missing or malformed "
                f"({len(outcomes)} outcomes, {len(token_ids)} token ids)",
                available_outcomes=outcomes[:SelectorConstants.OUTCOME_SAMPLE_LIMIT]
            )

        normalized = [_normalize(o) for o in outcomes]

        if SelectorConstants.BINARY_OUTCOME in normalized:
            index = normalized.index(SelectorConstants.BINARY_OUTCOME)
            label = (target_outcome or '').strip() or "Yes"
        else:
            target = _normalize(target_outcome or '')
            if target not in normalized:
                sample = outcomes[:SelectorConstants.OUTCOME_SAMPLE_LIMIT]
                raise MarketSelectionError(
                    f"Outcome '{target_outcome}' not found in market. "
                    f"Available outcomes: {', '.join(sample)}",
                    available_outcomes=sample
                )
            index = normalized.index(target)
            label = outcomes[index].strip()

        token_id = token_ids[index].strip()
        if not token_id:
            raise MarketSelectionError(f"Token id for '{label}' was empty")
        return token_id, label
