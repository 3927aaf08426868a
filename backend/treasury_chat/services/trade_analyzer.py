"""
Detection and extraction of money market trades from chat messages.

extract_trade is a pure pattern matcher. analyze_message_for_trade picks
between it and an LLM based extraction depending on configuration; the
LLM path falls back to a non-trade result whenever anything goes wrong.
"""
import logging
from typing import Optional

from treasury_chat.config import settings
from treasury_chat.schemas.analysis import TradeDetails
from treasury_chat.services.gemini import generate_json, is_llm_configured
from treasury_chat.services.patterns import (
    AMOUNT_PATTERN,
    BANK_PATTERN,
    CONFIRMATION_PATTERN,
    COUNCIL_PATTERN,
    DEFAULT_TRADE_TYPE,
    GBP_AMOUNT_PATTERN,
    NEGOTIATION_TERMS,
    PERIOD_PATTERN,
    RATE_PATTERN,
    TRADE_INDICATORS,
    TRADE_TYPE_RULES,
)

logger = logging.getLogger(__name__)

TRADE_DETECTION_PROMPT = """
You are a trade detection system for UK local councils' money market transactions.
Analyse the message below and decide whether it negotiates or confirms a trade.

Examples of trade messages:
- "Please process a PWLB loan of £5 million at the 5-year fixed rate."
- "Confirmation: Birmingham City Council borrows £20 million for 4 months from NatWest at 4.55%"
- "We can offer £10m for 3 months at 4.6%, can you counter?"

Examples that are NOT trades:
- "What are the current PWLB rates?"
- "Can you explain the process for borrowing from PWLB?"

Respond with a JSON object with these fields only:
- isTradeRequest: boolean
- tradeType: string (e.g. "Loan/Borrowing", "MMF Investment", "Treasury/Bond", "Deposit")
- amount: string (with £ symbol)
- rate: string or null (e.g. "4.55%")
- period: string or null (e.g. "4 months")
- counterparty: string or null
- isConfirmation: boolean
- isNegotiation: boolean

Message: "{message}"
"""


def _first(pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(0).strip() if match else None


def _has_currency_marker(amount: str) -> bool:
    lower_amount = amount.lower()
    return "£" in lower_amount or "gbp" in lower_amount


def _classify_trade_type(lower_message: str) -> str:
    for trade_type, terms in TRADE_TYPE_RULES:
        if any(term in lower_message for term in terms):
            return trade_type
    return DEFAULT_TRADE_TYPE


def _find_counterparty(message: str, lower_message: str) -> Optional[str]:
    if "council" in lower_message:
        return _first(COUNCIL_PATTERN, message)
    if "bank" in lower_message:
        return _first(BANK_PATTERN, message)
    return None


def extract_trade(message: str) -> TradeDetails:
    """Scan a message for trade terms, amounts, rates, tenors and counterparties."""
    lower_message = message.lower()

    amount_match = _first(AMOUNT_PATTERN, lower_message)
    gbp_match = _first(GBP_AMOUNT_PATTERN, lower_message)
    rate = _first(RATE_PATTERN, lower_message)
    has_trade_term = any(term in lower_message for term in TRADE_INDICATORS)

    is_confirmation = (
        CONFIRMATION_PATTERN.search(lower_message) is not None
        or ("trade" in lower_message and "confirm" in lower_message)
        or ("deal" in lower_message and "done" in lower_message)
    )
    is_negotiation = bool(rate) and (
        any(term in lower_message for term in NEGOTIATION_TERMS) or "show" in lower_message
    )

    if not (has_trade_term or amount_match or rate or is_confirmation):
        return TradeDetails()

    amount = ""
    if gbp_match:
        amount = gbp_match
    elif amount_match:
        amount = amount_match if _has_currency_marker(amount_match) else f"£{amount_match}"

    period = _first(PERIOD_PATTERN, lower_message)
    if "4 month" in lower_message or "4-month" in lower_message:
        period = "4 months"

    return TradeDetails(
        is_trade_request=is_confirmation or bool(amount and rate and (has_trade_term or is_negotiation)),
        trade_type=_classify_trade_type(lower_message),
        amount=amount,
        details=message,
        rate=rate,
        period=period,
        counterparty=_find_counterparty(message, lower_message),
        is_confirmation=is_confirmation,
        is_negotiation=is_negotiation,
    )


async def _extract_trade_with_llm(message: str) -> TradeDetails:
    result = await generate_json(TRADE_DETECTION_PROMPT.replace("{message}", message))
    return TradeDetails(
        is_trade_request=bool(result.get("isTradeRequest", False)),
        trade_type=result.get("tradeType") or "",
        amount=result.get("amount") or "",
        details=message,
        rate=result.get("rate") or None,
        period=result.get("period") or None,
        counterparty=result.get("counterparty") or None,
        is_confirmation=bool(result.get("isConfirmation", False)),
        is_negotiation=bool(result.get("isNegotiation", False)),
    )


async def analyze_message_for_trade(message: str) -> TradeDetails:
    """Run trade detection using the configured strategy."""
    if settings.trade_detection_mode != "llm":
        return extract_trade(message)
    if not is_llm_configured():
        logger.warning("LLM trade detection requested without an API key, using pattern matching")
        return extract_trade(message)
    try:
        return await _extract_trade_with_llm(message)
    except Exception as e:
        logger.error(f"Error analyzing message for trade intent: {str(e)}")
        return TradeDetails()
