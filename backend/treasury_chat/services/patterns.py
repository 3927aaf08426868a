"""
Static vocabulary for trade detection and intent classification.

Everything downstream (trade extraction, intent scoring, parameter
extraction) is driven by these tables, so their order matters: dicts are
iterated in declaration order and the first match wins.
"""
import re

# Terms that suggest a message is about executing or negotiating a trade
TRADE_INDICATORS = [
    "execute", "purchase", "buy", "sell", "invest", "place order", "transact",
    "proceed with", "go ahead with", "arrange", "acquire", "borrow", "loan",
    "deposit", "transfer", "trade", "exchange", "swap", "agreed", "confirm",
    "confirmation", "deal", "offer", "counter", "accept",
]

_SCALE = r"(million|m|billion|bn|k|thousand)?"

# Optional £, digits with thousands separators, optional decimals and scale word
AMOUNT_PATTERN = re.compile(r"£?\s*\d+[\d,]*(\.\d+)?\s*" + _SCALE, re.IGNORECASE)

# Same shape but a leading £ or GBP is required
GBP_AMOUNT_PATTERN = re.compile(r"(?:£|\bgbp\b)\s*\d+[\d,]*(\.\d+)?\s*" + _SCALE, re.IGNORECASE)

RATE_PATTERN = re.compile(r"\d+(?:\.\d+)?%")

PERIOD_PATTERN = re.compile(r"\d+\s*(?:day|week|month|year)s?", re.IGNORECASE)

CONFIRMATION_PATTERN = re.compile(r"confirm|agreed|trade confirmed|deal done", re.IGNORECASE)

# Counterparties are matched against the original (cased) message
COUNCIL_PATTERN = re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+Council")
BANK_PATTERN = re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+Bank")

NEGOTIATION_TERMS = ["offer", "counter", "price"]

# tradeType classification, checked in order
TRADE_TYPE_RULES = [
    ("Loan/Borrowing", ["borrow", "loan", "pwlb"]),
    ("MMF Investment", ["invest", "mmf", "money market fund"]),
    ("Treasury/Bond", ["treasury", "gilt", "bond"]),
    ("Deposit", ["deposit"]),
]
DEFAULT_TRADE_TYPE = "Money Market Transaction"

FEATURE_KEYWORDS = {
    "calendar": [
        "calendar", "schedule", "meeting", "appointment", "event", "diary",
        "agenda", "deadline", "reminder", "committee", "availability", "book a",
    ],
    "documents": [
        "document", "file", "report", "pdf", "upload", "attachment",
        "paperwork", "policy", "statement", "spreadsheet", "minutes", "strategy paper",
    ],
    "forecasting": [
        "forecast", "predict", "projection", "cash flow", "cashflow", "outlook",
        "trend", "future rate", "scenario", "model", "budget", "estimate",
    ],
    "trades": [
        "trade", "deal", "transaction", "borrow", "loan", "lend", "deposit",
        "invest", "pwlb", "settlement", "counterparty", "money market",
    ],
    "quotes": [
        "quote", "price", "rate", "pricing", "bid", "offer", "yield",
        "spread", "indicative", "market rate", "sonia", "base rate",
    ],
}

ACTION_KEYWORDS = {
    "view": [
        "show", "view", "see", "display", "list", "what", "get", "check",
        "find", "look", "open", "my",
    ],
    "create": [
        "create", "new", "add", "schedule", "book", "make", "set up",
        "arrange", "draft", "generate", "start", "prepare",
    ],
    "update": [
        "update", "change", "modify", "edit", "amend", "adjust",
        "reschedule", "move", "revise", "correct", "extend", "roll over",
    ],
    "delete": [
        "delete", "remove", "cancel", "drop", "discard", "erase", "clear",
        "withdraw", "scrap", "get rid of", "archive", "void",
    ],
    "analyze": [
        "analyze", "analyse", "analysis", "compare", "evaluate", "assess",
        "review", "breakdown", "insight", "performance", "summarise", "summarize",
    ],
    "execute": [
        "execute", "proceed", "go ahead", "confirm", "place", "submit",
        "approve", "agree", "accept", "process", "book it", "do it",
    ],
}

# "<feature>_<action>" -> phrases that map straight to an intent
DIRECT_PHRASES = {
    "calendar_view": [
        "show my calendar", "show me my calendar", "open my calendar", "view calendar",
        "what's on my calendar", "upcoming meetings",
    ],
    "calendar_create": [
        "schedule a meeting", "book a meeting", "create an event", "add to calendar",
        "add to my calendar",
    ],
    "calendar_update": ["reschedule the meeting", "move the meeting"],
    "calendar_delete": ["cancel the meeting", "delete the event"],
    "documents_view": [
        "show my documents", "show me my documents", "open documents", "view documents",
        "my documents",
    ],
    "documents_create": ["upload a document", "create a document", "new document"],
    "documents_analyze": [
        "analyse this document", "analyze this document", "summarise the document",
        "summarize the document",
    ],
    "forecasting_view": [
        "show forecast", "show me the forecast", "view forecasts", "cash flow forecast",
    ],
    "forecasting_create": [
        "create a forecast", "generate a forecast", "new forecast", "run a forecast",
    ],
    "forecasting_analyze": [
        "forecast rates", "predict rates", "rate forecast", "interest rate outlook",
    ],
    "trades_view": [
        "show me my trades", "show my trades", "view trades", "view my trades",
        "trade history", "list trades", "my trades",
    ],
    "trades_create": ["new trade", "create a trade", "book a trade", "log a trade"],
    "trades_analyze": [
        "analyse my trades", "analyze my trades", "trade analytics", "trade performance",
    ],
    "trades_execute": [
        "execute trade", "execute the trade", "place the trade", "confirm the trade",
    ],
    "quotes_view": [
        "show me quotes", "show quotes", "get a quote", "latest quotes",
        "show me rates", "current rates",
    ],
    "quotes_create": ["request a quote", "ask for a quote", "new quote"],
    "quotes_analyze": ["compare quotes", "compare rates"],
}

_MONTHS = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

DATE_PATTERNS = [
    re.compile(r"\btoday\b", re.IGNORECASE),
    re.compile(r"\btomorrow\b", re.IGNORECASE),
    re.compile(r"\byesterday\b", re.IGNORECASE),
    re.compile(r"\bnext week\b", re.IGNORECASE),
    re.compile(r"\bthis week\b", re.IGNORECASE),
    re.compile(r"\blast week\b", re.IGNORECASE),
    re.compile(r"\bnext month\b", re.IGNORECASE),
    re.compile(r"\bthis month\b", re.IGNORECASE),
    re.compile(r"\blast month\b", re.IGNORECASE),
    re.compile(r"\b" + _MONTHS + r"\s+\d{1,2}(?:st|nd|rd|th)?\b", re.IGNORECASE),
    re.compile(r"\b\d{1,2}(?:st|nd|rd|th)?\s+" + _MONTHS + r"\b", re.IGNORECASE),
    re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"),
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
]

_SCALE_WORD = r"(?:million|billion|thousand|bn|m|k)\b"

AMOUNT_PARAM_PATTERNS = [
    re.compile(r"£\s*\d+(?:,\d{3})*(?:\.\d+)?\s*" + _SCALE_WORD, re.IGNORECASE),
    re.compile(r"\bgbp\s*\d+(?:,\d{3})*(?:\.\d+)?\s*" + _SCALE_WORD, re.IGNORECASE),
    re.compile(r"£\s*\d+(?:,\d{3})*(?:\.\d+)?", re.IGNORECASE),
    re.compile(r"\bgbp\s*\d+(?:,\d{3})*(?:\.\d+)?", re.IGNORECASE),
    re.compile(r"\b\d+(?:,\d{3})*(?:\.\d+)?\s*" + _SCALE_WORD + r"\s*(?:pounds|gbp)\b", re.IGNORECASE),
]

RATE_PARAM_PATTERNS = [
    re.compile(r"\d+(?:\.\d+)?\s*%"),
    re.compile(r"\d+(?:\.\d+)?\s*(?:per\s*cent|percent)\b", re.IGNORECASE),
    re.compile(r"\brate of\s+\d+(?:\.\d+)?", re.IGNORECASE),
]

DURATION_PARAM_PATTERNS = [
    re.compile(r"\b\d+\s*(?:day|week|month|year)s?\b", re.IGNORECASE),
    re.compile(r"\b(?:overnight|on|tom next|spot|1w|2w|1m|2m|3m|6m|1y)\b", re.IGNORECASE),
]
