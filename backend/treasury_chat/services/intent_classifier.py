"""
Rule based intent detection for chat messages.

A message is matched first against exact trigger phrases, then scored
against every feature/action keyword pair, and finally against feature
keywords alone. Thresholds and iteration order decide ties, so results are
fully deterministic for a given message.
"""
import logging
from typing import List, Optional

from treasury_chat.schemas.analysis import Action, CommandIntent, Feature, IntentParams
from treasury_chat.services.patterns import (
    ACTION_KEYWORDS,
    AMOUNT_PARAM_PATTERNS,
    DATE_PATTERNS,
    DIRECT_PHRASES,
    DURATION_PARAM_PATTERNS,
    FEATURE_KEYWORDS,
    RATE_PARAM_PATTERNS,
)

logger = logging.getLogger(__name__)

DIRECT_PHRASE_CONFIDENCE = 0.9
FEATURE_WEIGHT = 0.6
ACTION_WEIGHT = 0.4
MIN_COMBINED_SCORE = 0.3
MIN_FEATURE_ONLY_SCORE = 0.4
FEATURE_ONLY_DISCOUNT = 0.7

# Features whose intents carry money market parameters
_MONEY_FEATURES = (Feature.trades, Feature.quotes)


def _first_match(patterns, message: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(message)
        if match:
            return match.group(0)
    return None


def _count_matches(terms: List[str], lower_message: str) -> int:
    return sum(1 for term in terms if term in lower_message)


def extract_params(message: str, feature: Feature) -> IntentParams:
    """Pull a date, and for trades/quotes an amount, rate and duration, out of a message."""
    params = IntentParams(date=_first_match(DATE_PATTERNS, message))
    if Feature(feature) in _MONEY_FEATURES:
        params.amount = _first_match(AMOUNT_PARAM_PATTERNS, message)
        params.rate = _first_match(RATE_PARAM_PATTERNS, message)
        params.duration = _first_match(DURATION_PARAM_PATTERNS, message)
    return params


def _intent(message: str, feature: str, action: str, confidence: float) -> CommandIntent:
    feature = Feature(feature)
    return CommandIntent(
        feature=feature,
        action=Action(action),
        confidence=confidence,
        extracted_params=extract_params(message, feature),
    )


def classify(message: str) -> Optional[CommandIntent]:
    """
    Classify a chat message into a feature/action intent.

    Returns None when nothing matches with enough confidence.
    """
    lower_message = message.lower()

    for key, phrases in DIRECT_PHRASES.items():
        feature, action = key.split("_", 1)
        for phrase in phrases:
            if phrase in lower_message:
                logger.debug(f"Direct phrase '{phrase}' matched {key}")
                return _intent(message, feature, action, DIRECT_PHRASE_CONFIDENCE)

    best = None
    best_score = 0.0
    for feature, feature_terms in FEATURE_KEYWORDS.items():
        feature_matches = _count_matches(feature_terms, lower_message)
        if feature_matches == 0:
            continue
        for action, action_terms in ACTION_KEYWORDS.items():
            action_matches = _count_matches(action_terms, lower_message)
            if action_matches == 0:
                continue
            feature_score = feature_matches / len(feature_terms)
            action_score = action_matches / len(action_terms)
            combined = FEATURE_WEIGHT * feature_score + ACTION_WEIGHT * action_score
            # Strict comparison keeps the first pair seen on ties
            if combined > best_score:
                best_score = combined
                best = (feature, action)

    if best is not None and best_score > MIN_COMBINED_SCORE:
        return _intent(message, best[0], best[1], best_score)

    for feature, feature_terms in FEATURE_KEYWORDS.items():
        feature_matches = _count_matches(feature_terms, lower_message)
        feature_score = feature_matches / len(feature_terms)
        if feature_matches > 1 and feature_score > MIN_FEATURE_ONLY_SCORE:
            return _intent(message, feature, Action.view.value, feature_score * FEATURE_ONLY_DISCOUNT)

    return None
