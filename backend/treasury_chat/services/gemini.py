import asyncio
import json
import logging
import random
from functools import lru_cache

import google.generativeai as genai
from treasury_chat.config import settings

logger = logging.getLogger(__name__)

# System prompt for the UK local council money market assistant
SYSTEM_PROMPT = """
You are a specialised financial AI assistant for UK local councils focusing on money market information.
Your expertise includes:

1. PWLB (Public Works Loan Board) borrowing rates and strategies
2. Money market fund investments
3. Cash flow management for councils
4. Treasury management strategies
5. Debt restructuring options
6. Local government financial regulations in the UK

When responding:
- Use formal, professional language appropriate for government financial officials
- Cite relevant UK treasury guidelines, CIPFA codes, or financial regulations when applicable
- Provide specific, actionable advice tailored to UK local council contexts
- Present balanced views on investment options, always emphasising prudence and risk management
- Highlight when certain strategies may require Section 151 Officer approval
- Use the British pound (£) symbol for all currency values

NEVER make up specific current market rates. If asked for current rates, explain that you don't
have real-time data but can explain how to interpret rates and trends.
"""

# Structured extraction calls get no assistant persona
JSON_SYSTEM_PROMPT = (
    "You extract structured data from messages written by UK local council treasury officers. "
    "Reply with a single JSON object that follows the requested fields exactly and nothing else."
)

TITLE_PROMPT = """
Generate a short, descriptive title (5 words or less) for a conversation that starts with the
message below, about UK local council finances and money markets.
Return a JSON object of the form {{"title": "..."}}.

Message: "{message}"
"""

# Canned output used in development mode and whenever the API call fails
FALLBACK_CHAT_RESPONSE = """Thank you for your enquiry regarding UK local council money market options.

While I don't have access to current market rates, the PWLB (Public Works Loan Board) offers various
borrowing options for local councils, with rates that vary based on loan duration and type.

For money market investments, councils typically consider:

1. Treasury bills
2. Certificates of deposit
3. Money market funds
4. Short-term bonds

Would you like more specific information about any of these areas? Please try again shortly if you
were expecting a more detailed answer."""

FALLBACK_TITLES = [
    "PWLB Borrowing Options",
    "Treasury Management Strategy",
    "Council Investment Portfolio",
    "Cash Flow Forecasting",
    "UK Council Finance Query",
]

DEFAULT_TITLE = "New Conversation"


class LLMServiceError(Exception):
    """Raised when the text generation service cannot produce a usable answer."""


def is_llm_configured() -> bool:
    return bool(settings.gemini_api_key) and settings.gemini_api_key != "dummy_key_for_development"


@lru_cache()
def get_model(json_output: bool = False):
    genai.configure(api_key=settings.gemini_api_key)
    if json_output:
        system_instruction = JSON_SYSTEM_PROMPT
        generation_config = {"temperature": 0.1, "max_output_tokens": 500, "response_mime_type": "application/json"}
    else:
        system_instruction = SYSTEM_PROMPT
        generation_config = {"temperature": 0.7, "max_output_tokens": 1500}
    return genai.GenerativeModel(
        settings.gemini_model,
        system_instruction=system_instruction,
        generation_config=generation_config,
    )


async def analyze_with_gemini(prompt: str, json_output: bool = False) -> str:
    if not is_llm_configured():
        raise LLMServiceError("Gemini API key is not configured")
    model = get_model(json_output)
    try:
        response = await asyncio.wait_for(
            asyncio.to_thread(model.generate_content, prompt),
            timeout=settings.llm_timeout_seconds,
        )
        text = response.text
    except asyncio.TimeoutError:
        raise LLMServiceError(f"Gemini did not answer within {settings.llm_timeout_seconds}s")
    except Exception as e:
        raise LLMServiceError(f"Error analyzing with Gemini: {str(e)}") from e
    if not text:
        raise LLMServiceError("Empty response from Gemini")
    return text


async def generate_json(prompt: str) -> dict:
    text = await analyze_with_gemini(prompt, json_output=True)
    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        raise LLMServiceError(f"Gemini returned invalid JSON: {str(e)}") from e
    if not isinstance(result, dict):
        raise LLMServiceError("Gemini returned JSON that is not an object")
    return result


async def generate_chat_response(message: str) -> str:
    """Answer a chat message, falling back to canned text when Gemini is unavailable."""
    if not is_llm_configured():
        logger.info("Using development mode response for chat")
        return FALLBACK_CHAT_RESPONSE
    try:
        return await analyze_with_gemini(message)
    except LLMServiceError as e:
        logger.error(f"Falling back to canned chat response: {str(e)}")
        return FALLBACK_CHAT_RESPONSE


async def generate_session_title(message: str) -> str:
    if not is_llm_configured():
        return random.choice(FALLBACK_TITLES)
    try:
        result = await generate_json(TITLE_PROMPT.format(message=message))
        return result.get("title") or DEFAULT_TITLE
    except LLMServiceError as e:
        logger.error(f"Falling back to canned session title: {str(e)}")
        return random.choice(FALLBACK_TITLES)
