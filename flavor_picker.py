import json
import logging

import gemini_client
import prompts
from errors import ErrorKind, FlavorError

# single attempt, no backoff
POSTER_MAX_RETRIES = 1

logger = logging.getLogger(__name__)


def fetch_reasons(movie, api_key, **retry_options):
    system_message, user_message = prompts.reasons_prompt(movie)
    raw_text = gemini_client.generate_json_text(
        api_key, system_message, user_message, **retry_options
    )
    return _validate_reasons(raw_text)


def fetch_recommendations(movie, reason, api_key, **retry_options):
    system_message, user_message = prompts.recommendations_prompt(movie, reason)
    raw_text = gemini_client.generate_json_text(
        api_key, system_message, user_message, **retry_options
    )
    return _validate_recommendations(raw_text)


def generate_poster(title, year, api_key, max_retries=POSTER_MAX_RETRIES):
    prompt = prompts.poster_prompt(title, year)
    return gemini_client.generate_image(api_key, prompt, max_retries=max_retries)


def _load_payload(raw_text):
    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise FlavorError(ErrorKind.PARSE, str(exc)) from exc
    if not isinstance(payload, dict):
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, "payload must be a JSON object")
    return payload


def _validate_reasons(raw_text):
    payload = _load_payload(raw_text)
    reasons = payload.get("reasons")

    if not isinstance(reasons, list):
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, "reasons must be a list")
    if len(reasons) != prompts.REASON_COUNT:
        raise FlavorError(
            ErrorKind.SHAPE_MISMATCH,
            f"expected {prompts.REASON_COUNT} reasons, got {len(reasons)}",
        )
    if not all(isinstance(reason, str) and reason.strip() for reason in reasons):
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, "reasons must be non-empty strings")

    return [reason.strip() for reason in reasons]


def _validate_recommendations(raw_text):
    payload = _load_payload(raw_text)
    items = payload.get("recommendations")

    if not isinstance(items, list):
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, "recommendations must be a list")
    if len(items) != prompts.RECOMMENDATION_COUNT:
        raise FlavorError(
            ErrorKind.SHAPE_MISMATCH,
            f"expected {prompts.RECOMMENDATION_COUNT} recommendations, got {len(items)}",
        )

    normalized = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise FlavorError(ErrorKind.SHAPE_MISMATCH, f"recommendation {idx} is not an object")
        title = item.get("title")
        year = item.get("year")
        why = item.get("why")
        if not isinstance(title, str) or not title.strip():
            raise FlavorError(ErrorKind.SHAPE_MISMATCH, f"recommendation {idx} missing title")
        if isinstance(year, bool) or not isinstance(year, (str, int)):
            raise FlavorError(ErrorKind.SHAPE_MISMATCH, f"recommendation {idx} missing year")
        if not isinstance(why, str):
            raise FlavorError(ErrorKind.SHAPE_MISMATCH, f"recommendation {idx} missing why")
        normalized.append(
            {
                "title": title.strip(),
                "year": year.strip() if isinstance(year, str) else year,
                "why": why.strip(),
                "poster_url": None,
            }
        )

    logger.info("Parsed %d recommendations", len(normalized))
    return normalized
