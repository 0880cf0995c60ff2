import logging
import time

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from errors import ErrorKind, FlavorError


BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
TEXT_MODEL = "gemini-2.5-flash-preview-09-2025"
IMAGE_MODEL = "imagen-4.0-generate-001"

DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF = 1.0
REQUEST_TIMEOUT = 30
IMAGE_TIMEOUT = 90

logger = logging.getLogger(__name__)


def with_backoff(call, max_retries=DEFAULT_MAX_RETRIES, backoff=DEFAULT_BACKOFF, sleep=time.sleep):
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    retrying = Retrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=backoff),
        retry=retry_if_exception_type(requests.RequestException),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
        sleep=sleep,
    )
    return retrying(call)


def fetch_with_retry(
    url,
    payload,
    api_key,
    max_retries=DEFAULT_MAX_RETRIES,
    backoff=DEFAULT_BACKOFF,
    sleep=time.sleep,
    timeout=REQUEST_TIMEOUT,
):
    def _post():
        response = requests.post(url, params={"key": api_key}, json=payload, timeout=timeout)
        response.raise_for_status()
        return response.json()

    try:
        return with_backoff(_post, max_retries=max_retries, backoff=backoff, sleep=sleep)
    except requests.RequestException as exc:
        raise FlavorError(ErrorKind.NETWORK, str(exc)) from exc


def generate_json_text(api_key, system_prompt, user_query, model=TEXT_MODEL, **retry_options):
    url = f"{BASE_URL}/{model}:generateContent"
    payload = {
        "contents": [{"parts": [{"text": user_query}]}],
        "systemInstruction": {"parts": [{"text": system_prompt}]},
        "generationConfig": {"responseMimeType": "application/json"},
    }
    data = fetch_with_retry(url, payload, api_key, **retry_options)
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, f"no text in response: {exc!r}") from exc
    if not isinstance(text, str):
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, "response text is not a string")
    return text


def generate_image(api_key, prompt, model=IMAGE_MODEL, **retry_options):
    url = f"{BASE_URL}/{model}:predict"
    payload = {
        "instances": [{"prompt": prompt}],
        "parameters": {"sampleCount": 1},
    }
    retry_options.setdefault("timeout", IMAGE_TIMEOUT)
    data = fetch_with_retry(url, payload, api_key, **retry_options)
    try:
        encoded = data["predictions"][0]["bytesBase64Encoded"]
    except (KeyError, IndexError, TypeError) as exc:
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, f"no image in response: {exc!r}") from exc
    if not encoded:
        raise FlavorError(ErrorKind.SHAPE_MISMATCH, "empty image payload")
    return f"data:image/png;base64,{encoded}"
