import asyncio
import logging
from typing import Any, Mapping

import httpx
import sentry_sdk
from fastapi import status

from devflow.errors import RequestError, validate

from .schemas import AnswerDraftRequest, AnswerDraftResponse

logger = logging.getLogger(__name__)

RETRIES = 3


def format_answer(text: str) -> str:
    return text.replace("<br>", " ").strip()


async def generate_answer(
    client: httpx.AsyncClient,
    url: str,
    params: AnswerDraftRequest | Mapping[str, Any],
) -> str:
    """
    Asks the answer-drafting service for a markdown answer to a question.
    The service is opaque to us; it gets the question title and body and
    replies with `{"data": "<markdown>"}`.
    """
    data = validate(AnswerDraftRequest, params)

    span = sentry_sdk.get_current_span()
    if span is not None:
        span.set_tag("ai.url", url)

    draft: AnswerDraftResponse | None = None

    retries = 0
    while retries < RETRIES:
        try:
            response = await client.post(url, json=data.model_dump())
            response.raise_for_status()
            draft = AnswerDraftResponse.model_validate(response.json())
            break
        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500:
                logger.warning("answer drafting rejected the request: %s", e)
                raise RequestError(
                    status.HTTP_502_BAD_GATEWAY, "Could not generate an answer."
                ) from e
            logger.warning("answer drafting failed: %s", e)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("answer drafting failed: %s", e)
        retries += 1
        if retries < RETRIES:
            await asyncio.sleep(retries)

    if draft is None:
        logger.error("too many answer drafting errors")
        raise RequestError(
            status.HTTP_502_BAD_GATEWAY, "Could not generate an answer."
        )

    return format_answer(draft.data)
