"""
mokawalat/ai/llm.py

Thin wrapper around the hosted Gemini chat model (langchain-google-genai).

Every flow goes through generate_structured(), which asks the model for
output matching a Pydantic schema and returns a validated instance.
"""

from __future__ import annotations

import logging
from typing import Type, TypeVar

from flask import current_app
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, ValidationError

from ..errors import FlowError

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def is_configured() -> bool:
    return bool(current_app.config.get("GOOGLE_API_KEY"))


def get_chat_model() -> ChatGoogleGenerativeAI:
    return ChatGoogleGenerativeAI(
        model=current_app.config["AI_MODEL"],
        google_api_key=current_app.config["GOOGLE_API_KEY"],
        temperature=current_app.config.get("AI_TEMPERATURE", 0.2),
    )


def generate_structured(prompt: str, schema: Type[SchemaT]) -> SchemaT:
    """Run prompt against the model and parse the reply into schema."""
    if not is_configured():
        raise FlowError("The AI model is not configured. Set GOOGLE_API_KEY to enable AI features.")

    structured = get_chat_model().with_structured_output(schema)
    try:
        result = structured.invoke(prompt)
    except Exception as exc:
        logger.exception("AI model call failed for %s", schema.__name__)
        raise FlowError("An unexpected error occurred while contacting the AI model.") from exc

    if result is None:
        raise FlowError("AI could not generate a response.")

    if isinstance(result, dict):
        try:
            result = schema.model_validate(result)
        except ValidationError as exc:
            logger.warning("AI output did not match %s: %s", schema.__name__, exc)
            raise FlowError("AI returned an unexpected response.") from exc

    return result
