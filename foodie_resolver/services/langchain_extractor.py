from __future__ import annotations

import logging
import os
from typing import Any, Type, TypeVar

from langchain_core.messages import AIMessage
from langchain_core.exceptions import OutputParserException
from langchain_core.runnables import RunnableLambda
from langchain_core.runnables.retry import RunnableRetry
from langchain_openai import ChatOpenAI
from langsmith import traceable
from pydantic import BaseModel, ValidationError

from ..config import Settings
from ..models import CuisineIdentification, KeywordExtraction, RegionIdentification
from ..prompts.extraction_prompts import build_cuisine_prompt, build_keyword_prompt, build_region_prompt
from .errors import ConfigurationError, ExtractorError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

EMPTY_QUERY_MESSAGE = "Please enter a search query"


class LangchainExtractionClient:
    """Keyword, region and cuisine extraction backed by a chat model."""

    def __init__(self, settings: Settings, *, llm: Any | None = None) -> None:
        if llm is None and not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for keyword extraction", reason="missing_api_key")

        self._setup_langsmith(settings)
        if llm is None:
            llm = ChatOpenAI(
                model=settings.openai_model,
                api_key=settings.openai_api_key,
                temperature=settings.openai_temperature,
                timeout=settings.http_timeout_seconds,
                base_url=settings.openai_base_url,
            )
        self._llm = llm
        self._keyword_chain = self._build_chain(build_keyword_prompt(), KeywordExtraction)
        self._region_chain = self._build_chain(build_region_prompt(), RegionIdentification)
        self._cuisine_chain = self._build_chain(build_cuisine_prompt(), CuisineIdentification)

    @staticmethod
    def _setup_langsmith(settings: Settings) -> None:
        """Export LangSmith tracing variables when enabled via settings."""
        if not (settings.langsmith_api_key and settings.langsmith_tracing_v2):
            return
        os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
        os.environ.setdefault("LANGSMITH_API_KEY", settings.langsmith_api_key)
        os.environ.setdefault("LANGSMITH_PROJECT", settings.langsmith_project or "foodie-resolver")

    def _build_chain(self, prompt, model: Type[BaseModel]) -> RunnableRetry:
        structured = self._llm.with_structured_output(model, include_raw=True)
        # include_raw=True reports parse failures instead of raising; the parse
        # step raises them again so the retry sees them.
        parse = RunnableLambda(lambda result: self._parse_structured(result, model))
        return RunnableRetry(
            bound=prompt | structured | parse,
            max_attempt_number=2,
            retry_exception_types=(OutputParserException, ValueError),
            wait_exponential_jitter=False,
        )

    @traceable(run_type="chain", name="extract_keywords")
    async def extract_keywords(self, text: str) -> KeywordExtraction:
        if not text or not text.strip():
            return KeywordExtraction(message=EMPTY_QUERY_MESSAGE)
        return await self._run(self._keyword_chain, KeywordExtraction, text, operation="extract_keywords")

    @traceable(run_type="chain", name="identify_region")
    async def identify_region(self, text: str) -> RegionIdentification:
        if not text or not text.strip():
            return RegionIdentification()
        return await self._run(self._region_chain, RegionIdentification, text, operation="identify_region")

    @traceable(run_type="chain", name="identify_cuisine_and_dish")
    async def identify_cuisine_and_dish(self, text: str) -> CuisineIdentification:
        if not text or not text.strip():
            return CuisineIdentification()
        return await self._run(
            self._cuisine_chain,
            CuisineIdentification,
            text,
            operation="identify_cuisine_and_dish",
        )

    async def _run(self, chain: RunnableRetry, model: Type[ModelT], text: str, *, operation: str) -> ModelT:
        try:
            parsed = await chain.ainvoke({"text": text.strip()})
        except OutputParserException as exc:
            logger.warning("LangChain %s returned unusable output: %s", operation, exc)
            raise ExtractorError(f"{operation} returned unusable output", reason="invalid_payload") from exc
        except Exception as exc:
            logger.warning("LangChain %s failed: %s", operation, exc)
            raise ExtractorError(f"{operation} failed", reason=str(exc) or exc.__class__.__name__) from exc
        logger.debug("LangChain %s -> %s", operation, parsed.model_dump(exclude_none=True))
        return parsed

    @staticmethod
    def _parse_structured(result: Any, model: Type[ModelT]) -> ModelT:
        parsed = result
        if isinstance(result, dict) and "parsed" in result:
            parsed = result.get("parsed")
            if parsed is None:
                raw = result.get("raw")
                if not (isinstance(raw, AIMessage) and _extract_message_content(raw).strip()):
                    error = result.get("parsing_error")
                    raise OutputParserException(f"structured output missing: {error or 'empty response'}")
                parsed = raw
        if isinstance(parsed, model):
            return parsed
        try:
            if isinstance(parsed, AIMessage):
                content = _extract_message_content(parsed).strip()
                return model.model_validate_json(_strip_code_fence(content) or "{}")
            if isinstance(parsed, BaseModel):
                return model.model_validate(parsed.model_dump(by_alias=True))
            return model.model_validate(parsed or {})
        except ValidationError as exc:
            logger.warning("Failed to parse %s: %s; payload=%s", model.__name__, exc, parsed)
            raise OutputParserException(f"invalid {model.__name__} payload", llm_output=str(parsed)) from exc


def _extract_message_content(message: AIMessage) -> str:
    if isinstance(message.content, str):
        return message.content
    if isinstance(message.content, list):
        # OpenAI can return list[dict]; join textual segments
        return " ".join(
            part.get("text", "")
            for part in message.content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return str(message.content)


def _strip_code_fence(content: str) -> str:
    if content.startswith("```"):
        content = content.strip("`")
        if content.lower().startswith("json"):
            content = content[4:]
    return content.strip()
