"""
OpenAI LLM Provider (LangChain-based)

Implements LLMProvider using LangChain's ChatOpenAI.

Every call reports token usage and estimated cost to the active
CostCollector (if any), tagged with the current telemetry stage and unit
(the chunk or entity type group being worked on).

Example:
    >>> provider = OpenAILLMProvider(model="gpt-4o")
    >>> result = await provider.generate_structured(
    ...     "Extract entities from: Ada Lovelace worked with Charles Babbage.",
    ...     KnowledgeGraphExtraction,
    ...     system="You are a knowledge graph extraction expert.",
    ... )
    >>> [e.name for e in result.entities]
    ['Ada Lovelace', 'Charles Babbage']
"""

from __future__ import annotations

import time
from typing import Any, TypeVar

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from docgraph.config.pricing import estimate_llm_cost_usd
from docgraph.providers.base import LLMProvider
from docgraph.types.results import CostUsageRecord
from docgraph.utils.cost_telemetry import current_stage, current_unit, record_usage
from docgraph.utils.token_count import count_chat_tokens, count_text_tokens

T = TypeVar("T", bound=BaseModel)

_PROVIDER = "openai"


def _as_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _usage_from(usage: dict[str, Any]) -> tuple[int | None, int | None, int | None]:
    return (
        _as_int(usage.get("input_tokens") or usage.get("prompt_tokens")),
        _as_int(usage.get("output_tokens") or usage.get("completion_tokens")),
        _as_int(usage.get("total_tokens")),
    )


def _extract_token_usage(response: Any) -> tuple[int | None, int | None, int | None]:
    """
    Read token usage from a LangChain message.

    Checks `usage_metadata` first, then `response_metadata.token_usage`.

    Returns:
        (input_tokens, output_tokens, total_tokens), None where unknown
    """
    if response is None:
        return None, None, None

    candidates: list[Any] = [getattr(response, "usage_metadata", None)]
    response_metadata = getattr(response, "response_metadata", None)
    if isinstance(response_metadata, dict):
        candidates.append(response_metadata.get("token_usage") or response_metadata.get("usage"))

    for usage in candidates:
        if isinstance(usage, dict):
            counts = _usage_from(usage)
            if any(v is not None for v in counts):
                return counts

    return None, None, None


def _build_messages(prompt: str, system: str | None) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    if system:
        messages.append(SystemMessage(content=system))
    messages.append(HumanMessage(content=prompt))
    return messages


class OpenAILLMProvider(LLMProvider):
    """
    OpenAI LLM provider implementation using LangChain.

    Args:
        api_key: OpenAI API key. If None, uses OPENAI_API_KEY environment variable.
        model: Model to use (default: "gpt-4o")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
    ) -> None:
        self._api_key = api_key
        self._model = model

    def _client(self) -> ChatOpenAI:
        kwargs: dict[str, Any] = {"model": self._model, "temperature": 0.0}
        if self._api_key:
            kwargs["api_key"] = self._api_key
        return ChatOpenAI(**kwargs)

    @property
    def model_name(self) -> str:
        """Current model name."""
        return self._model

    def _record(
        self,
        *,
        schema_name: str,
        prompt: str,
        system: str | None,
        output_text: str,
        raw_response: Any,
        started_ns: int,
    ) -> None:
        """Emit one usage record, estimating tokens when the response has none."""
        input_tokens, output_tokens, total_tokens = _extract_token_usage(raw_response)
        estimated = False

        if input_tokens is None:
            chat_messages = [system, prompt] if system else [prompt]
            input_tokens = count_chat_tokens(chat_messages, self._model)
            estimated = True
        if output_tokens is None:
            output_tokens = count_text_tokens(output_text, self._model)
            estimated = True
        if total_tokens is None:
            total_tokens = input_tokens + output_tokens

        estimated_cost, pricing_found = estimate_llm_cost_usd(
            self._model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
        elapsed_ms = (time.perf_counter_ns() - started_ns) // 1_000_000

        record_usage(
            CostUsageRecord(
                provider=_PROVIDER,
                model=self._model,
                operation="generate_structured",
                stage=current_stage(),
                unit=current_unit(),
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=total_tokens,
                estimated_cost_usd=estimated_cost,
                latency_ms=int(elapsed_ms),
                estimated=estimated,
                metadata={"schema": schema_name, "pricing_found": pricing_found},
            )
        )

    async def generate_structured(
        self,
        prompt: str,
        schema: type[T],
        *,
        system: str | None = None,
    ) -> T:
        """
        Generate a structured response matching a Pydantic schema.

        Uses with_structured_output(include_raw=True) so usage metadata of
        the raw message stays available for telemetry.

        Args:
            prompt: User prompt/question
            schema: Pydantic model class defining expected structure
            system: Optional system message

        Returns:
            Instance of schema class populated with generated values

        Raises:
            ValueError: If the model output could not be parsed into `schema`
        """
        start = time.perf_counter_ns()
        structured_client = self._client().with_structured_output(schema, include_raw=True)
        result_obj = await structured_client.ainvoke(_build_messages(prompt, system))

        raw_response: Any = None
        if isinstance(result_obj, dict) and "parsed" in result_obj:
            result = result_obj["parsed"]
            raw_response = result_obj.get("raw")
            if result is None:
                parsing_error = result_obj.get("parsing_error")
                raise ValueError(
                    f"Structured output did not match {schema.__name__}: {parsing_error}"
                )
        else:
            result = result_obj

        output_text = (
            result.model_dump_json() if hasattr(result, "model_dump_json") else str(result)
        )
        self._record(
            schema_name=schema.__name__,
            prompt=prompt,
            system=system,
            output_text=output_text,
            raw_response=raw_response,
            started_ns=start,
        )
        return result  # type: ignore[return-value]
