"""LLM-level tracing via Langfuse. Tracing is off unless LANGFUSE_PUBLIC_KEY is set.

Includes retry logic with fallback model chain on API errors.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langfuse import Langfuse

from observability.metrics import AGENT_TOKEN_USAGE, TOKENS_USED
from scaling.config import INFERENCE_MAX_ATTEMPTS, MODEL_CHAIN, calculate_cost
from scaling.model_selector import get_model

logger = logging.getLogger(__name__)

_langfuse: Langfuse | None = None
_langfuse_checked = False


def _get_langfuse() -> Langfuse | None:
    global _langfuse, _langfuse_checked
    if _langfuse_checked:
        return _langfuse
    _langfuse_checked = True
    if os.getenv("LANGFUSE_PUBLIC_KEY"):
        _langfuse = Langfuse()
        logger.info("[langfuse] Tracing enabled")
    else:
        logger.info("[langfuse] No API key found — tracing disabled")
    return _langfuse


def usage_tokens(response: Any) -> tuple[int, int]:
    """Return (input, output) token counts from a chat response."""
    usage = getattr(response, "usage_metadata", None) or {}
    return usage.get("input_tokens", 0), usage.get("output_tokens", 0)


@contextmanager
def _generation_span(
    agent_name: str, model: str, messages: list[BaseMessage], job_id: str, user_id: str
) -> Iterator[Any | None]:
    lf = _get_langfuse()
    if lf is None:
        yield None
        return

    with lf.start_as_current_generation(
        name=f"{agent_name}-llm-call",
        model=model,
        input=[{"role": m.type, "content": m.content} for m in messages],
        metadata={"job_id": job_id, "user_id": user_id, "agent": agent_name},
    ) as generation:
        lf.update_current_trace(
            name=f"stage-{agent_name}",
            user_id=user_id or None,
            session_id=job_id or None,
        )
        try:
            yield generation
        except Exception as exc:
            generation.update(level="ERROR", status_message=str(exc))
            raise


async def traced_call(
    build_llm: Callable[[str], BaseChatModel],
    messages: list[BaseMessage],
    agent_name: str,
    model: str | None = None,
    job_id: str = "",
    user_id: str = "",
):
    """Call the LLM and trace via Langfuse if available.

    *build_llm* turns a model name into a ready chat model (temperature, token
    budget and response format already bound). On API errors (rate limit,
    model unavailable), retries with the next model in MODEL_CHAIN.
    """
    max_attempts = max(1, min(len(MODEL_CHAIN), INFERENCE_MAX_ATTEMPTS))
    model_used = model or get_model(agent_name)

    for attempt in range(max_attempts):
        if attempt > 0:
            model_used = get_model(agent_name, attempt=attempt)
            logger.warning(
                f"[langfuse] {agent_name}: retrying with fallback model '{model_used}' "
                f"(attempt {attempt + 1}/{max_attempts})"
            )

        try:
            response = await _traced_invoke(
                build_llm(model_used), messages, agent_name, job_id, user_id, model_used,
            )
            response.response_metadata["model_used"] = model_used
            return response
        except Exception as e:
            logger.error(f"[langfuse] {agent_name}: API error on '{model_used}': {e}")
            if attempt == max_attempts - 1:
                raise


async def _traced_invoke(llm, messages, agent_name, job_id, user_id, model_used):
    """Invoke LLM with optional Langfuse tracing and token accounting."""
    with _generation_span(agent_name, model_used, messages, job_id, user_id) as generation:
        start = time.time()
        response = await llm.ainvoke(messages)
        duration_ms = (time.time() - start) * 1000

        input_tokens, output_tokens = usage_tokens(response)
        TOKENS_USED.inc(input_tokens + output_tokens)
        AGENT_TOKEN_USAGE.labels(agent=agent_name).inc(input_tokens + output_tokens)

        if generation is not None:
            generation.update(
                output=response.content,
                usage_details={"input": input_tokens, "output": output_tokens},
                metadata={
                    "duration_ms": round(duration_ms, 2),
                    "cost_usd": calculate_cost(model_used, input_tokens, output_tokens),
                    "model_used": model_used,
                },
            )
    return response
