"""Inference service backed by LangChain chat models."""

import asyncio
import logging

from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from contracts import GenerationQuality, InferenceOptions, InferenceService
from observability.langfuse_tracer import traced_call
from scaling.config import (
    INFERENCE_REQUEST_TIMEOUT,
    STAGE_TEMPERATURES,
    STAGE_TIMEOUTS,
    quality_profile,
)
from scaling.model_selector import reasoning_effort

logger = logging.getLogger(__name__)


def stage_options(stage: str, quality: GenerationQuality) -> InferenceOptions:
    """Inference depth, temperature and token budget for *stage* at *quality*."""
    profile = quality_profile(quality)
    budget = profile.repair_tokens if stage in ("repairer", "coder") else profile.stage_tokens
    return InferenceOptions(
        inference_depth=profile.inference_depth,
        temperature=STAGE_TEMPERATURES[stage],
        max_output_tokens=budget,
        stage=stage,
    )


async def generate_for_stage(
    inference: InferenceService,
    model: str,
    prompt: str,
    stage: str,
    quality: GenerationQuality,
) -> str:
    """One bounded inference call; a timeout surfaces as asyncio.TimeoutError."""
    options = stage_options(stage, quality)
    return await asyncio.wait_for(
        inference.generate_content(model, prompt, options),
        timeout=STAGE_TIMEOUTS[stage],
    )


class ChatInferenceService:
    """``generate_content`` over ChatOpenAI, traced and retried along the model chain."""

    def __init__(self, job_id: str = "", user_id: str = ""):
        self.job_id = job_id
        self.user_id = user_id

    @staticmethod
    def build_llm(model: str, options: InferenceOptions):
        llm = ChatOpenAI(
            model=model,
            temperature=options.temperature,
            max_tokens=options.max_output_tokens,
            timeout=INFERENCE_REQUEST_TIMEOUT,
            reasoning_effort=reasoning_effort(model, options.inference_depth),
        )
        if options.response_format == "json":
            return llm.bind(response_format={"type": "json_object"})
        return llm

    async def generate_content(self, model: str, prompt: str, options: InferenceOptions) -> str:
        response = await traced_call(
            lambda name: self.build_llm(name, options),
            [HumanMessage(content=prompt)],
            agent_name=options.stage or "inference",
            model=model,
            job_id=self.job_id,
            user_id=self.user_id,
        )
        return response.content if isinstance(response.content, str) else str(response.content)
