"""
OpenRouter LLM risk processor.

Asks an LLM (via the OpenRouter chat-completions API) for an
independent risk opinion on the collected data.

Responsibilities:
1. Summarize collected data into a prompt
2. Call OpenRouter API
3. Parse and validate the JSON reply

Without an API key the processor has no opinion. API and parse
failures raise LLMError, which assess_risk() turns into "no opinion".
"""

import asyncio
import json
import logging
from typing import Any

import aiohttp

from riskbrain.core.exceptions import LLMError
from riskbrain.core.models import (
    CollectedData,
    Explanation,
    ExplanationType,
    ProcessorResult,
)
from riskbrain.services.processors.base import BaseRiskProcessor
from riskbrain.utils.parsing import to_number

logger = logging.getLogger(__name__)

# OpenRouter API endpoint
OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"

DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"
DEFAULT_TIMEOUT = 15.0

MAX_EXPLANATIONS = 8
MAX_EXPLANATION_LENGTH = 200

SYSTEM_PROMPT = """You are a blockchain address and token risk analyst.

RULES:
1. Use ONLY the data provided by the user
2. null means unknown - never treat it as zero
3. Do not invent facts that are not in the data
4. Reply STRICTLY in JSON

RESPONSE FORMAT:
{
  "score": <number 0-100, higher = riskier>,
  "explanations": [
    {"text": "<short reason>", "type": "<increase|decrease|neutral>"}
  ]
}

- "increase" = the reason raises the risk, "decrease" = lowers it
- At most 8 explanations, each under 200 characters"""


class LLMRiskProcessor(BaseRiskProcessor):
    """
    Risk processor backed by an LLM through OpenRouter.

    Usage:
        processor = LLMRiskProcessor(api_key="sk-or-...")
        assessment = await processor.assess_risk(address, "evm", collected_data)
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        **kwargs: Any,
    ):
        """
        Initialize OpenRouter processor.

        Args:
            api_key: OpenRouter API key
            model: Model to use
            timeout: Request timeout in seconds
            **kwargs: Passed to BaseRiskProcessor (confidence settings)
        """
        super().__init__(**kwargs)
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "openrouter"

    async def process(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> ProcessorResult | None:
        if not self._api_key:
            logger.info("OpenRouter API key not configured, skipping LLM analysis")
            return None

        logger.info(f"Requesting LLM analysis for {subject[:8]} with {self._model}")

        try:
            return await asyncio.wait_for(
                self._call_api(subject, subject_type, collected_data),
                timeout=self._timeout,
            )
        except TimeoutError:
            raise LLMError(
                technical_message=f"OpenRouter timeout after {self._timeout}s"
            ) from None

    async def _call_api(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> ProcessorResult:
        """Make actual API call to OpenRouter."""
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": self._build_user_prompt(
                        subject, subject_type, collected_data
                    ),
                },
            ],
            "temperature": 0.2,  # Lower temperature for consistent output
            "max_tokens": 600,
        }

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        timeout = aiohttp.ClientTimeout(total=self._timeout)

        async with aiohttp.ClientSession() as session:
            async with session.post(
                OPENROUTER_API_URL,
                json=payload,
                headers=headers,
                timeout=timeout,
            ) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise LLMError(
                        technical_message=f"OpenRouter {resp.status}: {error_text}"
                    )

                data = await resp.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(technical_message=f"Invalid response: {e}") from e

        return self._parse_response(content)

    def _build_user_prompt(
        self,
        subject: str,
        subject_type: str,
        collected_data: CollectedData,
    ) -> str:
        """
        Build user prompt from the collected bundle.

        Only normalized data and outcome statuses are sent;
        raw provider payloads stay local.
        """
        common = collected_data.merged_common_data().model_dump(mode="json")

        prompt_data = {
            "address": subject,
            "address_type": subject_type,
            "providers": {
                name: outcome.status.value
                for name, outcome in collected_data.outcomes.items()
            },
            "failed_providers": collected_data.errors,
            "data": common,
        }

        return (
            "Assess the risk of this address.\n\n"
            f"DATA:\n{json.dumps(prompt_data, ensure_ascii=False, indent=2)}\n\n"
            "Reply in JSON."
        )

    def _parse_response(self, content: str) -> ProcessorResult:
        """Parse and validate LLM response."""
        try:
            # Handle potential markdown code blocks
            if "```json" in content:
                content = content.split("```json")[1].split("```")[0]
            elif "```" in content:
                content = content.split("```")[1].split("```")[0]

            data = json.loads(content.strip())

        except json.JSONDecodeError as e:
            logger.debug(f"Raw content: {content}")
            raise LLMError(technical_message=f"JSON parse error: {e}") from e

        if not isinstance(data, dict):
            raise LLMError(technical_message="LLM reply is not a JSON object")

        score = to_number(data.get("score"))
        if score is None:
            raise LLMError(technical_message="LLM reply has no numeric score")

        explanations = []
        raw_explanations = data.get("explanations")
        if isinstance(raw_explanations, list):
            for item in raw_explanations[:MAX_EXPLANATIONS]:
                explanation = self._parse_explanation(item)
                if explanation is not None:
                    explanations.append(explanation)

        return ProcessorResult(score=score, explanations=explanations)

    def _parse_explanation(self, item: Any) -> Explanation | None:
        if isinstance(item, str):
            item = {"text": item}
        if not isinstance(item, dict):
            return None

        text = str(item.get("text") or "").strip()[:MAX_EXPLANATION_LENGTH]
        if not text:
            return None

        try:
            kind = ExplanationType(str(item.get("type", "neutral")).lower())
        except ValueError:
            kind = ExplanationType.NEUTRAL

        return Explanation(text=text, type=kind)
