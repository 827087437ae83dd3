"""
Answer Generation Service

Wraps the external language-generation collaborator behind one call:
    generate({question, context, sources}) -> {success, response, tokens_used}
                                             or {fallback_response}

Backends:
- edge: the hosted `customer-service-ai` Supabase edge function (httpx)
- gemini: in-process Gemini call with the same prompt rules
- none: generation disabled, the assistant answers from templates

Every backend raises GenerationError when it cannot produce a reply, so the
caller has a single failure type to fall back on.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import google.generativeai as genai
import httpx

from kb_assistant.config import Settings, get_settings
from kb_assistant.models.schemas import GenerationRequest, GenerationResult
from kb_assistant.utils.errors import GenerationError
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()

SYSTEM_PROMPT = (
    "You are a helpful, professional customer service AI assistant. "
    "Provide accurate responses based on company information provided to you."
)
SOURCE_CONTENT_LIMIT = 500


def build_service_prompt(request: GenerationRequest) -> str:
    """
    Prompt used when the caller did not supply one

    Each source is numbered with its category and truncated to 500 characters.
    """
    source_info = "\n\n".join(
        f"{index}. **{source.title}** ({source.category})\n"
        f"   {source.content[:SOURCE_CONTENT_LIMIT]}"
        f"{'...' if len(source.content) > SOURCE_CONTENT_LIMIT else ''}"
        for index, source in enumerate(request.sources, start=1)
    ) or "No specific company information found."

    return f"""You are a professional customer service AI assistant for a company. A customer has asked: "{request.question}"

Here is the relevant information from our company's knowledge base:

{source_info}

Please provide a helpful, accurate response following these guidelines:

1. **Be Direct and Helpful**: Answer the customer's specific question clearly
2. **Use Company Information**: Base your response on the provided company policies and information
3. **Be Professional but Friendly**: Use a conversational, customer-service tone
4. **Reference Sources**: When applicable, mention which policy or document you're referencing
5. **Handle Missing Info**: If you don't have complete information, be honest and suggest contacting support
6. **Be Specific**: For questions about returns, shipping, payments, etc., provide specific details from our policies
7. **Keep it Concise**: Aim for 2-4 sentences unless more detail is needed

Customer Question: {request.question}

Your Response:"""


class AnswerGenerator(ABC):
    """External answer-generation collaborator"""

    name: str = "base"

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Produce an answer for the request

        Raises:
            GenerationError: Service unreachable, error status or unusable reply
        """


class EdgeFunctionAnswerGenerator(AnswerGenerator):
    """Calls the hosted customer-service edge function over HTTP"""

    name = "edge"

    def __init__(
        self,
        functions_url: Optional[str] = None,
        api_key: Optional[str] = None,
        function_name: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.functions_url = functions_url or settings.functions_url
        self.api_key = api_key or settings.supabase_key
        self.function_name = function_name or settings.answer_function_name
        self.timeout = timeout or settings.generation_timeout_seconds
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
        }

    @property
    def url(self) -> str:
        return f"{self.functions_url.rstrip('/')}/{self.function_name}"

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        payload = request.model_dump(include={"question", "context", "sources"})

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload, headers=self.headers)
                response.raise_for_status()
                data: Dict[str, Any] = response.json()

        except httpx.HTTPStatusError as e:
            raise GenerationError(
                f"Answer service returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"Answer service unreachable: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Answer service sent invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise GenerationError("Answer service sent an unexpected payload")

        result = GenerationResult(**data)
        if result.tokens_used is not None:
            logger.info(f"Answer service tokens used: {result.tokens_used}")
        return result


class GeminiAnswerGenerator(AnswerGenerator):
    """In-process generation with Google Gemini"""

    name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key or settings.google_api_key
        self.model_name = model_name or settings.gemini_model

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        prompt = request.prompt or build_service_prompt(request)

        try:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(self.model_name, system_instruction=SYSTEM_PROMPT)

            response = await asyncio.to_thread(
                model.generate_content,
                prompt,
                generation_config=genai.GenerationConfig(
                    temperature=0.3,
                    max_output_tokens=600,
                ),
            )
        except Exception as e:
            raise GenerationError(f"Gemini request failed: {e}") from e

        # Blocked or empty candidates carry no text
        if not response.candidates or not response.candidates[0].content.parts:
            candidate = response.candidates[0] if response.candidates else None
            finish_reason = candidate.finish_reason if candidate else "unknown"
            raise GenerationError(f"Gemini returned no text. Finish reason: {finish_reason}")

        text = response.text.strip()
        usage = getattr(response, "usage_metadata", None)
        tokens_used = getattr(usage, "total_token_count", None) if usage else None

        return GenerationResult(success=bool(text), response=text, tokens_used=tokens_used)


class NullAnswerGenerator(AnswerGenerator):
    """Generation disabled; every call reports the service as unavailable"""

    name = "none"

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        raise GenerationError("Answer generation is disabled")


def build_answer_generator(config: Optional[Settings] = None) -> AnswerGenerator:
    """
    Create the generator selected by `answer_backend`

    Args:
        config: Settings to read (defaults to the cached application settings)

    Returns:
        AnswerGenerator instance
    """
    config = config or settings
    backend = config.answer_backend.lower()

    if backend == "edge":
        return EdgeFunctionAnswerGenerator(
            functions_url=config.functions_url,
            api_key=config.supabase_key,
            function_name=config.answer_function_name,
            timeout=config.generation_timeout_seconds,
        )
    if backend == "gemini":
        return GeminiAnswerGenerator(
            api_key=config.google_api_key,
            model_name=config.gemini_model,
        )
    if backend == "none":
        return NullAnswerGenerator()

    raise ValueError(f"Unknown answer backend: {config.answer_backend}")
