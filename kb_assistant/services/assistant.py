"""
Knowledge Assistant - answers customer questions from the knowledge base

Flow per question (no state kept between calls):
    extract keywords -> search cascade -> rank -> generate -> log -> respond

Failure zones are contained independently:
- a failed search stage counts as "no rows" and the cascade continues
- a failed/slow answer service falls back to the structured template answer
- the interaction log write runs in the background and can never affect the answer
- anything else is caught once at the top and turned into an apologetic reply
"""
import asyncio
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from kb_assistant.config import Settings, get_settings
from kb_assistant.models.schemas import (
    AIResponse,
    CustomerQuery,
    GenerationRequest,
    GenerationResult,
    GenerationSource,
    InteractionLog,
    InteractionStats,
    KnowledgeEntry,
    KnowledgeQuery,
    KnowledgeSource,
)
from kb_assistant.repositories.interaction_repository import (
    InteractionLogRepository,
    SupabaseInteractionLogRepository,
)
from kb_assistant.repositories.knowledge_repository import (
    KnowledgeRepository,
    SupabaseKnowledgeRepository,
)
from kb_assistant.services import answer_templates as templates
from kb_assistant.services.answer_generator import AnswerGenerator, build_answer_generator
from kb_assistant.services.keywords import (
    build_context,
    build_prompt,
    calculate_relevance,
    create_excerpt,
    extract_keywords,
)
from kb_assistant.utils.background import BestEffortRunner
from kb_assistant.utils.logger import get_logger
from kb_assistant.utils.validators import ensure_present, sanitize_input

logger = get_logger(__name__)

# Search cascade limits
PHRASE_LIMIT = 3
KEYWORD_LIMIT = 5
UNAPPROVED_LIMIT = 8
FALLBACK_LIMIT = 3
MAX_SOURCES = 5

# Ranking weights
RELEVANCE_WEIGHT = 0.6
CONFIDENCE_WEIGHT = 0.4
DEFAULT_CONFIDENCE = 0.5
DEFAULT_CATEGORY = "General"

HUMAN_REVIEW_THRESHOLD = 0.6


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class KnowledgeAssistant:
    """
    Retrieval and answer engine

    Collaborators are injected so any knowledge store, log store or answer
    service satisfying the repository/generator interfaces can be used.
    The instance holds no per-request state and is safe to share.
    """

    def __init__(
        self,
        knowledge_repo: KnowledgeRepository,
        interaction_repo: InteractionLogRepository,
        generator: AnswerGenerator,
        config: Optional[Settings] = None,
        runner: Optional[BestEffortRunner] = None
    ):
        self.knowledge_repo = knowledge_repo
        self.interaction_repo = interaction_repo
        self.generator = generator
        self.config = config or get_settings()
        self.runner = runner or BestEffortRunner()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def answer_customer_question(
        self,
        query: Union[CustomerQuery, Dict[str, Any]]
    ) -> AIResponse:
        """
        Answer a customer question from the knowledge base

        Never raises: every failure degrades to a templated response that
        asks for human review.

        Args:
            query: CustomerQuery or an equivalent dict

        Returns:
            AIResponse with answer, ranked sources, confidence and suggestions
        """
        start = time.perf_counter()

        try:
            if not isinstance(query, CustomerQuery):
                query = CustomerQuery.model_validate(query)

            question = sanitize_input(query.question)
            ensure_present(question, "question")

            logger.info(f"Processing customer question: {question}")

            sources = await self.retrieve_sources(question)
            if not sources:
                return self._no_results_response(start)

            response = await self._build_response(question, sources, start)
            response.interaction_id = self._log_interaction(query, question, sources, response, start)
            return response

        except Exception as e:
            logger.error(f"Error processing customer question: {e}", exc_info=True)
            return self._error_response(start)

    async def get_interaction_stats(self, days: int = 30) -> Optional[InteractionStats]:
        """
        Aggregate interaction logs from the trailing `days` window

        Returns:
            InteractionStats, or None if the log store is unavailable
        """
        try:
            since = datetime.now(timezone.utc) - timedelta(days=days)
            logs = await self.interaction_repo.list_since(since)
        except Exception as e:
            logger.error(f"Error getting interaction stats: {e}")
            return None

        total = len(logs)
        if total == 0:
            return InteractionStats(
                total_interactions=0,
                average_confidence=0.0,
                average_response_time=0.0,
                average_satisfaction=0.0,
                days=days,
            )

        rated = [log.customer_satisfaction for log in logs if log.customer_satisfaction is not None]

        return InteractionStats(
            total_interactions=total,
            average_confidence=sum(log.confidence_score for log in logs) / total,
            average_response_time=sum(log.response_time_ms for log in logs) / total,
            average_satisfaction=sum(rated) / len(rated) if rated else 0.0,
            days=days,
        )

    async def record_customer_feedback(
        self,
        interaction_id: str,
        satisfaction: float,
        feedback: Optional[str] = None
    ) -> bool:
        """
        Attach a satisfaction score and optional comment to an interaction

        The satisfaction range is left to the store schema.

        Returns:
            True if the log record was updated, False on any store error
        """
        try:
            await self.interaction_repo.update_feedback(interaction_id, satisfaction, feedback)
            return True
        except Exception as e:
            logger.warning(f"Error recording feedback for {interaction_id}: {e}")
            return False

    async def drain(self) -> None:
        """Wait for pending background log writes."""
        await self.runner.wait_idle()

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    async def retrieve_sources(self, question: str) -> List[KnowledgeSource]:
        """
        Run the search cascade and return the top ranked sources

        Stages, each ordered by stored confidence:
        1. phrase of all keywords, approved only (2+ keywords)
        2. any keyword in title/content/tags, approved only (appended, no duplicates)
        3. any keyword, including unapproved (only if nothing so far)
        4. top entries with no filter (only if still nothing)
        """
        keywords = extract_keywords(question)
        logger.info(f"Search terms: {keywords}")

        if not keywords:
            logger.info("No valid search terms found")
            return []

        entries: List[KnowledgeEntry] = []

        if len(keywords) > 1:
            entries.extend(await self._run_stage(
                "phrase",
                KnowledgeQuery(terms=[" ".join(keywords)], approved_only=True, limit=PHRASE_LIMIT),
            ))

        seen = {entry.id for entry in entries}
        for entry in await self._run_stage(
            "keyword",
            KnowledgeQuery(terms=keywords, match_tags=True, approved_only=True, limit=KEYWORD_LIMIT),
        ):
            if entry.id not in seen:
                seen.add(entry.id)
                entries.append(entry)

        if not entries:
            entries = await self._run_stage(
                "unapproved",
                KnowledgeQuery(terms=keywords, match_tags=True, limit=UNAPPROVED_LIMIT),
            )

        if not entries:
            logger.info("No keyword matches found, trying fallback search")
            entries = await self._run_stage("fallback", KnowledgeQuery(limit=FALLBACK_LIMIT))

        logger.info(f"Total search results: {len(entries)}")
        return self.rank_sources(question, entries)

    async def _run_stage(self, stage: str, query: KnowledgeQuery) -> List[KnowledgeEntry]:
        try:
            rows = await self.knowledge_repo.search(query)
        except Exception as e:
            logger.warning(f"{stage} search failed: {e}")
            return []

        logger.info(f"Found {len(rows)} results from {stage} search")
        return rows

    @staticmethod
    def to_source(question: str, entry: KnowledgeEntry) -> KnowledgeSource:
        """Project a store entry into a per-query scored source."""
        return KnowledgeSource(
            id=entry.id,
            title=entry.title,
            excerpt=create_excerpt(entry.content),
            category=entry.category or DEFAULT_CATEGORY,
            confidence=entry.confidence_score or DEFAULT_CONFIDENCE,
            relevance_score=calculate_relevance(question, entry),
        )

    @classmethod
    def rank_sources(cls, question: str, entries: Sequence[KnowledgeEntry]) -> List[KnowledgeSource]:
        """Sort by 0.6 * relevance + 0.4 * stored confidence and keep the top 5."""
        sources = [cls.to_source(question, entry) for entry in entries]
        sources.sort(
            key=lambda s: s.relevance_score * RELEVANCE_WEIGHT + s.confidence * CONFIDENCE_WEIGHT,
            reverse=True,
        )
        return sources[:MAX_SOURCES]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    async def _build_response(
        self,
        question: str,
        sources: List[KnowledgeSource],
        start: float
    ) -> AIResponse:
        logger.info(f"Generating answer from {len(sources)} knowledge sources")

        answer = await self.generate_answer(question, sources)
        confidence = self.calculate_overall_confidence(sources)

        return AIResponse(
            answer=answer,
            sources=sources,
            confidence=confidence,
            response_time=_elapsed_ms(start),
            needs_human_review=confidence < HUMAN_REVIEW_THRESHOLD or not sources,
            suggestions=templates.suggestions_for(sources),
            follow_up_questions=templates.follow_up_questions_for(sources),
        )

    async def generate_answer(self, question: str, sources: List[KnowledgeSource]) -> str:
        """
        Ask the answer service, falling back to the structured template

        Timeouts, service errors and empty replies all take the fallback path.
        """
        if not sources:
            return templates.NO_INFORMATION_ANSWER

        request = GenerationRequest(
            question=question,
            context=build_context(sources),
            sources=[
                GenerationSource(title=s.title, content=s.excerpt, category=s.category)
                for s in sources
            ],
            prompt=build_prompt(question, sources),
        )

        try:
            result = await asyncio.wait_for(
                self.generator.generate(request),
                timeout=self.config.generation_timeout_seconds,
            )
            answer = self._answer_text(result)
            if answer:
                logger.info("AI response generated successfully")
                return answer
            logger.warning("Answer service returned no text, using structured answer")

        except asyncio.TimeoutError:
            logger.warning(
                f"Answer service timed out after {self.config.generation_timeout_seconds}s, "
                "using structured answer"
            )
        except Exception as e:
            logger.warning(f"Answer service call failed, using structured answer: {e}")

        return templates.structured_answer(sources)

    @staticmethod
    def _answer_text(result: GenerationResult) -> Optional[str]:
        if result.success and result.response and result.response.strip():
            return result.response
        if result.fallback_response and result.fallback_response.strip():
            logger.info("Using fallback response from answer service")
            return result.fallback_response
        return None

    @staticmethod
    def calculate_overall_confidence(sources: Sequence[KnowledgeSource]) -> float:
        """Mean of average stored confidence and average relevance, within [0, 1]."""
        if not sources:
            return 0.0

        avg_confidence = sum(s.confidence for s in sources) / len(sources)
        avg_relevance = sum(s.relevance_score for s in sources) / len(sources)

        return min(1.0, max(0.0, (avg_confidence + avg_relevance) / 2))

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    def _log_interaction(
        self,
        query: CustomerQuery,
        question: str,
        sources: Sequence[KnowledgeSource],
        response: AIResponse,
        start: float
    ) -> Optional[str]:
        """Queue the interaction record and return its id (None if it could not be built)."""
        try:
            log = InteractionLog(
                customer_question=question,
                matched_entries=[s.id for s in sources],
                ai_response=response.answer,
                confidence_score=response.confidence,
                session_id=query.session_id,
                response_time_ms=_elapsed_ms(start),
                sources_count=len(sources),
            )
            logger.info(
                f"AI interaction {log.id}: session={log.session_id} "
                f"sources={log.sources_count} confidence={log.confidence_score:.2f} "
                f"time={log.response_time_ms}ms"
            )
            self.runner.submit(self.interaction_repo.insert(log), f"interaction log {log.id}")
            return log.id

        except Exception as e:
            logger.warning(f"Error logging interaction: {e}")
            return None

    # ------------------------------------------------------------------
    # Terminal responses
    # ------------------------------------------------------------------
    @staticmethod
    def _no_results_response(start: float) -> AIResponse:
        return AIResponse(
            answer=templates.NO_RESULTS_ANSWER,
            sources=[],
            confidence=templates.NO_RESULTS_CONFIDENCE,
            response_time=_elapsed_ms(start),
            needs_human_review=True,
            suggestions=list(templates.NO_RESULTS_SUGGESTIONS),
            follow_up_questions=list(templates.NO_RESULTS_FOLLOW_UPS),
        )

    @staticmethod
    def _error_response(start: float) -> AIResponse:
        return AIResponse(
            answer=templates.ERROR_ANSWER,
            sources=[],
            confidence=0.0,
            response_time=_elapsed_ms(start),
            needs_human_review=True,
            suggestions=list(templates.ERROR_SUGGESTIONS),
            follow_up_questions=list(templates.ERROR_FOLLOW_UPS),
        )


def build_assistant(config: Optional[Settings] = None, supabase_client=None) -> KnowledgeAssistant:
    """
    Wire the assistant to Supabase and the configured answer backend

    Args:
        config: Settings (defaults to cached application settings)
        supabase_client: Shared client; created from settings when omitted

    Returns:
        KnowledgeAssistant instance
    """
    config = config or get_settings()

    if supabase_client is None:
        from supabase import create_client
        supabase_client = create_client(config.supabase_url, config.supabase_api_key)

    return KnowledgeAssistant(
        knowledge_repo=SupabaseKnowledgeRepository(supabase_client, config.knowledge_table),
        interaction_repo=SupabaseInteractionLogRepository(supabase_client, config.interactions_table),
        generator=build_answer_generator(config),
        config=config,
    )
