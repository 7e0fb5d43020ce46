from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from interviewkb.ingest.models import RawQuestion, as_utc
from interviewkb.ingest.pipeline import IngestResult, ingest_questions
from interviewkb.enrich.classifier import QuestionClassifier
from interviewkb.bank.question_bank import STATIC_TOPICS, StaticTopicArea
from interviewkb.knowledge.merge import KnowledgeBase, KnowledgeQuestion, get_knowledge_base, get_questions_for_topic
from interviewkb.knowledge.stats import KnowledgeBaseStats, TrendingTopic, get_stats, get_trending_topics
from interviewkb.knowledge import insights
from interviewkb.utils.config import settings

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    ingestion: IngestResult
    trending_topics: List[TrendingTopic]
    stats: KnowledgeBaseStats
    generated_at: datetime


@dataclass(frozen=True)
class DynamicInsights:
    stats: KnowledgeBaseStats
    trending_topics: List[TrendingTopic]
    emerging_skills: List[str] = field(default_factory=list)
    top_companies: List[str] = field(default_factory=list)


class KnowledgeBaseManager:
    """Static bank + dynamic store for one data directory, with fixed thresholds."""

    def __init__(
        self,
        data_dir: Optional[str] = None,
        *,
        classifier: Optional[QuestionClassifier] = None,
        bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
        min_confidence: Optional[float] = None,
        duplicate_threshold: Optional[float] = None,
        trending_window_days: Optional[int] = None,
        strict_load: Optional[bool] = None,
    ):
        self.data_dir = data_dir or settings.KB_DATA_DIR
        self.classifier = classifier or QuestionClassifier()
        self.bank = bank
        self.min_confidence = settings.KB_MIN_CONFIDENCE if min_confidence is None else min_confidence
        self.duplicate_threshold = (
            settings.KB_DUPLICATE_THRESHOLD if duplicate_threshold is None else duplicate_threshold
        )
        self.trending_window_days = (
            settings.KB_TRENDING_WINDOW_DAYS if trending_window_days is None else trending_window_days
        )
        self.strict_load = strict_load

    # --- write side ---
    def ingest(self, raws: Iterable[RawQuestion], now: Optional[datetime] = None) -> IngestResult:
        return ingest_questions(
            raws, self.data_dir,
            classifier=self.classifier,
            bank=self.bank,
            min_confidence=self.min_confidence,
            duplicate_threshold=self.duplicate_threshold,
            strict_load=self.strict_load,
            now=now,
        )

    # --- read side ---
    def knowledge_base(self) -> KnowledgeBase:
        return get_knowledge_base(self.data_dir, self.bank)

    def questions_for_topic(self, topic_id: str) -> List[KnowledgeQuestion]:
        return get_questions_for_topic(topic_id, self.data_dir, self.bank)

    def trending_topics(self, days: Optional[int] = None, now: Optional[datetime] = None) -> List[TrendingTopic]:
        days = self.trending_window_days if days is None else days
        return get_trending_topics(self.data_dir, days, bank=self.bank, now=now)

    def stats(self) -> KnowledgeBaseStats:
        return get_stats(self.data_dir, self.bank)

    def scraped_skills(self) -> List[str]:
        return insights.get_scraped_skills(self.data_dir)

    def company_mentions(self) -> Dict[str, int]:
        return insights.get_company_mentions(self.data_dir)

    def emerging_skills(self) -> List[str]:
        return insights.detect_emerging_skills(self.data_dir, self.bank)

    def top_companies(self, limit: Optional[int] = None) -> List[str]:
        return insights.top_companies(self.data_dir, limit)

    # --- end to end ---
    def run_pipeline(self, raws: Optional[Iterable[RawQuestion]] = None, now: Optional[datetime] = None) -> PipelineResult:
        """Ingest (if anything was scraped), then report trending topics and stats."""
        raws = list(raws or [])
        now = as_utc(now) or datetime.now(timezone.utc)
        LOGGER.info("starting dynamic content pipeline for %s", self.data_dir)
        if raws:
            ingestion = self.ingest(raws, now=now)
        else:
            LOGGER.info("no scraped questions provided, skipping ingestion")
            ingestion = IngestResult()
        result = PipelineResult(
            ingestion=ingestion,
            trending_topics=self.trending_topics(now=now),
            stats=self.stats(),
            generated_at=now,
        )
        LOGGER.info(
            "pipeline complete. ingested: %d, trending: %d",
            ingestion.new_questions_added, len(result.trending_topics),
        )
        return result

    def analyze_existing(self, now: Optional[datetime] = None) -> DynamicInsights:
        LOGGER.info("analyzing existing data in %s", self.data_dir)
        return DynamicInsights(
            stats=self.stats(),
            trending_topics=self.trending_topics(now=now),
            emerging_skills=self.emerging_skills(),
            top_companies=self.top_companies(),
        )


def run_pipeline(raws: Iterable[RawQuestion], data_dir: Optional[str] = None) -> PipelineResult:
    return KnowledgeBaseManager(data_dir).run_pipeline(raws)


def analyze_existing(data_dir: Optional[str] = None) -> DynamicInsights:
    return KnowledgeBaseManager(data_dir).analyze_existing()
