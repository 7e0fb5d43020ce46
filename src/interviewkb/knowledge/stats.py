"""Topic statistics and trending topics over the merged knowledge base.

Growth rate of a topic over a lookback window:
    base   = total_questions - recent_count
    growth = recent_count / base * 100     when base > 0
           = 100                           when base == 0 and recent_count > 0
           = 0                             otherwise
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from interviewkb.ingest.models import as_utc
from interviewkb.bank.question_bank import STATIC_TOPICS, StaticTopicArea, find_topic
from interviewkb.knowledge.merge import (
    STATIC_SOURCE, distinct_sorted, get_knowledge_base, group_by_topic,
)
from interviewkb.storage.store import read_store, store_path
from interviewkb.utils.config import settings

LOGGER = logging.getLogger(__name__)

NEVER = "never"


@dataclass(frozen=True)
class TrendingTopic:
    topic_id: str
    topic_name: str
    recent_count: int
    total_questions: int
    growth_rate: float


@dataclass(frozen=True)
class TopicQuestionCount:
    topic_id: str
    topic_name: str
    count: int


@dataclass(frozen=True)
class KnowledgeBaseStats:
    total_topics: int
    total_questions: int
    static_questions: int
    dynamic_questions: int
    by_topic: List[TopicQuestionCount] = field(default_factory=list)
    last_scraped_date: Optional[datetime] = None
    sources: List[str] = field(default_factory=list)

    @property
    def last_scraped_label(self) -> str:
        return self.last_scraped_date.isoformat() if self.last_scraped_date else NEVER


def growth_rate(recent_count: int, total_questions: int) -> float:
    base = total_questions - recent_count
    if base > 0:
        rate = recent_count / base * 100.0
    elif recent_count > 0:
        rate = 100.0
    else:
        rate = 0.0
    return round(rate, 1)


def get_trending_topics(
    data_dir: Optional[str] = None,
    days: Optional[int] = None,
    *,
    bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
    now: Optional[datetime] = None,
) -> List[TrendingTopic]:
    days = settings.KB_TRENDING_WINDOW_DAYS if days is None else days
    now = as_utc(now) or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)
    records = read_store(store_path(data_dir))

    all_by_topic = group_by_topic(records)
    recent_by_topic = group_by_topic([
        c for c in records
        if c.original.scraped_date is not None and c.original.scraped_date >= cutoff
    ])

    trends: List[TrendingTopic] = []
    for key, recent in recent_by_topic.items():
        static = find_topic(bank, key)
        recent_count = len(recent)
        total = (len(static.questions) if static else 0) + len(all_by_topic.get(key, []))
        trends.append(TrendingTopic(
            topic_id=static.id if static else recent[0].topic_id,
            topic_name=static.name if static else recent[0].topic_name,
            recent_count=recent_count,
            total_questions=total,
            growth_rate=growth_rate(recent_count, total),
        ))

    trends.sort(key=lambda t: (-t.recent_count, -t.growth_rate, t.topic_id))
    LOGGER.debug("%d trending topics in the last %d days (cutoff %s)", len(trends), days, cutoff.isoformat())
    return trends


def get_stats(
    data_dir: Optional[str] = None,
    bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
) -> KnowledgeBaseStats:
    kb = get_knowledge_base(data_dir, bank)
    records = read_store(store_path(data_dir))

    by_topic = [TopicQuestionCount(t.topic_id, t.topic_name, len(t.questions)) for t in kb.topics]
    by_topic.sort(key=lambda t: t.count, reverse=True)

    sources = distinct_sorted(c.original.source for c in records)
    if STATIC_SOURCE not in {s.lower() for s in sources}:
        sources.insert(0, STATIC_SOURCE)

    LOGGER.debug("stats: %d topics, sources [%s]", len(kb.topics), ", ".join(sources))
    return KnowledgeBaseStats(
        total_topics=len(kb.topics),
        total_questions=kb.static_question_count + kb.dynamic_question_count,
        static_questions=kb.static_question_count,
        dynamic_questions=kb.dynamic_question_count,
        by_topic=by_topic,
        last_scraped_date=kb.last_updated,
        sources=sources,
    )

