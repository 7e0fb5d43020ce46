# src/interviewkb/knowledge/merge.py
"""Merge the static topic bank with the dynamic store into one per-topic view.

Static topics come first, in bank order, each followed by the dynamic questions
classified into it. Dynamic topics without a static counterpart are appended
afterwards; their key concepts are the union of their questions' inferred tags.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from interviewkb.ingest.models import ClassifiedQuestion
from interviewkb.bank.question_bank import STATIC_TOPICS, StaticQuestion, StaticTopicArea, find_topic
from interviewkb.storage.store import read_store, store_path

LOGGER = logging.getLogger(__name__)

STATIC_SOURCE = "static"


@dataclass(frozen=True)
class KnowledgeQuestion:
    question: str
    answer: str
    difficulty: str
    tags: Tuple[str, ...] = ()
    source: str = STATIC_SOURCE
    source_url: str = ""
    upvotes: int = 0
    company: str = ""
    scraped_date: Optional[datetime] = None


@dataclass(frozen=True)
class KnowledgeTopic:
    topic_id: str
    topic_name: str
    questions: List[KnowledgeQuestion] = field(default_factory=list)
    key_concepts: List[str] = field(default_factory=list)
    static_count: int = 0
    dynamic_count: int = 0


@dataclass(frozen=True)
class KnowledgeBase:
    topics: List[KnowledgeTopic]
    static_question_count: int
    dynamic_question_count: int
    last_updated: Optional[datetime] = None


def from_static(q: StaticQuestion) -> KnowledgeQuestion:
    return KnowledgeQuestion(
        question=q.question,
        answer=q.expected_answer,
        difficulty=q.difficulty.label,
        tags=tuple(q.tags),
    )


def from_dynamic(c: ClassifiedQuestion) -> KnowledgeQuestion:
    o = c.original
    return KnowledgeQuestion(
        question=o.question,
        answer=o.best_answer,
        difficulty=c.inferred_difficulty.label,
        tags=tuple(c.inferred_tags),
        source=o.source,
        source_url=o.source_url,
        upvotes=o.upvotes,
        company=o.company,
        scraped_date=o.scraped_date,
    )


def group_by_topic(records: Sequence[ClassifiedQuestion]) -> Dict[str, List[ClassifiedQuestion]]:
    """Case-insensitive grouping, keyed by the lowercased topic id, insertion ordered."""
    groups: Dict[str, List[ClassifiedQuestion]] = {}
    for c in records:
        groups.setdefault(c.topic_id.lower(), []).append(c)
    return groups


def distinct_sorted(values) -> List[str]:
    seen: Dict[str, str] = {}
    for v in values:
        if v and v.strip():
            seen.setdefault(v.lower(), v)
    return sorted(seen.values(), key=lambda s: (s.lower(), s))


def merge_topics(
    bank: Sequence[StaticTopicArea],
    records: Sequence[ClassifiedQuestion],
) -> List[KnowledgeTopic]:
    by_topic = group_by_topic(records)
    merged: List[KnowledgeTopic] = []
    covered = set()

    for topic in bank:
        covered.add(topic.id.lower())
        questions = [from_static(q) for q in topic.questions]
        dynamic = by_topic.get(topic.id.lower(), [])
        questions.extend(from_dynamic(c) for c in dynamic)
        merged.append(KnowledgeTopic(
            topic_id=topic.id,
            topic_name=topic.name,
            questions=questions,
            key_concepts=list(topic.key_concepts),
            static_count=len(topic.questions),
            dynamic_count=len(dynamic),
        ))

    for key, dynamic in by_topic.items():
        if key in covered:
            continue
        first = dynamic[0]
        merged.append(KnowledgeTopic(
            topic_id=first.topic_id,
            topic_name=first.topic_name or first.topic_id,
            questions=[from_dynamic(c) for c in dynamic],
            key_concepts=distinct_sorted(t for c in dynamic for t in c.inferred_tags),
            static_count=0,
            dynamic_count=len(dynamic),
        ))
    return merged


def latest_scrape(records: Sequence[ClassifiedQuestion]) -> Optional[datetime]:
    dates = [c.original.scraped_date for c in records if c.original.scraped_date is not None]
    return max(dates) if dates else None


def get_knowledge_base(
    data_dir: Optional[str] = None,
    bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
) -> KnowledgeBase:
    records = read_store(store_path(data_dir))
    topics = merge_topics(bank, records)
    kb = KnowledgeBase(
        topics=topics,
        static_question_count=sum(len(t.questions) for t in bank),
        dynamic_question_count=len(records),
        last_updated=latest_scrape(records),
    )
    LOGGER.info(
        "knowledge base loaded: %d topics, %d static + %d dynamic questions",
        len(topics), kb.static_question_count, kb.dynamic_question_count,
    )
    return kb


def get_questions_for_topic(
    topic_id: str,
    data_dir: Optional[str] = None,
    bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
) -> List[KnowledgeQuestion]:
    out: List[KnowledgeQuestion] = []
    topic = find_topic(bank, topic_id)
    if topic is not None:
        out.extend(from_static(q) for q in topic.questions)
    wanted = (topic_id or "").lower()
    out.extend(from_dynamic(c) for c in read_store(store_path(data_dir)) if c.topic_id.lower() == wanted)
    LOGGER.debug("retrieved %d questions for topic %s", len(out), topic_id)
    return out
