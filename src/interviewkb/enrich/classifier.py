# src/interviewkb/enrich/classifier.py
from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from interviewkb.ingest.models import RawQuestion, ClassifiedQuestion, Difficulty
from interviewkb.enrich.keywords import (
    TopicKeywordTable, DifficultyKeywords,
    DEFAULT_TOPIC_KEYWORDS, DEFAULT_DIFFICULTY_KEYWORDS,
    UNKNOWN_TOPIC_ID, UNKNOWN_TOPIC_NAME,
)

LOGGER = logging.getLogger(__name__)

# keywords this short need a whole-word hit ("GC" must not match "GCP" or "logic")
SHORT_KEYWORD_MAX_LEN = 3
# hits needed before confidence can reach 100
CONFIDENCE_HIT_CAP = 8


class ClassificationError(ValueError):
    pass


@dataclass(frozen=True)
class ClassificationOutcome:
    raw: RawQuestion
    classified: Optional[ClassifiedQuestion] = None
    error: Optional[Exception] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.classified is not None


def contains_keyword(corpus: str, keyword: str) -> bool:
    if not corpus or not corpus.strip() or not keyword or not keyword.strip():
        return False
    if len(keyword) <= SHORT_KEYWORD_MAX_LEN:
        return re.search(rf"\b{re.escape(keyword)}\b", corpus, flags=re.IGNORECASE) is not None
    return keyword.lower() in corpus.lower()


def confidence_for_hits(hits: int) -> float:
    """0 for no hits, steep for the first few, saturating at CONFIDENCE_HIT_CAP hits."""
    if hits <= 0:
        return 0.0
    return min(hits / min(hits + 2, CONFIDENCE_HIT_CAP) * 100.0, 100.0)


def build_corpus(raw: RawQuestion) -> str:
    return " ".join([
        raw.question,
        raw.topic_area,
        raw.best_answer,
        " ".join(raw.tags),
        raw.seniority_context,
        raw.company,
    ]).strip()


def merge_tags(matched: Iterable[str], existing: Iterable[str]) -> List[str]:
    seen = {}
    for tag in list(matched) + list(existing):
        if tag and tag.strip():
            seen.setdefault(tag.lower(), tag)
    return sorted(seen.values(), key=lambda t: (t.lower(), t))


class QuestionClassifier:
    """Keyword-table classifier for scraped interview questions."""

    def __init__(
        self,
        topics: TopicKeywordTable = DEFAULT_TOPIC_KEYWORDS,
        difficulty: DifficultyKeywords = DEFAULT_DIFFICULTY_KEYWORDS,
    ):
        self.topics = topics
        self.difficulty = difficulty

    def best_topic(self, corpus: str) -> Tuple[str, str, List[str]]:
        best_id, best_name, best_hits = UNKNOWN_TOPIC_ID, UNKNOWN_TOPIC_NAME, []
        for topic_id, entry in self.topics.items():
            hits = [kw for kw in entry.keywords if contains_keyword(corpus, kw)]
            # strict '>' keeps the earlier (lowest) topic id on ties
            if len(hits) > len(best_hits):
                best_id, best_name, best_hits = topic_id, entry.display_name, hits
        return best_id, best_name, best_hits

    def infer_difficulty(self, corpus: str, seniority_context: str = "") -> Difficulty:
        text = corpus if not (seniority_context or "").strip() else f"{seniority_context} {corpus}"
        if any(contains_keyword(text, kw) for kw in self.difficulty.senior):
            return Difficulty.SENIOR
        if any(contains_keyword(text, kw) for kw in self.difficulty.junior):
            return Difficulty.JUNIOR
        return Difficulty.MID

    def classify(self, raw: RawQuestion) -> ClassifiedQuestion:
        corpus = build_corpus(raw)
        topic_id, topic_name, matched = self.best_topic(corpus)
        confidence = confidence_for_hits(len(matched))
        difficulty = self.infer_difficulty(corpus, raw.seniority_context)
        tags = merge_tags(matched, raw.tags)
        LOGGER.debug(
            "classified %s -> topic=%s confidence=%.1f difficulty=%s",
            raw.id, topic_id, confidence, difficulty.label,
        )
        # novelty is decided by the ingestion step, not here
        return ClassifiedQuestion(
            original=raw,
            topic_id=topic_id,
            topic_name=topic_name,
            confidence=confidence,
            inferred_difficulty=difficulty,
            inferred_tags=tags,
            is_novel=False,
        )

    def try_classify(self, raw: RawQuestion) -> ClassificationOutcome:
        try:
            return ClassificationOutcome(raw=raw, classified=self.classify(raw))
        except Exception as e:
            LOGGER.warning("failed to classify question %s: %s: %s", raw.id, type(e).__name__, e)
            err = ClassificationError(f"question {raw.id}: {type(e).__name__}: {e}")
            err.__cause__ = e
            return ClassificationOutcome(raw=raw, error=err)

    def classify_batch(self, raws: Iterable[RawQuestion]) -> List[ClassifiedQuestion]:
        """Classify each item independently; failures are logged and dropped."""
        raws = list(raws)
        LOGGER.info("classifying batch of %d scraped questions", len(raws))
        out = [o.classified for o in map(self.try_classify, raws) if o.ok]
        LOGGER.info("batch classification complete: %d/%d classified", len(out), len(raws))
        return out
