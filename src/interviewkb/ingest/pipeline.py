import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from interviewkb.ingest.models import RawQuestion, ClassifiedQuestion, as_utc
from interviewkb.ingest.dedupe import DuplicateDetector
from interviewkb.enrich.classifier import QuestionClassifier
from interviewkb.bank.question_bank import STATIC_TOPICS, StaticTopicArea, all_static_questions
from interviewkb.storage.store import store_lock, load_store, persist_store, StoreReadError
from interviewkb.utils.config import settings

LOGGER = logging.getLogger(__name__)

# classify -> confidence gate -> dedupe (static, then dynamic) -> append -> persist once


@dataclass(frozen=True)
class IngestResult:
    total_processed: int = 0
    new_questions_added: int = 0
    duplicates_skipped: int = 0
    unclassified_skipped: int = 0
    topics_enriched: List[str] = field(default_factory=list)


def _accept(classified: ClassifiedQuestion, now: datetime) -> ClassifiedQuestion:
    original = classified.original
    if original.scraped_date is None:
        original = original.model_copy(update={"scraped_date": now})
    return classified.model_copy(update={"original": original, "is_novel": True})


def ingest_questions(
    raws: Iterable[RawQuestion],
    data_dir: Optional[str] = None,
    *,
    classifier: Optional[QuestionClassifier] = None,
    bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
    min_confidence: Optional[float] = None,
    duplicate_threshold: Optional[float] = None,
    strict_load: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> IngestResult:
    """
    Classify, filter and deduplicate a batch of scraped questions, append the novel
    ones to the data directory's dynamic store and persist it.

    The store is written before the result is built: if the write fails a
    StoreWriteError propagates and no counts are returned.
    """
    raws = list(raws)
    classifier = classifier or QuestionClassifier()
    detector = DuplicateDetector(duplicate_threshold)
    min_confidence = settings.KB_MIN_CONFIDENCE if min_confidence is None else float(min_confidence)
    strict_load = settings.KB_STRICT_LOAD if strict_load is None else strict_load
    now = as_utc(now) or datetime.now(timezone.utc)
    static_questions = all_static_questions(bank)

    LOGGER.info("ingesting %d scraped questions", len(raws))
    added, dupes, unclassified = 0, 0, 0
    enriched = {}

    with store_lock(data_dir) as path:
        loaded = load_store(path)
        if not loaded.ok:
            if strict_load:
                raise StoreReadError(f"dynamic store {path} is unreadable: {loaded.error}") from loaded.error
            LOGGER.warning("dynamic store %s is unreadable (%s); it will be overwritten", path, loaded.error)
        store: List[ClassifiedQuestion] = list(loaded.records)

        for raw in raws:
            outcome = classifier.try_classify(raw)
            if not outcome.ok:
                unclassified += 1
                continue
            classified = outcome.classified
            if classified.confidence < min_confidence:
                LOGGER.debug("%s: low confidence (%.1f), skipping", raw.id, classified.confidence)
                unclassified += 1
                continue
            if detector.is_duplicate(raw, static_questions):
                dupes += 1
                continue
            if detector.is_duplicate_of_classified(raw, store):
                dupes += 1
                continue

            store.append(_accept(classified, now))
            enriched.setdefault(classified.topic_id.lower(), classified.topic_id)
            added += 1
            LOGGER.debug("added novel question %s to topic %s", raw.id, classified.topic_id)

        persist_store(path, store)

    result = IngestResult(
        total_processed=len(raws),
        new_questions_added=added,
        duplicates_skipped=dupes,
        unclassified_skipped=unclassified,
        topics_enriched=sorted(enriched.values()),
    )
    LOGGER.info(
        "ingestion complete: %d processed, %d added, %d duplicates, %d unclassified. topics enriched: [%s]",
        result.total_processed, result.new_questions_added, result.duplicates_skipped,
        result.unclassified_skipped, ", ".join(result.topics_enriched),
    )
    return result
