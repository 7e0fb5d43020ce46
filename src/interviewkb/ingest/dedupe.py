# src/interviewkb/ingest/dedupe.py
# Near-duplicate detection on word-token sets.
from __future__ import annotations
import logging
import re
from typing import Iterable, Set

from interviewkb.ingest.models import RawQuestion, ClassifiedQuestion
from interviewkb.bank.question_bank import StaticQuestion
from interviewkb.utils.config import settings

LOGGER = logging.getLogger(__name__)

_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> Set[str]:
    if not text or not text.strip():
        return set()
    return {t for t in _SPLIT_RE.split(text.lower()) if len(t) > 1}


def jaccard(a: Set[str], b: Set[str]) -> float:
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


class DuplicateDetector:
    def __init__(self, threshold: float | None = None):
        self.threshold = settings.KB_DUPLICATE_THRESHOLD if threshold is None else float(threshold)

    def is_duplicate_text(self, raw: RawQuestion, existing: Iterable[str], kind: str = "existing") -> bool:
        """True on the first existing text at or above the threshold."""
        words = tokenize(raw.question)
        if not words:
            return False
        for text in existing:
            other = tokenize(text)
            if not other:
                continue
            sim = jaccard(words, other)
            if sim >= self.threshold:
                LOGGER.debug("duplicate: %s matches %s question (jaccard=%.3f)", raw.id, kind, sim)
                return True
        return False

    def is_duplicate(self, raw: RawQuestion, existing: Iterable[StaticQuestion]) -> bool:
        return self.is_duplicate_text(raw, (q.question for q in existing), kind="static")

    def is_duplicate_of_classified(self, raw: RawQuestion, existing: Iterable[ClassifiedQuestion]) -> bool:
        return self.is_duplicate_text(raw, (c.original.question for c in existing), kind="dynamic")
