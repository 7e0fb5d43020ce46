from __future__ import annotations
import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

from interviewkb.bank.question_bank import STATIC_TOPICS, StaticTopicArea, static_key_concepts
from interviewkb.knowledge.merge import distinct_sorted
from interviewkb.storage.store import read_store, store_path
from interviewkb.utils.config import settings

LOGGER = logging.getLogger(__name__)


def get_scraped_skills(data_dir: Optional[str] = None) -> List[str]:
    records = read_store(store_path(data_dir))
    return distinct_sorted(t for c in records for t in c.inferred_tags)


def get_company_mentions(data_dir: Optional[str] = None) -> Dict[str, int]:
    """company -> number of dynamic questions naming it (case-insensitive, first spelling kept)."""
    counts: Counter = Counter()
    names: Dict[str, str] = {}
    for c in read_store(store_path(data_dir)):
        company = (c.original.company or "").strip()
        if not company:
            continue
        key = company.lower()
        names.setdefault(key, company)
        counts[key] += 1
    return {names[k]: n for k, n in counts.items()}


def detect_emerging_skills(
    data_dir: Optional[str] = None,
    bank: Sequence[StaticTopicArea] = STATIC_TOPICS,
) -> List[str]:
    known = static_key_concepts(bank)
    emerging = [s for s in get_scraped_skills(data_dir) if s.lower() not in known]
    LOGGER.info("detected %d emerging skills not in the static bank", len(emerging))
    return emerging


def top_companies(data_dir: Optional[str] = None, limit: Optional[int] = None) -> List[str]:
    limit = settings.KB_TOP_COMPANIES if limit is None else limit
    mentions = get_company_mentions(data_dir)
    ranked = sorted(mentions.items(), key=lambda kv: (-kv[1], kv[0].lower()))
    out = [name for name, _ in ranked[:limit]]
    LOGGER.info("top companies from scraped questions: %s", ", ".join(out))
    return out
