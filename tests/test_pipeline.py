import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from interviewkb.ingest.models import RawQuestion
from interviewkb.ingest.pipeline import ingest_questions
from interviewkb.enrich.classifier import QuestionClassifier
from interviewkb.storage.store import (
    StoreReadError, StoreWriteError, load_store, store_path,
)

NOW = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def _raw(qid, text, **kw):
    return RawQuestion(id=qid, question=text, source=kw.pop("source", "reddit-dotnet"), **kw)


def sample_batch():
    """10 items: 5 novel, 3 duplicates, 2 without any keyword hit."""
    return [
        _raw("n1", "Explain async and await in C#"),
        _raw("low1", "What is your favourite programming language and why?"),
        _raw("n2", "How would you design a distributed rate limiter using Redis?"),
        _raw("dup-static", "What is the difference between a clustered and a non-clustered index?"),
        _raw("n3", "What is the difference between a JWT and a session cookie for authentication?"),
        _raw("dup-n1", "explain ASYNC and await in C#!!"),
        _raw("n4", "When would you choose Kafka over RabbitMQ for a message queue?"),
        _raw("low2", "Describe the happiest day at your previous job."),
        _raw("n5", "How do you support a junior developer through their first code review?"),
        _raw("dup-n4", "When would you choose Kafka over RabbitMQ for a message queue"),
    ]


class _Exploding(QuestionClassifier):
    def classify(self, raw):
        if raw.id.startswith("bad"):
            raise ValueError("cannot classify")
        return super().classify(raw)


class TestIngest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_batch_counts(self):
        res = ingest_questions(sample_batch(), self.dir, now=NOW)
        self.assertEqual(res.total_processed, 10)
        self.assertEqual(res.unclassified_skipped, 2)
        self.assertEqual(res.duplicates_skipped, 3)
        self.assertEqual(res.new_questions_added, 5)
        self.assertEqual(
            res.new_questions_added + res.duplicates_skipped + res.unclassified_skipped,
            res.total_processed,
        )
        self.assertEqual(res.topics_enriched, sorted(res.topics_enriched))
        self.assertIn("concurrency", res.topics_enriched)
        self.assertIn("system-design", res.topics_enriched)

    def test_accepted_records_are_persisted_novel_and_stamped(self):
        ingest_questions(sample_batch(), self.dir, now=NOW)
        records = load_store(store_path(self.dir)).records
        self.assertEqual([r.original.id for r in records], ["n1", "n2", "n3", "n4", "n5"])
        self.assertTrue(all(r.is_novel for r in records))
        self.assertTrue(all(r.original.scraped_date == NOW for r in records))
        self.assertTrue(all(r.confidence >= 30 for r in records))

    def test_existing_scrape_date_is_kept(self):
        when = datetime(2026, 9, 1, tzinfo=timezone.utc)
        ingest_questions([_raw("a", "Explain async and await", scraped_date=when)], self.dir, now=NOW)
        self.assertEqual(load_store(store_path(self.dir)).records[0].original.scraped_date, when)

    def test_second_ingest_adds_nothing(self):
        ingest_questions(sample_batch(), self.dir, now=NOW)
        again = ingest_questions(sample_batch(), self.dir, now=NOW)
        self.assertEqual(again.new_questions_added, 0)
        self.assertEqual(again.duplicates_skipped, 8)
        self.assertEqual(again.topics_enriched, [])
        self.assertEqual(len(load_store(store_path(self.dir)).records), 5)

    def test_classification_failure_counts_as_unclassified(self):
        batch = [_raw("bad-1", "Explain async and await"), _raw("ok", "Explain async and await")]
        res = ingest_questions(batch, self.dir, classifier=_Exploding(), now=NOW)
        self.assertEqual(res.unclassified_skipped, 1)
        self.assertEqual(res.new_questions_added, 1)

    def test_confidence_threshold_is_a_parameter(self):
        batch = [_raw("one-hit", "What is a semaphore?")]  # 1 hit -> 33.3
        strict = ingest_questions(batch, self.dir, min_confidence=40, now=NOW)
        self.assertEqual(strict.unclassified_skipped, 1)
        relaxed = ingest_questions(batch, self.dir, min_confidence=30, now=NOW)
        self.assertEqual(relaxed.new_questions_added, 1)

    def test_empty_batch_still_writes_store(self):
        res = ingest_questions([], self.dir, now=NOW)
        self.assertEqual(res.total_processed, 0)
        self.assertTrue(store_path(self.dir).exists())

    def test_write_failure_raises_and_saves_nothing(self):
        with mock.patch("interviewkb.storage.store.os.replace", side_effect=OSError("read-only fs")):
            with self.assertRaises(StoreWriteError):
                ingest_questions(sample_batch(), self.dir, now=NOW)
        self.assertEqual(load_store(store_path(self.dir)).records, [])

    def test_unreadable_store_blocks_ingest_by_default(self):
        path = store_path(self.dir)
        Path(self.dir).mkdir(parents=True, exist_ok=True)
        path.write_text("[{broken", encoding="utf-8")
        with self.assertRaises(StoreReadError):
            ingest_questions(sample_batch(), self.dir, strict_load=True, now=NOW)
        self.assertEqual(path.read_text(encoding="utf-8"), "[{broken")

    def test_unreadable_store_overwritten_when_not_strict(self):
        path = store_path(self.dir)
        path.write_text("[{broken", encoding="utf-8")
        res = ingest_questions(sample_batch(), self.dir, strict_load=False, now=NOW)
        self.assertEqual(res.new_questions_added, 5)
        self.assertEqual(len(load_store(path).records), 5)

    def test_previously_persisted_records_are_kept(self):
        ingest_questions(sample_batch()[:3], self.dir, now=NOW)
        before = load_store(store_path(self.dir)).records
        ingest_questions([_raw("late", "What is a semaphore?")], self.dir, now=NOW)
        after = load_store(store_path(self.dir)).records
        self.assertEqual(after[:len(before)], before)
        self.assertEqual(after[-1].original.id, "late")

    def test_stricter_threshold_later_never_removes_records(self):
        ingest_questions([_raw("a", "Explain async and await in C#")], self.dir, now=NOW)
        res = ingest_questions(
            [_raw("b", "Explain async and await in Python")], self.dir, duplicate_threshold=0.1, now=NOW,
        )
        self.assertEqual(res.duplicates_skipped, 1)
        records = load_store(store_path(self.dir)).records
        self.assertEqual([r.original.id for r in records], ["a"])

    def test_naive_now_is_stored_as_utc(self):
        ingest_questions([_raw("a", "Explain async and await in C#")], self.dir, now=NOW.replace(tzinfo=None))
        stamped = load_store(store_path(self.dir)).records[0].original.scraped_date
        self.assertEqual(stamped, NOW)
        self.assertIsNotNone(stamped.tzinfo)

    def test_concurrent_writers_lose_nothing(self):
        # one "semaphore" hit each, otherwise no shared tokens between items
        def batch(writer):
            return [
                _raw(f"w{writer}-{i}", " ".join(["semaphore"] + [f"zq{writer}x{i}y{k}" for k in range(5)]))
                for i in range(16)
            ]

        with ThreadPoolExecutor(max_workers=6) as pool:
            futures = [pool.submit(ingest_questions, batch(w), self.dir, now=NOW) for w in range(6)]
            results = [f.result() for f in futures]

        self.assertEqual(sum(r.new_questions_added for r in results), 96)
        records = load_store(store_path(self.dir)).records
        self.assertEqual(len(records), 96)
        self.assertEqual(len({r.original.id for r in records}), 96)


if __name__ == "__main__":
    unittest.main()
