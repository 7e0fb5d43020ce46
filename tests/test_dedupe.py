import unittest

from interviewkb.ingest.models import RawQuestion, ClassifiedQuestion
from interviewkb.ingest.dedupe import tokenize, jaccard, DuplicateDetector
from interviewkb.bank.question_bank import StaticQuestion


def _raw(text, qid="q1"):
    return RawQuestion(id=qid, question=text)


class TestTokenize(unittest.TestCase):
    def test_lowercases_splits_and_drops_single_chars(self):
        self.assertEqual(tokenize("Explain async/await in C#!"), {"explain", "async", "await", "in"})

    def test_repeats_collapse(self):
        self.assertEqual(tokenize("lock lock LOCK"), {"lock"})

    def test_empty(self):
        self.assertEqual(tokenize("   "), set())


class TestJaccard(unittest.TestCase):
    def test_symmetric(self):
        pairs = [
            ({"a1", "b2"}, {"b2", "c3"}),
            ({"x"}, set()),
            (set(), set()),
            ({"async", "await", "in"}, {"async", "await", "in", "csharp"}),
        ]
        for a, b in pairs:
            self.assertEqual(jaccard(a, b), jaccard(b, a))

    def test_empty_union_is_zero(self):
        self.assertEqual(jaccard(set(), set()), 0.0)

    def test_identical_is_one(self):
        s = tokenize("What is the N+1 problem?")
        self.assertEqual(jaccard(s, s), 1.0)


class TestDuplicateDetector(unittest.TestCase):
    def setUp(self):
        self.det = DuplicateDetector(0.6)

    def test_question_is_duplicate_of_itself(self):
        q = "How does a hash table resolve collisions?"
        self.assertTrue(self.det.is_duplicate(_raw(q), [StaticQuestion(q, "")]))

    def test_rewording_and_punctuation_tolerated(self):
        existing = [StaticQuestion("What is the difference between a clustered and a non-clustered index?", "")]
        self.assertTrue(self.det.is_duplicate(
            _raw("what's the difference between clustered and non clustered index"), existing))

    def test_distinct_question_not_duplicate(self):
        existing = [StaticQuestion("How does a hash table resolve collisions?", "")]
        self.assertFalse(self.det.is_duplicate(_raw("Explain async and await in C#"), existing))

    def test_empty_question_never_duplicate(self):
        self.assertFalse(self.det.is_duplicate(_raw("?!"), [StaticQuestion("?!", "")]))

    def test_against_dynamic_records(self):
        stored = ClassifiedQuestion(
            original=_raw("Explain async and await in C#", "old"),
            topic_id="concurrency", topic_name="Concurrency", confidence=50.0,
        )
        self.assertTrue(self.det.is_duplicate_of_classified(_raw("explain ASYNC and await in c#!!"), [stored]))
        self.assertFalse(self.det.is_duplicate_of_classified(_raw("What is a semaphore?"), [stored]))

    def test_threshold_is_configurable(self):
        existing = [StaticQuestion("What is Docker?", "")]
        raw = _raw("What is Kubernetes?")  # 2 shared of 4 -> 0.5
        self.assertFalse(DuplicateDetector(0.6).is_duplicate(raw, existing))
        self.assertTrue(DuplicateDetector(0.5).is_duplicate(raw, existing))


class TestShortQuestions(unittest.TestCase):
    """Few tokens means a single shared word moves the score a lot."""

    def setUp(self):
        self.det = DuplicateDetector(0.6)

    def test_two_word_stems_stay_below_threshold(self):
        self.assertFalse(self.det.is_duplicate(_raw("What is GC?"), [StaticQuestion("What is JIT?", "")]))

    def test_shared_filler_words_can_collide(self):
        # {what, is, the, docker} vs {what, is, the, kubernetes}: 3/5 == 0.6
        raw = _raw("What is the Docker?")
        self.assertTrue(self.det.is_duplicate(raw, [StaticQuestion("What is the Kubernetes?", "")]))

    def test_single_char_tokens_are_ignored(self):
        # "a" and "C" drop out, leaving identical sets
        self.assertTrue(self.det.is_duplicate(_raw("Is C a language?"), [StaticQuestion("Is a language?", "")]))


if __name__ == "__main__":
    unittest.main()
