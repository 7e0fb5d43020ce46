# src/interviewkb/bank/question_bank.py
# Hand-authored topic bank: the static half of the knowledge base.
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from interviewkb.ingest.models import Difficulty


@dataclass(frozen=True)
class StaticQuestion:
    question: str
    expected_answer: str
    difficulty: Difficulty = Difficulty.MID
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StaticTopicArea:
    id: str
    name: str
    questions: Tuple[StaticQuestion, ...] = ()
    key_concepts: Tuple[str, ...] = field(default_factory=tuple)


def _q(question: str, answer: str, difficulty: Difficulty, *tags: str) -> StaticQuestion:
    return StaticQuestion(question=question, expected_answer=answer, difficulty=difficulty, tags=tuple(tags))


STATIC_TOPICS: Tuple[StaticTopicArea, ...] = (
    StaticTopicArea(
        id="algorithms",
        name="Algorithms & Data Structures",
        questions=(
            _q("What is the time complexity of binary search and why does it require sorted input?",
               "O(log n); each step halves the search space, which only works when order is known.",
               Difficulty.JUNIOR, "binary search", "big-o"),
            _q("How does a hash table resolve collisions, and what happens to lookup cost under heavy load?",
               "Chaining or open addressing; as the load factor grows lookups degrade towards O(n) until a resize.",
               Difficulty.MID, "hash", "data structure"),
        ),
        key_concepts=("Big-O", "Hashing", "Trees", "Graphs", "Dynamic Programming"),
    ),
    StaticTopicArea(
        id="system-design",
        name="System Design",
        questions=(
            _q("Design a URL shortener that handles billions of redirects per day.",
               "Key generation, read-heavy caching, partitioned storage, analytics off the hot path.",
               Difficulty.SENIOR, "system design", "scalability"),
            _q("When is CQRS worth its complexity compared to a single read/write model?",
               "When read and write workloads diverge strongly in shape or scale, or with event sourcing.",
               Difficulty.SENIOR, "CQRS"),
        ),
        key_concepts=("Scalability", "CQRS", "Event Sourcing", "Message Queues", "Load Balancing"),
    ),
    StaticTopicArea(
        id="dotnet-internals",
        name=".NET Internals",
        questions=(
            _q("Describe the generations of the .NET garbage collector and what triggers a gen 2 collection.",
               "Gen 0/1/2 plus LOH; gen 2 runs on budget exhaustion, memory pressure or explicit calls.",
               Difficulty.SENIOR, "GC", "garbage collection"),
            _q("What is boxing and how can it hurt performance in generic code?",
               "Wrapping a value type in a heap object; hidden allocations in non-generic collections or interfaces.",
               Difficulty.MID, "boxing", "value type"),
        ),
        key_concepts=("GC", "JIT", "Boxing", "Span<T>", "Reflection"),
    ),
    StaticTopicArea(
        id="backend-architecture",
        name="Backend Architecture",
        questions=(
            _q("How does the ASP.NET Core middleware pipeline process a request?",
               "Ordered delegates each calling next; short-circuiting, terminal middleware, response flows back out.",
               Difficulty.MID, "ASP.NET", "middleware"),
            _q("Compare REST and gRPC for internal service-to-service communication.",
               "gRPC: contract-first, HTTP/2, streaming, efficient binary; REST: ubiquity, tooling, human-readable.",
               Difficulty.MID, "REST", "gRPC"),
        ),
        key_concepts=("Middleware", "Clean Architecture", "DDD", "REST", "gRPC"),
    ),
    StaticTopicArea(
        id="databases",
        name="Databases",
        questions=(
            _q("What is the difference between a clustered and a non-clustered index?",
               "Clustered defines physical row order (one per table); non-clustered is a separate structure pointing to rows.",
               Difficulty.MID, "index", "SQL"),
            _q("Explain the transaction isolation levels and the anomalies each one prevents.",
               "Read uncommitted through serializable; dirty reads, non-repeatable reads, phantoms.",
               Difficulty.SENIOR, "transaction", "ACID"),
        ),
        key_concepts=("Indexing", "Transactions", "ACID", "Normalization", "Query Plans"),
    ),
    StaticTopicArea(
        id="orm-data-access",
        name="ORM & Data Access",
        questions=(
            _q("What is the N+1 problem in Entity Framework and how do you detect and fix it?",
               "One query per related row; spot it in logs/profilers, fix with Include, projections or split queries.",
               Difficulty.MID, "N+1", "Entity Framework"),
            _q("When would you pick Dapper over EF Core?",
               "Hot read paths needing hand-tuned SQL and minimal overhead; EF Core for rich change tracking.",
               Difficulty.MID, "Dapper", "EF Core"),
        ),
        key_concepts=("Change Tracking", "Migrations", "LINQ", "Repository Pattern", "Unit of Work"),
    ),
    StaticTopicArea(
        id="performance",
        name="Performance",
        questions=(
            _q("How would you track down a memory leak in a long-running service?",
               "Trend memory metrics, take dumps over time, compare retained object graphs, look for rooted statics/events.",
               Difficulty.SENIOR, "memory leak", "profiling"),
            _q("What should a reliable micro-benchmark control for?",
               "Warm-up, JIT tiers, GC noise, dead code elimination; use a harness such as BenchmarkDotNet.",
               Difficulty.MID, "benchmark"),
        ),
        key_concepts=("Profiling", "Allocations", "Caching", "Benchmarking"),
    ),
    StaticTopicArea(
        id="concurrency",
        name="Concurrency",
        questions=(
            _q("How does async/await work under the hood in .NET, and what does the compiler generate?",
               "A state machine capturing locals; continuations are scheduled on completion via the awaiter.",
               Difficulty.SENIOR, "async", "await"),
            _q("What is the difference between a lock and a SemaphoreSlim for guarding shared state?",
               "lock is a synchronous monitor for one holder; SemaphoreSlim allows N holders and async waiting.",
               Difficulty.MID, "lock", "semaphore"),
        ),
        key_concepts=("Async/Await", "Tasks", "Locks", "Channels", "Thread Safety"),
    ),
    StaticTopicArea(
        id="cloud",
        name="Cloud & Infrastructure",
        questions=(
            _q("How do you keep secrets out of application configuration on Azure?",
               "Key Vault references with managed identity; no secrets in repos or plain app settings.",
               Difficulty.MID, "Azure", "Key Vault"),
        ),
        key_concepts=("Azure", "AWS", "Serverless", "Infrastructure as Code"),
    ),
    StaticTopicArea(
        id="security",
        name="Security",
        questions=(
            _q("Walk through the OAuth 2.0 authorization code flow with PKCE.",
               "Client sends code challenge, user authenticates, code returned, exchanged with verifier for tokens.",
               Difficulty.SENIOR, "OAuth"),
            _q("How do you defend a web application against CSRF?",
               "Anti-forgery tokens, SameSite cookies, and not using GET for state changes.",
               Difficulty.MID, "CSRF", "OWASP"),
        ),
        key_concepts=("OWASP Top 10", "OAuth", "JWT", "Encryption"),
    ),
    StaticTopicArea(
        id="testing",
        name="Testing",
        questions=(
            _q("What belongs in a unit test versus an integration test?",
               "Unit: one behaviour in isolation with fakes; integration: real boundaries such as DB or HTTP.",
               Difficulty.JUNIOR, "unit test", "integration test"),
        ),
        key_concepts=("Unit Testing", "Integration Testing", "Mocking", "TDD"),
    ),
    StaticTopicArea(
        id="behavioral",
        name="Behavioral",
        questions=(
            _q("Tell me about a conflict within your team and how you resolved it.",
               "STAR: situation, task, action, result; focus on listening and shared goals.",
               Difficulty.MID, "conflict", "team"),
            _q("How do you give critical feedback during a code review without discouraging the author?",
               "Be specific, explain the why, separate must-fix from nits, praise what is good.",
               Difficulty.MID, "code review"),
        ),
        key_concepts=("Leadership", "Mentoring", "Conflict Resolution", "Estimation"),
    ),
)


def all_static_questions(bank: Sequence[StaticTopicArea] = STATIC_TOPICS) -> List[StaticQuestion]:
    return [q for topic in bank for q in topic.questions]


def find_topic(bank: Iterable[StaticTopicArea], topic_id: str) -> Optional[StaticTopicArea]:
    """Case-insensitive lookup by topic id."""
    wanted = (topic_id or "").lower()
    for topic in bank:
        if topic.id.lower() == wanted:
            return topic
    return None


def static_key_concepts(bank: Sequence[StaticTopicArea] = STATIC_TOPICS) -> set:
    return {c.lower() for topic in bank for c in topic.key_concepts}
