# src/interviewkb/enrich/keywords.py
# Static topic/keyword tables used by the rule-based classifier.
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

UNKNOWN_TOPIC_ID = "unknown"
UNKNOWN_TOPIC_NAME = "Unclassified"


@dataclass(frozen=True)
class TopicKeywords:
    display_name: str
    keywords: Tuple[str, ...]


class TopicKeywordTable:
    """Read-only topic id -> (display name, ordered keywords) table."""

    def __init__(self, entries: Mapping[str, Tuple[str, ...]] | Mapping[str, TopicKeywords]):
        frozen: Dict[str, TopicKeywords] = {}
        for topic_id, entry in entries.items():
            if not isinstance(entry, TopicKeywords):
                name, keywords = entry
                entry = TopicKeywords(name, tuple(keywords))
            frozen[topic_id] = entry
        self._entries = MappingProxyType(frozen)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, topic_id: str) -> bool:
        return topic_id in self._entries

    def __getitem__(self, topic_id: str) -> TopicKeywords:
        return self._entries[topic_id]

    def items(self) -> Iterator[Tuple[str, TopicKeywords]]:
        # sorted so that ties resolve to the lowest topic id
        for topic_id in sorted(self._entries):
            yield topic_id, self._entries[topic_id]

    def topic_ids(self) -> Tuple[str, ...]:
        return tuple(sorted(self._entries))


@dataclass(frozen=True)
class DifficultyKeywords:
    senior: Tuple[str, ...]
    junior: Tuple[str, ...]


DEFAULT_TOPIC_KEYWORDS = TopicKeywordTable({
    "algorithms": ("Algorithms & Data Structures", (
        "algorithm", "big-o", "data structure", "binary search", "sorting",
        "hash", "tree", "graph", "leetcode", "dynamic programming",
        "linked list", "array",
    )),
    "system-design": ("System Design", (
        "system design", "distributed", "microservice", "CQRS", "event sourcing",
        "load balancer", "scalab", "message queue", "kafka", "rabbitmq",
    )),
    "dotnet-internals": (".NET Internals", (
        "CLR", "GC", "garbage collection", "JIT", "IL", "Span", "memory",
        "ref struct", "boxing", "value type", "assembly", "reflection",
        "expression tree",
    )),
    "backend-architecture": ("Backend Architecture", (
        "ASP.NET", "middleware", "minimal API", "controller", "REST", "gRPC",
        "GraphQL", "clean architecture", "DDD", "MediatR", "API gateway",
    )),
    "databases": ("Databases", (
        "SQL", "PostgreSQL", "index", "query", "transaction", "ACID", "NoSQL",
        "MongoDB", "Redis", "deadlock", "normalization", "stored procedure",
    )),
    "orm-data-access": ("ORM & Data Access", (
        "Entity Framework", "EF Core", "Dapper", "LINQ", "IQueryable",
        "DbContext", "migration", "lazy loading", "repository", "unit of work",
        "N+1",
    )),
    "performance": ("Performance", (
        "performance", "profiling", "benchmark", "memory leak", "allocation",
        "caching", "Span", "ArrayPool", "hot path",
    )),
    "concurrency": ("Concurrency", (
        "async", "await", "Task", "thread", "parallel", "lock", "semaphore",
        "channel", "concurrent", "deadlock async",
    )),
    "cloud": ("Cloud & Infrastructure", (
        "Azure", "AWS", "cloud", "Kubernetes", "Docker", "serverless",
        "Service Bus", "Key Vault", "Terraform",
    )),
    "security": ("Security", (
        "OWASP", "authentication", "authorization", "OAuth", "JWT", "CSRF",
        "XSS", "SQL injection", "encryption",
    )),
    "testing": ("Testing", (
        "test", "unit test", "integration test", "xUnit", "Moq", "TDD",
        "BDD", "code coverage", "Testcontainers",
    )),
    "frontend": ("Frontend", (
        "Blazor", "React", "Angular", "TypeScript", "SignalR", "JavaScript", "CSS",
    )),
    "devops": ("DevOps", (
        "Docker", "CI/CD", "Kubernetes", "GitHub Actions", "monitoring",
        "logging", "OpenTelemetry", "Prometheus",
    )),
    "behavioral": ("Behavioral", (
        "leadership", "mentoring", "agile", "scrum", "estimation", "conflict",
        "code review", "team",
    )),
})

DEFAULT_DIFFICULTY_KEYWORDS = DifficultyKeywords(
    senior=("senior", "lead", "principal", "architect", "staff"),
    junior=("junior", "entry", "beginner", "intern", "graduate"),
)
