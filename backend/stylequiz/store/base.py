from typing import List, Protocol

from ..core.models import QuizContent, ResultRecord


class ContentLoader(Protocol):
    """Resolves a client slug to its active questions and templates"""

    async def load(self, slug: str) -> QuizContent:
        ...


class ResultStore(Protocol):
    """Accepts one result record per completed session"""

    async def save(self, record: ResultRecord) -> None:
        ...


class InMemoryResultStore:
    """Keeps saved records in a list; used when no remote store is configured"""

    def __init__(self):
        self.records: List[ResultRecord] = []

    async def save(self, record: ResultRecord) -> None:
        self.records.append(record)
