"""Base use case interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class UseCase(ABC, Generic[RequestT, ResponseT]):
    """A single application operation with typed request and response."""

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """Execute the use case."""
