"""
Transaction runner interface.

Multi-step chat operations are issued through a runner so that a store with
cross-document transactions can wrap them atomically.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class ITransactionRunner(ABC):
    """Runs a multi-step operation, inside a transaction where supported."""

    @abstractmethod
    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` and return its result."""
        pass


class PassthroughTransactionRunner(ITransactionRunner):
    """Runner for stores without multi-document transactions."""

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await operation()
