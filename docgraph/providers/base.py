"""
LLM Provider Interface

The pipeline talks to its language model through one operation: a prompt in,
an instance of a pydantic schema out. Chunk extraction, per-type entity
merging and vocabulary suggestions all go through `generate_structured`.
"""

from abc import ABC, abstractmethod
from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class LLMProvider(ABC):
    """Structured-output language model used by extraction, merging and suggestions."""

    @abstractmethod
    async def generate_structured(
        self,
        prompt: str,
        schema: type[T],
        *,
        system: str | None = None,
    ) -> T:
        """
        Return the model's answer parsed into `schema`.

        Raises:
            ValueError: If the answer cannot be parsed into `schema`
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier, used in logs and cost records."""
        ...
