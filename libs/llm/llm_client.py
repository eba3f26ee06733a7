from __future__ import annotations

from abc import ABC, abstractmethod


class LLMClient(ABC):
    """Abstract interface for language model interactions."""

    @abstractmethod
    def classify_note(self, text: str) -> str:
        """Return the raw model output for the classification instruction.

        Implementations raise ``LLMClientError`` when the backend call itself
        fails; parsing the output is left to the caller.
        """
