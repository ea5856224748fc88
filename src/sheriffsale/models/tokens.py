"""
Positional Token Models

A source document reaches the parser as pages of text tokens, each carrying
its decoded text and its (x, y) position in layout units.
"""
from typing import List

from pydantic import BaseModel, Field


class TextToken(BaseModel):
    """
    One text run extracted from a page.

    Attributes:
        text: Decoded text value
        x: Horizontal position in layout units
        y: Vertical position in layout units
    """

    text: str = Field("", description="Decoded text value")
    x: float = Field(0.0, description="Horizontal position")
    y: float = Field(0.0, description="Vertical position")


class TokenPage(BaseModel):
    """A page of tokens in reading order."""

    tokens: List[TextToken] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tokens)
