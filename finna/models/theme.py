"""
Theme schemas.

Dependencies: pydantic
System role: Theme API contracts
"""

from typing import Any

from pydantic import BaseModel


class ThemeResponse(BaseModel):
    theme: str
    themes: list[str]


class ThemeConfigResponse(BaseModel):
    theme: str
    key: str
    config: Any
