"""
Chat proxy request/response models
"""
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator


class ChatMessage(BaseModel):
    """OpenAI-style chat turn"""
    model_config = ConfigDict(extra='ignore')

    role: str = "user"
    content: str = ""

    @field_validator('content', mode='before')
    @classmethod
    def coerce_content(cls, v: Any) -> str:
        return str(v) if v else ""


class ChatRequest(BaseModel):
    """Body of POST /api/chat"""
    model_config = ConfigDict(extra='ignore')

    messages: List[ChatMessage] = Field(..., min_length=1)
    model: Optional[str] = None


class ChatResponse(BaseModel):
    content: str
    model: str
