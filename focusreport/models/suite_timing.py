"""
Suite Timing Model
Pydantic model for the measured duration of one finished suite.
"""
from pydantic import BaseModel, Field


class SuiteTiming(BaseModel):
    name: str
    duration: float = Field(default=0.0, ge=0.0)
