from typing import List

from pydantic import BaseModel, Field


class FreeSlotsResponse(BaseModel):
    provider_id: int
    date: str
    slots: List[str] = Field(default_factory=list)
