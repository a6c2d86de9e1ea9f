from pydantic import BaseModel, Field
from typing import Optional


class ConverseRequest(BaseModel):
    query: str = Field(min_length=1)
    requestor: Optional[str] = "user"


class ConverseResponse(BaseModel):
    status: str
    requestor: str
    reply: str
