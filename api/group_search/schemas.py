from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Union

class GroupRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[Union[int, str]] = None
    title: Optional[str] = None
    description: Optional[str] = None
    writer: Optional[str] = None
    created_at: Optional[str] = None

class NormalizedRecord(GroupRecord):
    # ms since epoch, or -inf when created_at could not be parsed
    instant: float

class ItemOut(BaseModel):
    id: Optional[Union[int, str]]
    title: Optional[str]
    description: Optional[str]
    writer: Optional[str]
    created_at: Optional[str]
    instant: Optional[int]
    display_time: str

class SearchResponse(BaseModel):
    q: str
    sort: str
    items: List[ItemOut]
    count: int
