from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)


class RecommendationRequest(BaseModel):
    query: str = Field(min_length=1, max_length=2000)


class Recommendation(BaseModel):
    room_id: str
    match_score: int = Field(ge=0, le=100)
    reason: str


class RecommendationList(BaseModel):
    recommendations: list[Recommendation] = []
