from pydantic import BaseModel, Field


class AnswerDraftRequest(BaseModel):
    question: str = Field(min_length=5)
    content: str = Field(min_length=10)


class AnswerDraftResponse(BaseModel):
    data: str
