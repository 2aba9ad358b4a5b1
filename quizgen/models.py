from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Union


class QuizRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Required fields are checked by the generator so a missing value yields
    # the service's own 400 body instead of a schema error.
    topic: Optional[str] = None
    num_questions: Optional[int] = Field(None, alias="numQuestions")
    batch: int = 1
    total_questions: Optional[int] = Field(None, alias="totalQuestions")


class QuestionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    question: str = ""
    options: List[Any] = Field(default_factory=list)
    correct_answers: List[Any] = Field(default_factory=lambda: [0], alias="correctAnswers")
    multiple_choice: bool = Field(False, alias="multipleChoice")
    difficulty: str = "medium"
    explanation: str = ""
    category: str


class QuizResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    questions: List[QuestionRecord]
    topic: str
    batch: int
    questions_in_batch: int = Field(..., alias="questionsInBatch")
    total_questions: int = Field(..., alias="totalQuestions")
    has_more_batches: bool = Field(..., alias="hasMoreBatches")
    used_fallback: bool = Field(False, alias="usedFallback")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
