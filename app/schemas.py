"""Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.choices import (
    CivilStatus,
    EducationalAttainment,
    Sex,
    normalize_civil_status,
    normalize_educational_attainment,
)


class MessageResponse(BaseModel):
    message: str


# --- Test Schemas ---
class OptionIn(BaseModel):
    text: str = Field(..., min_length=1)
    image_url: str = ""
    is_correct: bool = False


class QuestionIn(BaseModel):
    question_text: str = Field(..., min_length=1)
    question_image_url: str = ""
    passage_index: int = Field(default=-1, ge=-1)
    options: List[OptionIn]

    @field_validator("options")
    @classmethod
    def check_options(cls, options: List[OptionIn]) -> List[OptionIn]:
        if len(options) != 4:
            raise ValueError("options must have exactly 4 options")
        if not any(opt.is_correct for opt in options):
            raise ValueError("At least one correct answer must be selected")
        return options


class PassageIn(BaseModel):
    content: str = ""
    image_url: str = ""


class TestCreate(BaseModel):
    """Schema for creating or replacing a test. test_code is server generated."""

    subject: str = Field(..., min_length=1, max_length=255)
    instruction: str = Field(..., min_length=1)
    passages: List[PassageIn] = Field(default_factory=list)
    questions: List[QuestionIn] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_passage_refs(self):
        for idx, question in enumerate(self.questions, start=1):
            if question.passage_index >= len(self.passages):
                raise ValueError(f"Question {idx} references missing passage {question.passage_index}")
        return self


class OptionResponse(BaseModel):
    id: int
    text: str
    image_url: str
    is_correct: bool

    model_config = ConfigDict(from_attributes=True)


class QuestionResponse(BaseModel):
    id: int
    question_text: str
    question_image_url: str
    passage_index: int
    options: List[OptionResponse]

    model_config = ConfigDict(from_attributes=True)


class PassageResponse(BaseModel):
    id: int
    content: str
    image_url: str

    model_config = ConfigDict(from_attributes=True)


class TestResponse(BaseModel):
    id: int
    test_code: str
    subject: str
    instruction: str
    passages: List[PassageResponse]
    questions: List[QuestionResponse]
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Answer Sheet Schemas ---
class AnswerIn(BaseModel):
    question_id: int
    selected_option: int


class AnswerSheetCreate(BaseModel):
    """Learner submission. The test can be given by id or by code."""

    uli: str = Field(..., min_length=1, max_length=50)
    test_id: Optional[int] = None
    test_code: Optional[str] = Field(default=None, max_length=16)
    answers: List[AnswerIn] = Field(default_factory=list)
    date: Optional[datetime] = None

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    middle_initial: Optional[str] = Field(default=None, max_length=10)
    sex: Optional[Sex] = None
    civil_status: Optional[CivilStatus] = None
    highest_educational_attainment: Optional[EducationalAttainment] = None
    contact_number: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)
    school: Optional[str] = Field(default=None, max_length=255)
    qualifications: Optional[str] = Field(default=None, max_length=255)

    @field_validator("civil_status", mode="before")
    @classmethod
    def _civil_status(cls, value: Any):
        return normalize_civil_status(value)

    @field_validator("highest_educational_attainment", mode="before")
    @classmethod
    def _education(cls, value: Any):
        return normalize_educational_attainment(value)

    @model_validator(mode="after")
    def require_test_reference(self):
        if self.test_id is None and not self.test_code:
            raise ValueError("Either test_id or test_code is required")
        return self


class AnswerResponse(BaseModel):
    question_id: int
    selected_option: int = Field(validation_alias="selected_option_id")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AnswerSheetResponse(BaseModel):
    id: int
    uli: str
    test_id: Optional[int]
    date: datetime
    answers: List[AnswerResponse]
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_initial: Optional[str] = None
    sex: Optional[str] = None
    civil_status: Optional[str] = None
    highest_educational_attainment: Optional[str] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None
    school: Optional[str] = None
    qualifications: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Result Schemas ---
class ResultResponse(BaseModel):
    id: int
    uli: str
    test_id: Optional[int]
    test_code: str
    subject: Optional[str]
    score: int
    total_questions: int
    remarks: str
    percentage: float
    passed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CalculateAllResponse(BaseModel):
    message: str
    results: List[ResultResponse]


class BackgroundTaskResponse(BaseModel):
    message: str
    task_id: str


class RemarksUpdate(BaseModel):
    remarks: str = Field(..., max_length=2000)


class ReviewItem(BaseModel):
    question_id: int
    question_text: Optional[str]
    selected_answer: Optional[str]
    correct_answer: Optional[str]
    is_correct: bool


class ResultReviewResponse(BaseModel):
    uli: str
    test_code: str
    subject: Optional[str]
    score: int
    total_questions: int
    percentage: float
    passed: bool
    performance: str
    items: List[ReviewItem]


# --- Test Session Schemas ---
class TestSessionStart(BaseModel):
    uli: str = Field(..., min_length=1, max_length=50)
    test_code: str = Field(..., min_length=1, max_length=16)


class TestSessionEnd(BaseModel):
    end_time: Optional[datetime] = None


class TestSessionResponse(BaseModel):
    id: int
    uli: str
    test_id: int
    test_code: str
    start_time: datetime
    end_time: Optional[datetime]
    status: str

    model_config = ConfigDict(from_attributes=True)


# --- Archive Schemas ---
class ArchivedRecordResponse(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    payload: Dict[str, Any]
    deleted_by: Optional[str]
    deleted_at: datetime

    model_config = ConfigDict(from_attributes=True)
