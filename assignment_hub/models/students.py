# FILE: assignment_hub/models/students.py
"""
Student profile models
"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentProfile(BaseModel):
    """Student record as read from the students collection"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    grade: Optional[str] = None
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    learning_style: List[str] = Field(default_factory=list, alias="learningStyle")
    parent_id: Optional[str] = Field(default=None, alias="parentId")
    email: Optional[str] = None

    @field_validator("grade", mode="before")
    @classmethod
    def coerce_grade(cls, v):
        # Stored as 5, "5" or "5th Grade" depending on who wrote the record
        if v is None:
            return None
        return str(v)

    @field_validator("strengths", "weaknesses", "learning_style", mode="before")
    @classmethod
    def coerce_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v] if v.strip() else []
        return [str(item) for item in v if str(item).strip()]
