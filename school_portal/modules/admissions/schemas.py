from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import date, datetime

GRADES = (
    "อนุบาล 1",
    "อนุบาล 2",
    "อนุบาล 3",
    "ประถมศึกษาปีที่ 1",
    "ประถมศึกษาปีที่ 2",
    "ประถมศึกษาปีที่ 3",
    "ประถมศึกษาปีที่ 4",
    "ประถมศึกษาปีที่ 5",
    "ประถมศึกษาปีที่ 6",
    "มัธยมศึกษาปีที่ 1",
    "มัธยมศึกษาปีที่ 2",
    "มัธยมศึกษาปีที่ 3",
)


class AdmissionCreate(BaseModel):
    student_name: str = Field(min_length=2)
    student_id: str = Field(min_length=13)
    birth_date: date
    grade: str
    parent_name: str = Field(min_length=2)
    parent_phone: str = Field(min_length=10)
    parent_email: EmailStr
    address: str = Field(min_length=10)
    previous_school: str = Field(min_length=2)
    gpa: Optional[str] = None
    special_needs: Optional[str] = None

    @field_validator("grade")
    @classmethod
    def known_grade(cls, value: str) -> str:
        if value not in GRADES:
            raise ValueError("กรุณาเลือกระดับชั้นที่สมัคร")
        return value

    @field_validator("gpa", "special_needs")
    @classmethod
    def blank_is_null(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class AdmissionResponse(BaseModel):
    id: str
    student_name: str
    student_id: str
    birth_date: date
    grade: str
    parent_name: str
    parent_phone: str
    parent_email: str
    address: str
    previous_school: str
    gpa: Optional[str] = None
    special_needs: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class AdmissionSubmitted(BaseModel):
    id: Optional[str] = None
    message: str
