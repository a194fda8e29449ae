from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class PersonnelBase(BaseModel):
    position: Optional[str] = None
    department: Optional[str] = None
    subject_group: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    additional_details: Optional[str] = None

    @field_validator(
        "position", "department", "subject_group", "email", "phone", "photo_url", "additional_details"
    )
    @classmethod
    def blank_is_null(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)


class PersonnelCreate(PersonnelBase):
    full_name: str

    @field_validator("full_name")
    @classmethod
    def full_name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("กรุณากรอกชื่อ-นามสกุล")
        return value


class PersonnelUpdate(PersonnelBase):
    full_name: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def full_name_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("กรุณากรอกชื่อ-นามสกุล")
        return value.strip() if value else value


class PersonnelResponse(BaseModel):
    id: str
    full_name: str
    position: Optional[str] = None
    department: Optional[str] = None
    subject_group: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    additional_details: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PersonnelGroup(BaseModel):
    subject_group: str
    members: List[PersonnelResponse]


class PhotoUploadResponse(BaseModel):
    photo_url: str
