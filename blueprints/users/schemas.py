from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    admin_id: int
    first_name: str
    last_name: str
    email: str
    admin_role_id: int


class AdminCreateIn(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    admin_role_id: int
    # без пароля генерируем случайный и отправляем его письмом
    password: Optional[str] = None


class AdminUpdateIn(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    admin_role_id: Optional[int] = None


class UpdateMeIn(BaseModel):
    old_password: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class StudentUpdateMeIn(UpdateMeIn):
    university_id: Optional[int] = Field(default=None, ge=1)


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    first_name: str
    last_name: str
    email: str
    university_id: int
    is_pending: bool
