from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SecurityCodeIn(BaseModel):
    project_id: int
    user_role_id: int
    expiration: datetime


class SecurityCodeUpdateIn(BaseModel):
    expiration: Optional[datetime] = None
    regenerate_code: bool = False


class SecurityCodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    security_code_id: int
    code: str
    expiration: datetime
    project_id: int
    user_role_id: int


class ValidateCodeIn(BaseModel):
    security_code: str


class ProjectInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: int
    name: str
    year: int


class ValidateCodeOut(BaseModel):
    is_valid: bool
    project: Optional[ProjectInfo] = None
