from __future__ import annotations
from pydantic import BaseModel, Field


class LoginIn(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    token: str


class SignupIn(BaseModel):
    first_name: str
    last_name: str
    email: str
    password: str
    university_id: int = Field(ge=1)


class EmailIn(BaseModel):
    email: str


class ResetPasswordIn(BaseModel):
    new_password: str = Field(min_length=1)


class AllowedDomainsOut(BaseModel):
    domains: list[str]
