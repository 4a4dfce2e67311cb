"""Pydantic request/response schemas for the Identity API."""

from pydantic import BaseModel, Field


class NewAccountRequest(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    phone_number: str
    email_id: str
    address: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "username": "alice",
                    "password": "s3cret",
                    "phone_number": "+1-555-0100",
                    "email_id": "alice@example.com",
                    "address": None,
                }
            ]
        }
    }


class UsernameRequest(BaseModel):
    username: str


class LoginRequest(BaseModel):
    username: str
    password: str


class AccountResponse(BaseModel):
    id: int
    username: str
    phone_number: str
    email_id: str
    address: str | None = None

    model_config = {"from_attributes": True}


class ExistsResponse(BaseModel):
    exists: bool


class StatusResponse(BaseModel):
    status: str = "ok"


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(min_length=1)


class ProfileResponse(AccountResponse):
    ratings_given: int = 0
