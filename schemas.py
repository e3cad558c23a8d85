from pydantic import BaseModel, Field
from typing import Optional, Any
from datetime import datetime


class RegisterRequest(BaseModel):
    """Schema for registering a new user"""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Schema for logging in"""
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's profile"""
    name: Optional[str] = None
    email: Optional[str] = None


class PasswordChange(BaseModel):
    """Schema for changing the caller's password"""
    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")

    class Config:
        populate_by_name = True


class TaskCreate(BaseModel):
    """Schema for creating a new task"""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TaskUpdate(BaseModel):
    """
    Schema for updating a task

    Only keys present in the request body end up in model_fields_set, so an
    omitted description and "description": null are told apart.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class UserPublic(BaseModel):
    """Public user projection returned by the auth endpoints"""
    id: int
    name: str
    email: str
    created_at: datetime = Field(serialization_alias="createdAt")

    class Config:
        from_attributes = True


class UserProfile(UserPublic):
    """User projection returned by the profile endpoints"""
    profile_picture: Optional[str] = Field(None, serialization_alias="profilePicture")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class TaskResponse(BaseModel):
    """Schema for task response"""
    id: int
    title: str
    description: Optional[str]
    status: str
    user_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def user_payload(user, schema=UserPublic) -> dict:
    return schema.model_validate(user).model_dump(mode="json", by_alias=True)


def task_payload(task) -> dict:
    return TaskResponse.model_validate(task).model_dump(mode="json")


def envelope(
    status: str = "success",
    message: Optional[str] = None,
    data: Optional[Any] = None,
    results: Optional[int] = None,
) -> dict:
    """
    Standard API response body: {status, message?, results?, data?}

    Keys left as None are omitted; values inside data are kept as-is.
    """
    body = {"status": status}
    if message is not None:
        body["message"] = message
    if results is not None:
        body["results"] = results
    if data is not None:
        body["data"] = data
    return body
