from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session
from typing import Optional
from config import Settings, get_settings
from database import get_session
from models import User
from schemas import PasswordChange, ProfileUpdate, UserProfile, envelope, user_payload
from middleware.auth import get_current_user
from services import users as user_service
from utils.cloudinary import CloudinaryUploader, get_image_uploader
from utils.errors import ValidationError

router = APIRouter()


@router.get("/profile")
def get_profile(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """Get the authenticated user's profile"""
    profile = user_service.get_profile(session, user.id)

    return envelope(data={"user": user_payload(profile, UserProfile)})


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict:
    """
    Update the authenticated user's name and/or email

    Args:
        body: Fields to change
        user: Authenticated user
        session: Database session

    Returns:
        Envelope with the updated profile
    """
    profile = user_service.update_profile(session, user.id, name=body.name, email=body.email)

    return envelope(
        message="Profile updated successfully",
        data={"user": user_payload(profile, UserProfile)},
    )


@router.put("/password")
def change_password(
    body: PasswordChange,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Change the authenticated user's password"""
    user_service.change_password(
        session, settings, user.id, body.current_password, body.new_password
    )

    return envelope(message="Password updated successfully")


@router.post("/profile/picture")
def upload_profile_picture(
    profile_picture: Optional[UploadFile] = File(None, alias="profilePicture"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    uploader: CloudinaryUploader = Depends(get_image_uploader),
) -> dict:
    """
    Upload a new profile picture

    Args:
        profile_picture: Multipart image file (form field "profilePicture")
        user: Authenticated user
        session: Database session
        settings: Application settings (upload size limit)
        uploader: Image host client

    Returns:
        Envelope with the updated profile, including the picture URL
    """
    if profile_picture is None or not profile_picture.filename:
        raise ValidationError("Please upload an image file")

    if not (profile_picture.content_type or "").startswith("image/"):
        raise ValidationError("Only image files are allowed")

    content = profile_picture.file.read(settings.max_upload_size + 1)
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > settings.max_upload_size:
        raise ValidationError(f"Image must be at most {settings.max_upload_size} bytes")

    profile = user_service.update_profile_picture(
        session, uploader, user.id, content, profile_picture.filename
    )

    return envelope(
        message="Profile picture updated successfully",
        data={"user": user_payload(profile, UserProfile)},
    )
