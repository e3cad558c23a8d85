from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session
from config import Settings, get_settings
from database import get_session
from schemas import LoginRequest, RegisterRequest, envelope, user_payload
from services import auth as auth_service

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Register a new user and start a session

    Args:
        body: name, email and password
        response: Outgoing response, receives the session cookie
        session: Database session
        settings: Application settings

    Returns:
        Envelope with the public user projection
    """
    user = auth_service.register(session, settings, body.name, body.email, body.password)
    auth_service.issue_session_cookie(response, user, settings)

    return envelope(message="User registered successfully", data={"user": user_payload(user)})


@router.post("/login")
def login(
    body: LoginRequest,
    response: Response,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Log in with email and password

    Returns:
        Envelope with the public user projection
    """
    user = auth_service.login(session, settings, body.email, body.password)
    auth_service.issue_session_cookie(response, user, settings)

    return envelope(message="Logged in successfully", data={"user": user_payload(user)})


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)) -> dict:
    """Clear the session cookie"""
    auth_service.clear_session_cookie(response, settings)

    return envelope(message="Logged out successfully")
