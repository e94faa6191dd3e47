from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Any
from uuid import UUID

import jwt
from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError
from pydantic import BaseModel, Field

from .config import Settings
from .database import get_db_connection
from .errors import InvalidToken, MissingToken
from .services.auth_service import register_user, verify_credentials

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)
router = APIRouter(tags=["auth"])


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    message: str
    token: str


@dataclass(frozen=True)
class TokenSigner:
    """Issues and verifies the signed session tokens."""

    secret_key: str
    algorithm: str
    ttl: timedelta

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenSigner":
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_ttl_minutes),
        )

    def issue(self, user_id: UUID, *, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "user_id": str(user_id),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> UUID:
        """Return the user id carried by a valid, unexpired token."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except InvalidTokenError as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidToken() from exc

        try:
            return UUID(payload.get("user_id"))
        except (TypeError, ValueError, AttributeError) as exc:
            raise InvalidToken() from exc


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_signer(settings: Settings = Depends(get_app_settings)) -> TokenSigner:
    return TokenSigner.from_settings(settings)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    signer: TokenSigner = Depends(get_token_signer),
) -> UUID:
    if credentials is None or not credentials.credentials:
        raise MissingToken()

    return signer.verify(credentials.credentials)


@router.post("/signup", response_model=MessageResponse)
async def signup(
    payload: SignupRequest,
    settings: Settings = Depends(get_app_settings),
    connection: Any = Depends(get_db_connection),
) -> MessageResponse:
    # No token here; the client logs in separately.
    await register_user(
        connection,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        rounds=settings.password_hash_rounds,
    )
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    signer: TokenSigner = Depends(get_token_signer),
    settings: Settings = Depends(get_app_settings),
    connection: Any = Depends(get_db_connection),
) -> LoginResponse:
    user = await verify_credentials(
        connection,
        email=payload.email,
        password=payload.password,
        rounds=settings.password_hash_rounds,
    )
    logger.info("User %s logged in", user["id"])
    return LoginResponse(message="Login successful", token=signer.issue(user["id"]))
