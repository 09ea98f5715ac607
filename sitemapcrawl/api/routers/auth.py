from fastapi import APIRouter
from pydantic import BaseModel

from sitemapcrawl.api.auth import check_admin_token


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


def create_auth_router() -> APIRouter:
    """Exchange the admin password for the bearer token used by /sitemaps."""
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.post("/login", response_model=LoginResponse)
    def login(req: LoginRequest):
        return LoginResponse(access_token=check_admin_token(req.password))

    return router
