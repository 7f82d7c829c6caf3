from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Body of /api/register and /api/login.

    Length rules are enforced by the identity store so both endpoints
    report them the same way.
    """
    username: str = Field(..., description="Account name (3-50 characters)")
    password: str = Field(..., description="Plain password, at least 6 characters")


class AuthResponse(BaseModel):
    token: str
    user_id: str
