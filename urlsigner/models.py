from pydantic import BaseModel, Field


class SignURLRequest(BaseModel):
    url: str = Field(min_length=1, max_length=8192)
    validity: str | int | None = None


class SignURLResponse(BaseModel):
    signed_url: str
    expires: int
    expires_at: str


class VerifyURLRequest(BaseModel):
    url: str = Field(min_length=1, max_length=8192)


class VerifyURLResponse(BaseModel):
    valid: bool
