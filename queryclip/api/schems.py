from pydantic import BaseModel


class ClipResponse(BaseModel):
    """Model for a successfully rendered clip."""
    resultUrl: str


class ErrorResponse(BaseModel):
    """Model for a failed clip request."""
    error: str
