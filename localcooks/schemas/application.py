"""Chef application schemas."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from ._strict_base import StrictModel, StrictRequestModel


class ApplicationCreate(StrictRequestModel):
    full_name: str = Field(..., description="Applicant name (2+ chars)")
    email: EmailStr
    phone: str
    food_safety_license: str = Field(..., description="yes | no | notSure")
    food_establishment_cert: str = Field(..., description="yes | no | notSure")
    kitchen_preference: str = Field(..., description="commercial | home | notSure")
    feedback: Optional[str] = None


class ApplicationStatusUpdate(StrictRequestModel):
    status: str = Field(..., description="inReview | approved | rejected | cancelled")


class ApplicationResponse(StrictModel):
    id: str
    user_id: Optional[str] = None
    full_name: str
    email: str
    phone: str
    food_safety_license: str
    food_establishment_cert: str
    kitchen_preference: str
    feedback: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
