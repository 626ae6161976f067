"""
Pydantic models for the job application form.
"""

from enum import Enum

from pydantic import BaseModel


class JobTitle(str, Enum):
    GRAPHIC_DESIGNING = "Graphic Designing"
    DIGITAL_MARKETING = "Digital Marketing"
    VIDEO_EDITING = "Video Editing"


class ApplicationForm(BaseModel):
    """
    A job application that has passed validation.

    Built by app.services.application.validate_application, which checks the
    raw form fields in a fixed order and reports only the first failure.
    """
    name: str
    job: JobTitle
    whatsapp: str   # "+" followed by 7-15 digits
    details: str


class ApplicationResponse(BaseModel):
    success: bool
    message: str
