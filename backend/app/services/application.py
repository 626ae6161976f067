"""
Job application validation and formatting.

Validation runs in a fixed order (name, job, whatsapp, details) and stops
at the first failing field; the raised ValidationError carries the message
shown to the applicant.
"""

import html
import re
from typing import Any

from app.errors import ValidationError
from app.models.application import ApplicationForm, JobTitle

WHATSAPP_RE = re.compile(r"^\+[0-9]{7,15}$")

MIN_NAME_LENGTH = 2
MIN_DETAILS_LENGTH = 20

_VALID_JOBS = {job.value for job in JobTitle}


def _is_text(value: Any, min_length: int) -> bool:
    return isinstance(value, str) and len(value.strip()) >= min_length


def validate_application(payload: dict) -> ApplicationForm:
    """
    Validate raw form fields and return an ApplicationForm.

    Raises:
        ValidationError: 400 with a field-specific message.
    """
    name = payload.get("name")
    if not _is_text(name, MIN_NAME_LENGTH):
        raise ValidationError("Please provide a valid name")

    job = payload.get("job")
    if not isinstance(job, str) or job not in _VALID_JOBS:
        raise ValidationError("Please select a valid job position")

    whatsapp = payload.get("whatsapp")
    if not isinstance(whatsapp, str) or not WHATSAPP_RE.match(whatsapp):
        raise ValidationError("Please provide a valid WhatsApp number")

    details = payload.get("details")
    if not _is_text(details, MIN_DETAILS_LENGTH):
        raise ValidationError(
            "Please provide more detailed information about why you want this job"
        )

    return ApplicationForm(name=name, job=JobTitle(job), whatsapp=whatsapp, details=details)


def format_application_message(form: ApplicationForm) -> str:
    """
    Render the Telegram message for an application.

    The message is sent with parse_mode=HTML, so applicant text is escaped.
    """
    return (
        "📋 New Job Application\n\n"
        f"👤 Name: {html.escape(form.name.strip())}\n"
        f"💼 Position: {form.job.value}\n"
        f"📱 WhatsApp: {form.whatsapp}\n"
        f"📝 Details: {html.escape(form.details.strip())}"
    )
