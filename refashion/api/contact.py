from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError as PydanticValidationError

from refashion.dependencies import get_mailer
from refashion.errors import ValidationError
from refashion.models.schemas import CollaborateForm, ContributeForm
from refashion.services.mailer import ResendMailer

router = APIRouter(prefix="/api/contact", tags=["contact"])


def contribute_message(form: ContributeForm) -> tuple[str, str]:
    subject = f"[Dorodango] New Contribution from {form.name}"
    text = "\n".join([
        "New Contribution Request",
        "",
        f"Name: {form.name}",
        f"Location: {form.location}",
        f"Mobile: {form.mobile}",
        f"Email: {form.email}",
        f"Type of Clothes: {form.clothesType}",
    ])
    return subject, text


def collaborate_message(form: CollaborateForm) -> tuple[str, str]:
    subject = f"[Dorodango] New Collaboration from {form.name}"
    text = "\n".join([
        "New Collaboration Request",
        "",
        f"Name: {form.name}",
        f"Location: {form.location}",
        f"Art Forms: {', '.join(form.artForms)}",
        f"Experience: {form.experience}",
        f"Social Media: {form.socialMedia or 'Not provided'}",
        f"Suggestions: {form.suggestions or 'None'}",
    ])
    return subject, text


@router.post("")
async def submit_contact(
    payload: dict[str, Any] = Body(...),
    mailer: ResendMailer = Depends(get_mailer),
):
    try:
        if payload.get("type") == "contribute":
            subject, text = contribute_message(ContributeForm(**payload))
        elif payload.get("type") == "collaborate":
            subject, text = collaborate_message(CollaborateForm(**payload))
        else:
            raise ValidationError("Invalid type")
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid form: {e.error_count()} field error(s)") from e

    await mailer.send(subject, text)
    return {"success": True}
