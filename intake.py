"""
Complaint/suggestion form and newsletter subscriptions.
"""

from typing import Any, Dict

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document
from errors import Conflict, NotFound, ValidationError
from log import logger
from schemas import Complaint, ComplaintRequest, Newsletter


def submit_complaint(db: Database, data: ComplaintRequest) -> Dict[str, Any]:
    name = data.name.strip()
    message = data.message.strip()
    if not name or not message:
        raise ValidationError("Name and message are required")

    complaint = Complaint(
        name=name,
        email=str(data.email).lower(),
        phone=(data.phone or "").strip() or None,
        message=message,
    )
    doc = create_document(db, "complaint", complaint)
    logger.info(f"Complaint {doc['_id']} received")
    return doc


def subscribe(db: Database, email: str) -> Dict[str, Any]:
    email = email.strip().lower()
    if db["newsletter"].find_one({"email": email}):
        raise Conflict("Email already subscribed!")
    try:
        doc = create_document(db, "newsletter", Newsletter(email=email))
    except DuplicateKeyError:
        raise Conflict("Email already subscribed!")
    logger.info("New newsletter subscriber")
    return doc


def unsubscribe(db: Database, email: str) -> None:
    result = db["newsletter"].delete_one({"email": email.strip().lower()})
    if result.deleted_count == 0:
        raise NotFound("Email is not subscribed")
    logger.info("Newsletter subscriber removed")
