"""
User accounts: registration, login, profile and favorite plants.
"""

from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import hash_password, verify_password
from database import create_document, object_id
from errors import Conflict, NotFound, Unauthenticated, ValidationError
from log import logger
from schemas import ProfileUpdate, RegisterRequest, User, UserOut

MIN_PASSWORD_LENGTH = 6


def user_out(doc: Dict[str, Any]) -> UserOut:
    return UserOut(
        id=str(doc["_id"]),
        username=doc["username"],
        email=doc["email"],
        phone=doc.get("phone", ""),
        favorites=doc.get("favorites", []),
    )


def get_user(db: Database, user_id: str) -> Dict[str, Any]:
    user = db["user"].find_one({"_id": object_id(user_id, "User")})
    if not user:
        raise NotFound("User not found")
    return user


def _required(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


def register_user(db: Database, data: RegisterRequest) -> Dict[str, Any]:
    username = _required(data.username, "Username")
    phone = _required(data.phone, "Phone")
    email = str(data.email).strip().lower()
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if db["user"].find_one({"email": email}):
        raise Conflict("User already exists")

    user = User(username=username, email=email, phone=phone, password_hash=hash_password(data.password))
    try:
        doc = create_document(db, "user", user)
    except DuplicateKeyError:
        raise Conflict("User already exists")

    logger.info(f"Registered user {doc['_id']}")
    return doc


def authenticate(db: Database, email: str, password: str) -> Dict[str, Any]:
    user = db["user"].find_one({"email": (email or "").strip().lower()})
    if not user or not verify_password(password, user["password_hash"]):
        raise Unauthenticated("Invalid email or password")
    return user


def update_profile(db: Database, user_id: str, data: ProfileUpdate) -> Dict[str, Any]:
    user = get_user(db, user_id)
    changes: Dict[str, Any] = {}
    if data.username is not None:
        changes["username"] = _required(data.username, "Username")
    if data.phone is not None:
        changes["phone"] = _required(data.phone, "Phone")
    if data.email is not None:
        email = str(data.email).strip().lower()
        if email != user["email"]:
            if db["user"].find_one({"email": email}):
                raise Conflict("Email already in use")
            changes["email"] = email

    if changes:
        try:
            db["user"].update_one({"_id": user["_id"]}, {"$set": changes})
        except DuplicateKeyError:
            raise Conflict("Email already in use")
        user.update(changes)
        logger.info(f"Updated profile of {user_id}: {sorted(changes)}")
    return user


def list_favorites(db: Database, user_id: str) -> List[str]:
    return get_user(db, user_id).get("favorites", [])


def add_favorite(db: Database, user_id: str, plant_name: str) -> List[str]:
    user = get_user(db, user_id)
    db["user"].update_one({"_id": user["_id"]}, {"$addToSet": {"favorites": plant_name}})
    return list_favorites(db, user_id)


def remove_favorite(db: Database, user_id: str, plant_name: str) -> List[str]:
    user = get_user(db, user_id)
    wanted = plant_name.strip().lower()
    matches = [name for name in user.get("favorites", []) if name.lower() == wanted]
    if matches:
        db["user"].update_one({"_id": user["_id"]}, {"$pull": {"favorites": {"$in": matches}}})
    return list_favorites(db, user_id)
