"""
placement_api/services/user_service.py

Purpose: User data management

- Profile retrieval with field projection
- Allow-listed profile updates persisted in one write
- Avatar reference writes on the user record
"""

from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument

from placement_api.core.exceptions import ResourceNotFoundError, ValidationError
from placement_api.core.logging import get_logger, LogContext
from placement_api.models.user import ALLOWED_UPDATES, AVATAR_FIELD, DETAIL_PROJECTION, Role
from placement_api.schemas.user import ProfileUpdate
from placement_api.utils.serialization import serialize_document
from placement_api.utils.validation_utils import is_valid_object_id, to_object_id

logger = get_logger(__name__)


def normalize_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Maps request keys onto stored field paths.

    Profile fields may be sent flat ("gender") or dotted ("profile.gender").
    A single key outside the allow-list rejects the whole request.

    Returns:
        Mapping of stored path (e.g. "profile.gender") to value

    Raises:
        ValidationError: listing every disallowed key
    """
    normalized = {}
    invalid = []

    for key, value in updates.items():
        if f"profile.{key}" in ALLOWED_UPDATES:
            normalized[f"profile.{key}"] = value
        elif key in ALLOWED_UPDATES:
            normalized[key] = value
        else:
            invalid.append(key)

    if invalid:
        raise ValidationError(
            "Invalid updates provided.",
            details={"invalid_fields": invalid, "allowed_fields": list(ALLOWED_UPDATES)}
        )

    return normalized


class UserService:
    """
    Reads and writes user records in the users collection.
    """

    def __init__(self, users):
        self.users = users

    async def find_user(self, user_id: str, projection: Optional[Dict[str, int]] = None) -> Optional[Dict[str, Any]]:
        """
        Retrieves a raw user document by id, or None.
        """
        if not is_valid_object_id(user_id):
            return None
        return await self.users.find_one({"_id": to_object_id(user_id)}, projection)

    async def get_user_details(self, user_id: str) -> Dict[str, Any]:
        """
        Returns the public projection of a user.

        Raises:
            ValidationError: malformed id
            ResourceNotFoundError: no user with that id
        """
        if not is_valid_object_id(user_id):
            raise ValidationError("Invalid user ID")

        user = await self.users.find_one({"_id": to_object_id(user_id)}, DETAIL_PROJECTION)
        if not user:
            raise ResourceNotFoundError("User not found")

        return serialize_document(user)

    async def update_user(self, user_id: str, updates: Any) -> Dict[str, Any]:
        """
        Applies an allow-listed update to a user.

        Args:
            user_id: Authenticated caller id
            updates: Request body (field name -> new value)

        Returns:
            Updated user (public projection)
        """
        if not isinstance(updates, dict) or not updates:
            raise ValidationError("No updates provided.")

        normalized = normalize_updates(updates)

        try:
            parsed = ProfileUpdate.model_validate(
                {path.split(".")[-1]: value for path, value in normalized.items()}
            )
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid updates provided.",
                details=e.errors(include_url=False, include_context=False)
            ) from e

        values = parsed.model_dump(exclude_unset=True)
        changes = {}
        for path in normalized:
            changes[path] = values[path.split(".")[-1]]

        if changes.get("profile.counsellor") is not None:
            changes["profile.counsellor"] = await self._resolve_counsellor(changes["profile.counsellor"])

        with LogContext(user_id=user_id):
            user = None
            if is_valid_object_id(user_id):
                user = await self.users.find_one_and_update(
                    {"_id": to_object_id(user_id)},
                    {"$set": changes},
                    projection=DETAIL_PROJECTION,
                    return_document=ReturnDocument.AFTER,
                )

            if not user:
                raise ResourceNotFoundError("User not found.")

            logger.info(f"User updated: {', '.join(sorted(changes))}")

        return serialize_document(user)

    async def _resolve_counsellor(self, counsellor_id: str) -> ObjectId:
        if not is_valid_object_id(counsellor_id):
            raise ValidationError("Invalid counsellor ID", details={"counsellor": counsellor_id})

        counsellor = await self.users.find_one(
            {"_id": to_object_id(counsellor_id), "role": Role.COUNSELLOR.value},
            {"_id": 1}
        )
        if not counsellor:
            raise ValidationError("Counsellor not found", details={"counsellor": counsellor_id})

        return counsellor["_id"]

    async def get_avatar_reference(self, user_id: str) -> Any:
        """
        Returns the stored avatar reference of a user (None when unset).

        Raises:
            ResourceNotFoundError: no user with that id
        """
        user = await self.find_user(user_id, {AVATAR_FIELD: 1})
        if not user:
            raise ResourceNotFoundError("User not found")
        return (user.get("profile") or {}).get("avatar")

    async def set_avatar(self, user_id: str, file_id: ObjectId) -> bool:
        """
        Points the user's avatar at a stored file. Any previous file is left
        in the blob store.

        Returns:
            True if the user exists
        """
        if not is_valid_object_id(user_id):
            return False

        result = await self.users.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {AVATAR_FIELD: file_id}}
        )
        return result.matched_count > 0

    async def clear_avatar(self, user_id: str, file_id: ObjectId) -> bool:
        """
        Clears the avatar reference while it still points at ``file_id``.

        Returns:
            True if the reference was cleared
        """
        result = await self.users.update_one(
            {
                "_id": to_object_id(user_id),
                AVATAR_FIELD: {"$in": [file_id, str(file_id)]},
            },
            {"$set": {AVATAR_FIELD: None}}
        )
        return result.modified_count > 0
