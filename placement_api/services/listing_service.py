"""
placement_api/services/listing_service.py

Purpose: Paginated student and counsellor listings

- Role filtered queries with skip/limit pagination
- Counsellor id -> name resolution for student rows
- Total count and page metadata
"""

import math
from typing import Any, Dict, Iterable, List, Optional

from placement_api.core.config import Settings, settings as default_settings
from placement_api.core.exceptions import ResourceNotFoundError
from placement_api.core.logging import get_logger
from placement_api.models.user import (
    COUNSELLOR_LISTING_PROJECTION,
    STUDENT_LISTING_PROJECTION,
    Role,
)
from placement_api.utils.serialization import serialize_document
from placement_api.utils.validation_utils import is_valid_object_id, to_object_id

logger = get_logger(__name__)


def shape_student(student: Dict[str, Any], counsellor_name: str) -> Dict[str, Any]:
    """
    Builds the listing row for a student document.
    """
    profile = dict(student.get("profile") or {})
    profile["counsellor"] = counsellor_name

    return {
        "name": student.get("name") or "-",
        "id": student.get("id") or "-",
        "_id": student.get("_id") or "-",
        "profile": profile,
        "certificatesLength": len(student.get("certificates") or []),
        "resume": bool(student.get("resume")),
        "isPlaced": student.get("isPlaced") or False,
        "placedDate": student.get("placedDate"),
    }


def page_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "totalStudents": total,
        "currentPage": page,
        "totalPages": math.ceil(total / limit),
        "limit": limit,
    }


class ListingService:
    """
    Read-only listings over the users collection.

    ``page`` and ``limit`` are expected to be validated positive integers.
    """

    def __init__(self, users, config: Optional[Settings] = None):
        self.users = users
        self.config = config or default_settings

    def _empty(self, message: str):
        if self.config.EMPTY_LISTING_IS_NOT_FOUND:
            raise ResourceNotFoundError(message)

    async def _page(self, query: Dict[str, Any], page: int, limit: int) -> List[Dict[str, Any]]:
        cursor = (
            self.users.find(query, STUDENT_LISTING_PROJECTION)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        return await cursor.to_list(length=limit)

    async def _counsellor_names(self, students: Iterable[Dict[str, Any]]) -> Dict[str, str]:
        """
        Resolves the counsellor references of a page in one lookup.
        """
        ids = {
            to_object_id(ref)
            for ref in ((s.get("profile") or {}).get("counsellor") for s in students)
            if ref is not None and is_valid_object_id(ref)
        }
        if not ids:
            return {}

        cursor = self.users.find({"_id": {"$in": list(ids)}}, {"name": 1})
        counsellors = await cursor.to_list(length=len(ids))
        return {str(c["_id"]): c.get("name") or "-" for c in counsellors}

    async def list_students(self, page: int, limit: int) -> Dict[str, Any]:
        """
        Returns one page of all students with counsellor names resolved.
        """
        query = {"role": Role.STUDENT.value}

        students = await self._page(query, page, limit)
        if not students:
            self._empty("No students found")

        names = await self._counsellor_names(students)
        rows = []
        for student in students:
            ref = (student.get("profile") or {}).get("counsellor")
            counsellor_name = names.get(str(ref), "-") if ref is not None else "-"
            rows.append(shape_student(student, counsellor_name))

        total = await self.users.count_documents(query)
        logger.debug(f"Total students in database: {total}")

        return {
            "success": True,
            "data": serialize_document(rows),
            "meta": page_meta(total, page, limit),
        }

    async def list_counsellor_students(self, counsellor_id: str, page: int, limit: int) -> Dict[str, Any]:
        """
        Returns one page of the students assigned to a counsellor.
        """
        counsellor = None
        if is_valid_object_id(counsellor_id):
            counsellor = await self.users.find_one({"_id": to_object_id(counsellor_id)}, {"name": 1})
        if not counsellor:
            raise ResourceNotFoundError("Counsellor not found")

        query = {
            "role": Role.STUDENT.value,
            "profile.counsellor": {"$in": [counsellor["_id"], str(counsellor["_id"])]},
        }

        students = await self._page(query, page, limit)
        if not students:
            self._empty("No students found for this counsellor")

        rows = [shape_student(student, counsellor.get("name")) for student in students]

        total = await self.users.count_documents(query)
        logger.debug(f"Total students for counsellor: {total}", extra={"user_id": counsellor_id})

        meta = {"counsellor": {"id": counsellor_id, "name": counsellor.get("name")}}
        meta.update(page_meta(total, page, limit))

        return {
            "success": True,
            "data": serialize_document(rows),
            "meta": meta,
        }

    async def list_counsellors(self) -> Dict[str, Any]:
        """
        Returns every counsellor (id and name).
        """
        cursor = self.users.find({"role": Role.COUNSELLOR.value}, COUNSELLOR_LISTING_PROJECTION)
        counsellors = await cursor.to_list(length=None)
        if not counsellors:
            self._empty("No counsellors found")

        return {
            "success": True,
            "data": serialize_document(counsellors),
        }
