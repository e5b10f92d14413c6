"""
placement_api/models/user.py

Purpose: User document model

- Role enumeration (student, counsellor, admin)
- Field projections used by the read endpoints
- Allow-list of fields a profile update may touch

Stored shape (users collection):
- _id: ObjectId
- id: str (external/roll identifier)
- name, email, password, role
- profile: {gender, permanentAddress, birthDate, counsellor (ObjectId),
  batch, mobileNo, semester, github, linkedIn, avatar (GridFS ObjectId)}
- isPlaced: bool, placedDate: datetime
- certificates: list, resume: list, passwordChanged: bool
"""

from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    COUNSELLOR = "counsellor"
    ADMIN = "admin"


# Single-user reads never include the password hash
DETAIL_PROJECTION = {
    "name": 1,
    "email": 1,
    "id": 1,
    "role": 1,
    "profile": 1,
    "isPlaced": 1,
    "placedDate": 1,
}

STUDENT_LISTING_PROJECTION = {
    "name": 1,
    "id": 1,
    "profile": 1,
    "certificates": 1,
    "resume": 1,
    "passwordChanged": 1,
    "isPlaced": 1,
    "placedDate": 1,
}

COUNSELLOR_LISTING_PROJECTION = {
    "id": 1,
    "name": 1,
}

ALLOWED_UPDATES = (
    "name",
    "profile.gender",
    "profile.permanentAddress",
    "profile.birthDate",
    "profile.counsellor",
    "profile.batch",
    "profile.mobileNo",
    "profile.semester",
    "profile.github",
    "profile.linkedIn",
)

AVATAR_FIELD = "profile.avatar"
