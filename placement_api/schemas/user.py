"""
placement_api/schemas/user.py

Request/response schemas for the user endpoints
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdate(BaseModel):
    """
    Values accepted by the profile update, keyed by their flat name.

    Extra keys are forbidden; the service rejects them before this model
    is reached so the error lists every offending key.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    gender: Optional[str] = None
    permanentAddress: Optional[Union[str, Dict[str, Any]]] = None
    birthDate: Optional[datetime] = None
    counsellor: Optional[str] = None
    batch: Optional[Union[str, int]] = None
    mobileNo: Optional[Union[str, int]] = None
    semester: Optional[Union[int, str]] = None
    github: Optional[str] = None
    linkedIn: Optional[str] = None


class UserDetailsResponse(BaseModel):
    success: bool = True
    user: Dict[str, Any]


class UserUpdateResponse(BaseModel):
    message: str
    user: Dict[str, Any]
    success: bool = True


class AvatarUploadResponse(BaseModel):
    message: str
    fileId: str


class MessageResponse(BaseModel):
    message: str


class CounsellorListResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
