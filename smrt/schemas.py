# smrt/schemas.py
from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

Status = Literal["OPEN", "CLOSED", "LOCKED"]
Name = Annotated[str, Field(min_length=1, max_length=255)]

# columns a PATCH may explicitly set back to null
NULLABLE_FIELDS = frozenset({"description", "message"})


# ---------------------- REQUEST BODIES ----------------------
class StrictIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, minus nulls on required columns."""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }


class RegisterIn(StrictIn):
    email: EmailStr
    password: str = Field(min_length=1)
    name: Optional[str] = None


class LoginIn(StrictIn):
    email: EmailStr
    password: str = Field(min_length=1)


class ProjectIn(StrictIn):
    name: Name
    description: Optional[str] = None


class ProjectPatch(StrictIn):
    name: Optional[Name] = None
    description: Optional[str] = None


class NameIn(StrictIn):
    name: Name


class NamePatch(StrictIn):
    name: Optional[Name] = None


class ConditionIn(StrictIn):
    name: Name
    message: Optional[str] = None


class ConditionPatch(StrictIn):
    name: Optional[Name] = None
    message: Optional[str] = None


class FeatureIn(StrictIn):
    name: Name
    message: Optional[str] = None
    status: Status = "OPEN"


class FeaturePatch(StrictIn):
    name: Optional[Name] = None
    message: Optional[str] = None
    status: Optional[Status] = None


class RequirementIn(StrictIn):
    name: Name
    status: Status = "OPEN"


class RequirementPatch(StrictIn):
    name: Optional[Name] = None
    status: Optional[Status] = None


class MessageIn(StrictIn):
    body: str = Field(min_length=1)


class MessagePatch(StrictIn):
    body: Optional[str] = Field(default=None, min_length=1)


# ---------------------- RESPONSES ----------------------
class Out(BaseModel):
    """camelCase JSON built straight from ORM rows."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class UserOut(Out):
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime


class SessionOut(Out):
    session_id: str
    visits: Optional[int] = None
    user_id: Optional[str] = None


class ProjectOut(Out):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime


class KeyOut(Out):
    id: str
    name: str
    project_id: str
    created_at: datetime


class KeyCreatedOut(KeyOut):
    # the raw secret, present in the creation response only
    token: str
    secret: str


class ConditionOut(Out):
    id: str
    name: str
    message: Optional[str] = None
    project_id: str
    created_at: datetime


class FeatureOut(Out):
    id: str
    name: str
    message: Optional[str] = None
    status: str
    project_id: str
    created_at: datetime


class RequirementOut(Out):
    id: str
    name: str
    status: str
    feature_id: str
    created_at: datetime


class ProjectRequirementOut(Out):
    id: str
    name: str
    project_id: str
    created_at: datetime


class DiscussionOut(Out):
    id: str
    name: str
    project_id: str
    created_at: datetime


class MessageOut(Out):
    id: str
    body: str
    author_name: str
    discussion_id: str
    created_at: datetime


class CheckOut(Out):
    validated: bool
    project: dict
    key_id: str


class StatusOut(BaseModel):
    status: str
