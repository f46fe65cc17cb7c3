"""Types shared by the YouTrack sync: queue operations, templates, local tasks."""

import uuid
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from reportdesk.domain.enums import QueueOperationStatus, QueueOperationType

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class FieldValue(BaseModel):
    name: Optional[str] = None
    login: Optional[str] = None


class TypedField(BaseModel):
    """YouTrack custom field value with its explicit ``$type``."""

    model_config = {"populate_by_name": True}

    type: str = Field(alias="$type")
    value: FieldValue


# Override value: full typed field, bare value object, or a plain enum name.
CustomFieldOverride = Union[TypedField, FieldValue, str]


class QueueOperationData(BaseModel):
    model_config = _CAMEL

    task_id: str
    template_id: Optional[str] = None
    custom_fields: Optional[dict[str, CustomFieldOverride]] = None
    youtrack_issue_id: Optional[str] = None


class QueueOperation(BaseModel):
    model_config = _CAMEL

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: QueueOperationType
    status: QueueOperationStatus = QueueOperationStatus.PENDING
    created_at: datetime
    attempts: int = 0
    last_attempt_at: Optional[datetime] = None
    error: Optional[str] = None
    data: QueueOperationData
    result: Optional[dict[str, Any]] = None


class YouTrackTemplate(BaseModel):
    model_config = _CAMEL

    id: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_.-]+$")
    name: str
    description: Optional[str] = None
    project_id: str
    parent_issue_id: Optional[str] = None
    summary_template: str
    description_template: str
    custom_fields: Optional[dict[str, TypedField]] = None


class LocalTask(BaseModel):
    """Entry of the markdown task manifest."""

    model_config = {**_CAMEL, "extra": "allow"}

    id: str
    title: str
    status: str = ""
    priority: str = "medium"
    file: str
    created_date: Optional[str] = None
    completed_date: Optional[str] = None
    branch: Optional[str] = None
    youtrack_issue_ids: list[str] = []
    tags: list[str] = []
    project_id: Optional[str] = None
    # Resolved from project_id against the projects metadata; never stored in the manifest.
    project: Optional[str] = None
    content: str = ""


class Project(BaseModel):
    id: str
    name: str
