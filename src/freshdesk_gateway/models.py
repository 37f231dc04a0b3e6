from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

# Custom field values stay scalar so the outbound JSON is deterministic.
CustomFieldValue = Union[str, int, float, bool, None]
CustomFields = Dict[str, CustomFieldValue]


# enums of ticket properties
class TicketSource(IntEnum):
    EMAIL = 1
    PORTAL = 2
    PHONE = 3
    CHAT = 7
    FEEDBACK_WIDGET = 9
    OUTBOUND_EMAIL = 10


class TicketStatus(IntEnum):
    OPEN = 2
    PENDING = 3
    RESOLVED = 4
    CLOSED = 5


class TicketPriority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4


class PaginationCursor(BaseModel):
    current_page: int
    per_page: int
    next_page: Optional[int] = None
    prev_page: Optional[int] = None


class Page(BaseModel):
    items: List[Dict[str, Any]]
    pagination: PaginationCursor


class TicketCreate(BaseModel):
    subject: str = Field(..., description="Subject of the ticket")
    description: str = Field(..., description="HTML content of the ticket")
    status: TicketStatus = Field(default=TicketStatus.OPEN, description="Status of the ticket")
    priority: TicketPriority = Field(default=TicketPriority.LOW, description="Priority of the ticket")
    source: TicketSource = Field(default=TicketSource.PORTAL, description="Channel through which the ticket was created")

    # Requester identification (at least one is required)
    email: Optional[str] = None
    requester_id: Optional[int] = None
    phone: Optional[str] = None
    name: Optional[str] = Field(None, description="Requester name; required with phone when no email is given")
    unique_external_id: Optional[str] = None
    twitter_id: Optional[str] = None
    facebook_id: Optional[str] = None

    type: Optional[str] = None
    responder_id: Optional[int] = None
    group_id: Optional[int] = None
    company_id: Optional[int] = None
    product_id: Optional[int] = None
    parent_id: Optional[int] = None
    email_config_id: Optional[int] = None
    cc_emails: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    due_by: Optional[str] = Field(None, description="ISO 8601 timestamp")
    fr_due_by: Optional[str] = Field(None, description="ISO 8601 timestamp")
    custom_fields: Optional[CustomFields] = None


class TicketUpdate(BaseModel):
    ticket_id: int = Field(..., ge=1, description="ID of the ticket to update")
    subject: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    source: Optional[TicketSource] = None
    email: Optional[str] = None
    requester_id: Optional[int] = None
    phone: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    responder_id: Optional[int] = None
    group_id: Optional[int] = None
    company_id: Optional[int] = None
    product_id: Optional[int] = None
    tags: Optional[List[str]] = Field(None, description="Replaces existing tags")
    due_by: Optional[str] = None
    fr_due_by: Optional[str] = None
    custom_fields: Optional[CustomFields] = None


class TicketFilters(BaseModel):
    """Optional filters for listing tickets; only fields that are set become query parameters."""

    filter: Optional[str] = Field(None, description="Predefined filter, e.g. new_and_my_open, watching, spam, deleted")
    requester_id: Optional[int] = None
    email: Optional[str] = None
    unique_external_id: Optional[str] = None
    company_id: Optional[int] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    source: Optional[TicketSource] = None
    group_id: Optional[int] = None
    responder_id: Optional[int] = Field(None, description="Assigned agent")
    tags: Optional[List[str]] = None
    updated_since: Optional[str] = Field(None, description="ISO 8601 timestamp")
    created_since: Optional[str] = Field(None, description="ISO 8601 timestamp")
    order_by: Optional[str] = Field(None, description="created_at, due_by, updated_at or status")
    order_type: Optional[str] = Field(None, pattern="^(asc|desc)$")
    include: Optional[str] = Field(None, description="Embed, e.g. requester, stats, description")
    custom_fields: Optional[CustomFields] = None
    query: Optional[str] = Field(None, description="Raw advanced query string, passed through unchanged")


class ReplyCreate(BaseModel):
    ticket_id: int = Field(..., ge=1)
    body: str = Field(..., description="HTML content of the reply")
    user_id: Optional[int] = Field(None, description="Agent sending the reply (defaults to the API key owner)")
    from_email: Optional[str] = None
    cc_emails: Optional[List[str]] = None
    bcc_emails: Optional[List[str]] = None


class NoteCreate(BaseModel):
    ticket_id: int = Field(..., ge=1)
    body: str = Field(..., description="HTML content of the note")
    private: bool = Field(default=True, description="Set to false for a public note")
    user_id: Optional[int] = None
    notify_emails: Optional[List[str]] = None
    incoming: Optional[bool] = None


class TicketFieldCreate(BaseModel):
    label: str = Field(..., description="Display name for the field (as seen by agents)")
    type: str = Field(..., description="e.g. custom_text, custom_dropdown, custom_checkbox")
    label_for_customers: Optional[str] = None
    description: Optional[str] = None
    position: Optional[int] = Field(None, ge=1)
    required_for_closure: Optional[bool] = None
    required_for_agents: Optional[bool] = None
    customers_can_edit: Optional[bool] = None
    required_for_customers: Optional[bool] = None
    displayed_to_customers: Optional[bool] = None
    choices: Optional[List[Any]] = Field(None, description="Required for dropdown fields")


class TicketFieldUpdate(BaseModel):
    # The remote rejects changes to a field's name or type.
    field_id: int = Field(..., ge=1)
    label: Optional[str] = None
    label_for_customers: Optional[str] = None
    description: Optional[str] = None
    position: Optional[int] = Field(None, ge=1)
    required_for_closure: Optional[bool] = None
    required_for_agents: Optional[bool] = None
    customers_can_edit: Optional[bool] = None
    required_for_customers: Optional[bool] = None
    displayed_to_customers: Optional[bool] = None
    choices: Optional[List[Any]] = None


class ContactFieldCreate(BaseModel):
    label: str = Field(..., description="Display name for the field (as seen by agents)")
    type: str = Field(..., description="e.g. custom_text, custom_dropdown, custom_checkbox")
    label_for_customers: Optional[str] = None
    position: Optional[int] = Field(None, ge=1)
    required_for_agents: Optional[bool] = None
    required_for_customers: Optional[bool] = None
    displayed_for_customers: Optional[bool] = None
    editable_in_signup: Optional[bool] = None
    customers_can_edit: Optional[bool] = None
    choices: Optional[List[Any]] = Field(None, description="Required for dropdown fields")


class ContactFieldUpdate(BaseModel):
    field_id: int = Field(..., ge=1)
    label: Optional[str] = None
    label_for_customers: Optional[str] = None
    position: Optional[int] = Field(None, ge=1)
    required_for_agents: Optional[bool] = None
    required_for_customers: Optional[bool] = None
    displayed_for_customers: Optional[bool] = None
    editable_in_signup: Optional[bool] = None
    customers_can_edit: Optional[bool] = None
    choices: Optional[List[Any]] = None


class ContactCreate(BaseModel):
    name: str = Field(..., description="Name of the contact")
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    twitter_id: Optional[str] = None
    unique_external_id: Optional[str] = None
    address: Optional[str] = None
    company_id: Optional[int] = None
    description: Optional[str] = None
    job_title: Optional[str] = None
    language: Optional[str] = Field(None, description="e.g. 'en'")
    time_zone: Optional[str] = None
    tags: Optional[List[str]] = None
    other_emails: Optional[List[str]] = None
    custom_fields: Optional[CustomFields] = None


class ContactUpdate(BaseModel):
    contact_id: int = Field(..., ge=1)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    twitter_id: Optional[str] = None
    address: Optional[str] = None
    company_id: Optional[int] = None
    description: Optional[str] = None
    job_title: Optional[str] = None
    language: Optional[str] = None
    time_zone: Optional[str] = None
    tags: Optional[List[str]] = Field(None, description="Replaces existing tags")
    other_emails: Optional[List[str]] = Field(None, description="Replaces existing alternate emails")
    custom_fields: Optional[CustomFields] = None


def to_payload(model: BaseModel, *, exclude=()) -> Dict[str, Any]:
    """Dump the fields that were given, with enums rendered as their codes.

    Custom field maps are copied as-is so explicit nulls (clearing a value)
    survive and key order is kept.
    """
    skip = set(exclude) | {"custom_fields"}
    payload = model.model_dump(mode="json", exclude_none=True, exclude=skip)
    custom_fields = getattr(model, "custom_fields", None)
    if custom_fields and "custom_fields" not in exclude:
        payload["custom_fields"] = dict(custom_fields)
    return payload
