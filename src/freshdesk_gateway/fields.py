"""Custom field definitions for tickets and contacts.

Create and update bodies are wrapped in a "ticket_field" / "contact_field"
envelope; every other family sends the bare payload.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel

from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import RequestValidationError
from freshdesk_gateway.models import (
    ContactFieldCreate,
    ContactFieldUpdate,
    TicketFieldCreate,
    TicketFieldUpdate,
    to_payload,
)
from freshdesk_gateway.transport import request

DROPDOWN_FIELD_TYPES = frozenset({"custom_dropdown", "nested_field"})


def is_dropdown_type(field_type: str) -> bool:
    return field_type in DROPDOWN_FIELD_TYPES or field_type.endswith("dropdown")


def check_choices(field: Union[TicketFieldCreate, ContactFieldCreate]) -> None:
    if is_dropdown_type(field.type) and not field.choices:
        raise RequestValidationError("Choices are required for dropdown fields")


def _changes(update: BaseModel) -> Dict[str, Any]:
    changes = to_payload(update, exclude=("field_id",))
    if not changes:
        raise RequestValidationError("At least one field must be provided to update")
    return changes


# Ticket fields

async def list_ticket_fields(config: FreshdeskConfig) -> List[Dict[str, Any]]:
    return await request(config, "/ticket_fields")


async def view_ticket_field(config: FreshdeskConfig, field_id: int) -> Dict[str, Any]:
    return await request(config, f"/admin/ticket_fields/{field_id}")


async def create_ticket_field(config: FreshdeskConfig, field: TicketFieldCreate) -> Dict[str, Any]:
    check_choices(field)
    return await request(config, "/admin/ticket_fields", "POST", json={"ticket_field": to_payload(field)})


async def update_ticket_field(config: FreshdeskConfig, update: TicketFieldUpdate) -> Dict[str, Any]:
    body = {"ticket_field": _changes(update)}
    return await request(config, f"/admin/ticket_fields/{update.field_id}", "PUT", json=body)


# Contact fields

async def list_contact_fields(config: FreshdeskConfig) -> List[Dict[str, Any]]:
    return await request(config, "/contact_fields")


async def view_contact_field(config: FreshdeskConfig, field_id: int) -> Dict[str, Any]:
    return await request(config, f"/contact_fields/{field_id}")


async def create_contact_field(config: FreshdeskConfig, field: ContactFieldCreate) -> Dict[str, Any]:
    check_choices(field)
    return await request(config, "/contact_fields", "POST", json={"contact_field": to_payload(field)})


async def update_contact_field(config: FreshdeskConfig, update: ContactFieldUpdate) -> Dict[str, Any]:
    body = {"contact_field": _changes(update)}
    return await request(config, f"/contact_fields/{update.field_id}", "PUT", json=body)
