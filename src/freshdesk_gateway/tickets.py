"""Ticket operations: CRUD, listing, search and conversations."""

from typing import Any, Dict, Optional

from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import RequestValidationError
from freshdesk_gateway.models import (
    NoteCreate,
    Page,
    ReplyCreate,
    TicketCreate,
    TicketFilters,
    TicketUpdate,
    to_payload,
)
from freshdesk_gateway.pagination import fetch_page
from freshdesk_gateway.transport import request


REQUESTER_FIELDS = ("email", "requester_id", "phone", "unique_external_id", "twitter_id", "facebook_id")


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return value


def check_requester(ticket: TicketCreate) -> None:
    """Freshdesk needs a way to identify who raised the ticket."""
    if not any(getattr(ticket, name) for name in REQUESTER_FIELDS):
        raise RequestValidationError(
            "At least one requester identifier must be provided: " + ", ".join(REQUESTER_FIELDS)
        )
    if ticket.phone and not ticket.email and not ticket.name:
        raise RequestValidationError("A name is required when phone is given without an email")


def filters_to_params(filters: Optional[TicketFilters]) -> Dict[str, Any]:
    """Map each filter that is set to exactly one query parameter."""
    if filters is None:
        return {}
    params: Dict[str, Any] = {}
    for name, value in to_payload(filters, exclude=("tags", "custom_fields")).items():
        params[name] = _query_value(value)
    if filters.tags:
        params["tag"] = ",".join(filters.tags)
    for key, value in (filters.custom_fields or {}).items():
        params[key] = _query_value(value)
    return params


async def create_ticket(config: FreshdeskConfig, ticket: TicketCreate) -> Dict[str, Any]:
    check_requester(ticket)
    return await request(config, "/tickets", "POST", json=to_payload(ticket))


async def get_ticket(config: FreshdeskConfig, ticket_id: int) -> Dict[str, Any]:
    return await request(config, f"/tickets/{ticket_id}")


async def update_ticket(config: FreshdeskConfig, update: TicketUpdate) -> Dict[str, Any]:
    changes = to_payload(update, exclude=("ticket_id",))
    if not changes:
        raise RequestValidationError("At least one field must be provided to update the ticket")
    return await request(config, f"/tickets/{update.ticket_id}", "PUT", json=changes)


async def delete_ticket(config: FreshdeskConfig, ticket_id: int) -> Dict[str, Any]:
    """Delete a ticket. The remote answers 204 No Content, so this returns {}."""
    return await request(config, f"/tickets/{ticket_id}", "DELETE")


async def list_tickets(
    config: FreshdeskConfig,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    filters: Optional[TicketFilters] = None,
) -> Page:
    return await fetch_page(config, "/tickets", page, per_page, params=filters_to_params(filters))


async def search_tickets(config: FreshdeskConfig, query: str, page: Optional[int] = None) -> Dict[str, Any]:
    """Search tickets with the remote query language.

    The query is forwarded unchanged; Freshdesk expects the whole expression
    wrapped in double quotes, e.g. "priority:3 AND status:2".
    """
    params: Dict[str, Any] = {"query": query}
    if page is not None:
        params["page"] = page
    return await request(config, "/search/tickets", params=params)


async def get_ticket_conversations(
    config: FreshdeskConfig,
    ticket_id: int,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Page:
    return await fetch_page(config, f"/tickets/{ticket_id}/conversations", page, per_page)


async def create_reply(config: FreshdeskConfig, reply: ReplyCreate) -> Dict[str, Any]:
    body = to_payload(reply, exclude=("ticket_id",))
    return await request(config, f"/tickets/{reply.ticket_id}/reply", "POST", json=body)


async def create_note(config: FreshdeskConfig, note: NoteCreate) -> Dict[str, Any]:
    body = to_payload(note, exclude=("ticket_id",))
    return await request(config, f"/tickets/{note.ticket_id}/notes", "POST", json=body)
