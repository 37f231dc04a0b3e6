import json
import logging
from typing import Annotated, Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv
from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from freshdesk_gateway import contacts, fields, solutions, tickets
from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import FreshdeskError, RequestValidationError
from freshdesk_gateway.models import (
    ContactCreate,
    ContactFieldCreate,
    ContactFieldUpdate,
    ContactUpdate,
    CustomFields,
    NoteCreate,
    Page,
    ReplyCreate,
    TicketCreate,
    TicketFieldCreate,
    TicketFieldUpdate,
    TicketFilters,
    TicketPriority,
    TicketSource,
    TicketStatus,
    TicketUpdate,
    to_payload,
)
from freshdesk_gateway.transport import PACKAGE_VERSION

logger = logging.getLogger(__name__)

##
# Initialize FastMCP server
##
mcp = FastMCP("freshdesk-gateway")

# Built on first use so importing this module never needs credentials.
_config: Optional[FreshdeskConfig] = None


def _get_config() -> FreshdeskConfig:
    global _config
    if _config is None:
        _config = FreshdeskConfig.from_env()
    return _config


def _ok(
    data: Any,
    *,
    pagination: Optional[Dict[str, Any]] = None,
    next_call: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": True, "data": data}
    if pagination is not None:
        out["pagination"] = pagination
    if next_call is not None:
        out["next_call"] = next_call
    return out


def _err(err_type: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "success": False,
        "error": {
            "type": err_type,
            "message": message,
        }
    }
    if details:
        out["error"]["details"] = details
    return out


def _failure(action: str, exc: Exception) -> Dict[str, Any]:
    """Turn any exception into the failure envelope; nothing escapes a tool."""
    if isinstance(exc, ValidationError):
        return _err("validation_error", f"Error {action}: Validation error: {exc}")
    if isinstance(exc, FreshdeskError):
        logger.error("Error %s: %s", action, exc.message)
        return _err(exc.error_type, f"Error {action}: {exc.message}", details=exc.details)
    logger.exception("Unexpected error %s", action)
    return _err("unexpected_error", f"Error {action}: An unexpected error occurred: {exc}")


def _paged(key: str, page: Page, tool: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    cursor = page.pagination
    next_call = None
    if cursor.next_page is not None:
        next_call = {"tool": tool, "arguments": {**arguments, "page": cursor.next_page, "per_page": cursor.per_page}}
    return _ok({key: page.items}, pagination=cursor.model_dump(), next_call=next_call)


# --- Resources ---

@mcp.resource("freshdesk://articles", name="all-articles", mime_type="application/json")
async def all_articles_resource() -> str:
    """All solution articles across every category and folder."""
    try:
        articles = await solutions.get_all_articles(_get_config())
        return json.dumps(articles, indent=2)
    except Exception as e:
        return json.dumps(_failure("fetching articles", e), indent=2)


@mcp.resource("freshdesk://article/{article_id}", name="article", mime_type="application/json")
async def article_resource(article_id: str) -> str:
    """A single solution article by id."""
    try:
        try:
            numeric_id = int(article_id)
        except ValueError:
            raise RequestValidationError(f"Invalid article ID: {article_id!r}") from None
        article = await solutions.get_article(_get_config(), numeric_id)
        return json.dumps(article, indent=2)
    except Exception as e:
        return json.dumps(_failure(f"fetching article {article_id}", e), indent=2)


# --- Solution tools ---

@mcp.tool("search-articles")
async def search_articles(query: str) -> Dict[str, Any]:
    """Search for solution articles in Freshdesk."""
    try:
        return _ok(await solutions.search_articles(_get_config(), query))
    except Exception as e:
        return _failure("searching articles", e)


@mcp.tool("get-categories")
async def get_categories() -> Dict[str, Any]:
    """Get all solution categories and their folders.

    A category whose folders could not be fetched is returned with an empty
    folder list and an "error" note.
    """
    try:
        return _ok(await solutions.get_category_tree(_get_config()))
    except Exception as e:
        return _failure("fetching categories", e)


@mcp.tool("list-solution-folders")
async def list_solution_folders(category_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """List the folders of a solution category."""
    try:
        return _ok({"folders": await solutions.get_folders(_get_config(), category_id)})
    except Exception as e:
        return _failure(f"listing folders for category {category_id}", e)


@mcp.tool("list-solution-articles")
async def list_solution_articles(folder_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """List the articles of a solution folder."""
    try:
        return _ok({"articles": await solutions.get_articles(_get_config(), folder_id)})
    except Exception as e:
        return _failure(f"listing articles for folder {folder_id}", e)


@mcp.tool("get-article")
async def get_article(article_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """Retrieve a solution article by its ID."""
    try:
        return _ok(await solutions.get_article(_get_config(), article_id))
    except Exception as e:
        return _failure(f"fetching article {article_id}", e)


# --- Ticket tools ---

@mcp.tool("create-ticket")
async def create_ticket(
    subject: str,
    description: Annotated[str, Field(description="HTML content of the ticket")],
    status: TicketStatus = TicketStatus.OPEN,
    priority: TicketPriority = TicketPriority.LOW,
    source: TicketSource = TicketSource.PORTAL,
    email: Optional[str] = None,
    requester_id: Optional[int] = None,
    phone: Optional[str] = None,
    name: Annotated[Optional[str], Field(description="Requester name; required with phone when no email is given")] = None,
    unique_external_id: Optional[str] = None,
    twitter_id: Optional[str] = None,
    facebook_id: Optional[str] = None,
    type: Optional[str] = None,
    responder_id: Optional[int] = None,
    group_id: Optional[int] = None,
    company_id: Optional[int] = None,
    cc_emails: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    custom_fields: Annotated[Optional[CustomFields], Field(description='e.g. {"cf_order_id": "123"}')] = None,
) -> Dict[str, Any]:
    """Create a new ticket in Freshdesk.

    At least one requester identifier is required: email, requester_id,
    phone, unique_external_id, twitter_id or facebook_id.
    """
    try:
        ticket = TicketCreate(
            subject=subject, description=description, status=status, priority=priority, source=source,
            email=email, requester_id=requester_id, phone=phone, name=name,
            unique_external_id=unique_external_id, twitter_id=twitter_id, facebook_id=facebook_id,
            type=type, responder_id=responder_id, group_id=group_id, company_id=company_id,
            cc_emails=cc_emails, tags=tags, custom_fields=custom_fields,
        )
        return _ok(await tickets.create_ticket(_get_config(), ticket))
    except Exception as e:
        return _failure("creating ticket", e)


@mcp.tool("get-ticket")
async def get_ticket(ticket_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """Retrieve a specific ticket by its ID."""
    try:
        return _ok(await tickets.get_ticket(_get_config(), ticket_id))
    except Exception as e:
        return _failure(f"fetching ticket {ticket_id}", e)


@mcp.tool("update-ticket")
async def update_ticket(
    ticket_id: Annotated[int, Field(ge=1)],
    subject: Optional[str] = None,
    description: Optional[str] = None,
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    source: Optional[TicketSource] = None,
    requester_id: Optional[int] = None,
    responder_id: Optional[int] = None,
    group_id: Optional[int] = None,
    type: Optional[str] = None,
    tags: Annotated[Optional[List[str]], Field(description="Replaces existing tags")] = None,
    custom_fields: Optional[CustomFields] = None,
) -> Dict[str, Any]:
    """Update an existing ticket. At least one field besides ticket_id is required."""
    try:
        update = TicketUpdate(
            ticket_id=ticket_id, subject=subject, description=description, status=status,
            priority=priority, source=source, requester_id=requester_id, responder_id=responder_id,
            group_id=group_id, type=type, tags=tags, custom_fields=custom_fields,
        )
        return _ok(await tickets.update_ticket(_get_config(), update))
    except Exception as e:
        return _failure(f"updating ticket {ticket_id}", e)


@mcp.tool("delete-ticket")
async def delete_ticket(ticket_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """Delete a specific ticket by its ID."""
    try:
        await tickets.delete_ticket(_get_config(), ticket_id)
        return _ok({"message": f"Ticket {ticket_id} deleted successfully."})
    except Exception as e:
        return _failure(f"deleting ticket {ticket_id}", e)


@mcp.tool("list-tickets")
async def list_tickets(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
    filter: Annotated[Optional[str], Field(description="new_and_my_open, watching, spam or deleted")] = None,
    requester_id: Optional[int] = None,
    email: Optional[str] = None,
    unique_external_id: Optional[str] = None,
    company_id: Optional[int] = None,
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    source: Optional[TicketSource] = None,
    group_id: Optional[int] = None,
    responder_id: Optional[int] = None,
    tags: Optional[List[str]] = None,
    updated_since: Annotated[Optional[str], Field(description="ISO 8601 timestamp")] = None,
    created_since: Annotated[Optional[str], Field(description="ISO 8601 timestamp")] = None,
    order_by: Optional[str] = None,
    order_type: Optional[str] = None,
    include: Optional[str] = None,
    custom_fields: Optional[CustomFields] = None,
    query: Annotated[Optional[str], Field(description="Raw advanced query string")] = None,
) -> Dict[str, Any]:
    """List tickets from Freshdesk with pagination support.

    While next_call is present, call again with its arguments to read the
    next page.
    """
    try:
        filters = TicketFilters(
            filter=filter, requester_id=requester_id, email=email, unique_external_id=unique_external_id,
            company_id=company_id, status=status, priority=priority, source=source, group_id=group_id,
            responder_id=responder_id, tags=tags, updated_since=updated_since, created_since=created_since,
            order_by=order_by, order_type=order_type, include=include, custom_fields=custom_fields, query=query,
        )
        page_result = await tickets.list_tickets(_get_config(), page, per_page, filters)
        arguments = to_payload(filters)
        return _paged("tickets", page_result, "list-tickets", arguments)
    except Exception as e:
        return _failure("listing tickets", e)


@mcp.tool("search-tickets")
async def search_tickets(
    query: Annotated[str, Field(description="Query language, e.g. \"priority:3 AND status:2\" including the quotes")],
    page: Annotated[Optional[int], Field(ge=1, le=10)] = None,
) -> Dict[str, Any]:
    """Search for tickets using the Freshdesk query language."""
    try:
        return _ok(await tickets.search_tickets(_get_config(), query, page))
    except Exception as e:
        return _failure("searching tickets", e)


@mcp.tool("get-ticket-conversation")
async def get_ticket_conversation(
    ticket_id: Annotated[int, Field(ge=1)],
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Conversations per page")] = 30,
) -> Dict[str, Any]:
    """Retrieve the conversations (replies and notes) of a ticket."""
    try:
        page_result = await tickets.get_ticket_conversations(_get_config(), ticket_id, page, per_page)
        return _paged("conversations", page_result, "get-ticket-conversation", {"ticket_id": ticket_id})
    except Exception as e:
        return _failure(f"fetching conversation for ticket {ticket_id}", e)


@mcp.tool("create-ticket-reply")
async def create_ticket_reply(
    ticket_id: Annotated[int, Field(ge=1)],
    body: Annotated[str, Field(description="HTML content of the reply")],
    user_id: Optional[int] = None,
    cc_emails: Optional[List[str]] = None,
    bcc_emails: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Create a reply to a ticket."""
    try:
        reply = ReplyCreate(ticket_id=ticket_id, body=body, user_id=user_id, cc_emails=cc_emails, bcc_emails=bcc_emails)
        return _ok(await tickets.create_reply(_get_config(), reply))
    except Exception as e:
        return _failure(f"creating reply for ticket {ticket_id}", e)


@mcp.tool("create-ticket-note")
async def create_ticket_note(
    ticket_id: Annotated[int, Field(ge=1)],
    body: Annotated[str, Field(description="HTML content of the note")],
    private: bool = True,
    user_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Create a note on a ticket. Notes are private unless private is false."""
    try:
        note = NoteCreate(ticket_id=ticket_id, body=body, private=private, user_id=user_id)
        return _ok(await tickets.create_note(_get_config(), note))
    except Exception as e:
        return _failure(f"creating note for ticket {ticket_id}", e)


# --- Ticket field tools ---

@mcp.tool("get-ticket-fields")
async def get_ticket_fields() -> Dict[str, Any]:
    """Retrieve all available ticket fields."""
    try:
        return _ok(await fields.list_ticket_fields(_get_config()))
    except Exception as e:
        return _failure("fetching ticket fields", e)


@mcp.tool("view-ticket-field")
async def view_ticket_field(field_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """Retrieve a ticket field by its ID."""
    try:
        return _ok(await fields.view_ticket_field(_get_config(), field_id))
    except Exception as e:
        return _failure(f"fetching ticket field {field_id}", e)


@mcp.tool("create-ticket-field")
async def create_ticket_field(
    label: str,
    type: Annotated[str, Field(description="e.g. custom_text, custom_dropdown, custom_checkbox")],
    label_for_customers: Optional[str] = None,
    description: Optional[str] = None,
    position: Optional[int] = None,
    required_for_closure: Optional[bool] = None,
    required_for_agents: Optional[bool] = None,
    customers_can_edit: Optional[bool] = None,
    required_for_customers: Optional[bool] = None,
    displayed_to_customers: Optional[bool] = None,
    choices: Annotated[Optional[List[Any]], Field(description="Required for dropdown fields")] = None,
) -> Dict[str, Any]:
    """Create a new custom ticket field."""
    try:
        field = TicketFieldCreate(
            label=label, type=type, label_for_customers=label_for_customers, description=description,
            position=position, required_for_closure=required_for_closure, required_for_agents=required_for_agents,
            customers_can_edit=customers_can_edit, required_for_customers=required_for_customers,
            displayed_to_customers=displayed_to_customers, choices=choices,
        )
        return _ok(await fields.create_ticket_field(_get_config(), field))
    except Exception as e:
        return _failure("creating ticket field", e)


@mcp.tool("update-ticket-field")
async def update_ticket_field(
    field_id: Annotated[int, Field(ge=1)],
    label: Optional[str] = None,
    label_for_customers: Optional[str] = None,
    description: Optional[str] = None,
    position: Optional[int] = None,
    required_for_closure: Optional[bool] = None,
    required_for_agents: Optional[bool] = None,
    customers_can_edit: Optional[bool] = None,
    required_for_customers: Optional[bool] = None,
    displayed_to_customers: Optional[bool] = None,
    choices: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    """Update a custom ticket field. Its name and type cannot be changed."""
    try:
        update = TicketFieldUpdate(
            field_id=field_id, label=label, label_for_customers=label_for_customers, description=description,
            position=position, required_for_closure=required_for_closure, required_for_agents=required_for_agents,
            customers_can_edit=customers_can_edit, required_for_customers=required_for_customers,
            displayed_to_customers=displayed_to_customers, choices=choices,
        )
        return _ok(await fields.update_ticket_field(_get_config(), update))
    except Exception as e:
        return _failure(f"updating ticket field {field_id}", e)


# --- Contact tools ---

@mcp.tool("list-contacts")
async def list_contacts(
    page: Annotated[int, Field(ge=1, description="Page number")] = 1,
    per_page: Annotated[int, Field(ge=1, le=100, description="Items per page")] = 30,
) -> Dict[str, Any]:
    """List contacts from Freshdesk with pagination support."""
    try:
        page_result = await contacts.list_contacts(_get_config(), page, per_page)
        return _paged("contacts", page_result, "list-contacts", {})
    except Exception as e:
        return _failure("listing contacts", e)


@mcp.tool("get-contact")
async def get_contact(contact_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """Retrieve a contact by its ID."""
    try:
        return _ok(await contacts.get_contact(_get_config(), contact_id))
    except Exception as e:
        return _failure(f"fetching contact {contact_id}", e)


@mcp.tool("create-contact")
async def create_contact(
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    mobile: Optional[str] = None,
    twitter_id: Optional[str] = None,
    unique_external_id: Optional[str] = None,
    address: Optional[str] = None,
    company_id: Optional[int] = None,
    description: Optional[str] = None,
    job_title: Optional[str] = None,
    language: Optional[str] = None,
    time_zone: Optional[str] = None,
    tags: Optional[List[str]] = None,
    other_emails: Optional[List[str]] = None,
    custom_fields: Optional[CustomFields] = None,
) -> Dict[str, Any]:
    """Create a new contact in Freshdesk."""
    try:
        contact = ContactCreate(
            name=name, email=email, phone=phone, mobile=mobile, twitter_id=twitter_id,
            unique_external_id=unique_external_id, address=address, company_id=company_id,
            description=description, job_title=job_title, language=language, time_zone=time_zone,
            tags=tags, other_emails=other_emails, custom_fields=custom_fields,
        )
        return _ok(await contacts.create_contact(_get_config(), contact))
    except Exception as e:
        return _failure("creating contact", e)


@mcp.tool("update-contact")
async def update_contact(
    contact_id: Annotated[int, Field(ge=1)],
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    mobile: Optional[str] = None,
    twitter_id: Optional[str] = None,
    address: Optional[str] = None,
    company_id: Optional[int] = None,
    description: Optional[str] = None,
    job_title: Optional[str] = None,
    language: Optional[str] = None,
    time_zone: Optional[str] = None,
    tags: Annotated[Optional[List[str]], Field(description="Replaces existing tags")] = None,
    other_emails: Annotated[Optional[List[str]], Field(description="Replaces existing alternate emails")] = None,
    custom_fields: Optional[CustomFields] = None,
) -> Dict[str, Any]:
    """Update an existing contact. At least one field besides contact_id is required."""
    try:
        update = ContactUpdate(
            contact_id=contact_id, name=name, email=email, phone=phone, mobile=mobile,
            twitter_id=twitter_id, address=address, company_id=company_id, description=description,
            job_title=job_title, language=language, time_zone=time_zone, tags=tags,
            other_emails=other_emails, custom_fields=custom_fields,
        )
        return _ok(await contacts.update_contact(_get_config(), update))
    except Exception as e:
        return _failure(f"updating contact {contact_id}", e)


@mcp.tool("search-contacts")
async def search_contacts(query: Annotated[str, Field(description="Name, email or phone fragment")]) -> Dict[str, Any]:
    """Search for contacts (autocomplete)."""
    try:
        return _ok(await contacts.search_contacts(_get_config(), query))
    except Exception as e:
        return _failure("searching contacts", e)


# --- Contact field tools ---

@mcp.tool("list-contact-fields")
async def list_contact_fields() -> Dict[str, Any]:
    """Retrieve all available contact fields."""
    try:
        return _ok(await fields.list_contact_fields(_get_config()))
    except Exception as e:
        return _failure("listing contact fields", e)


@mcp.tool("view-contact-field")
async def view_contact_field(field_id: Annotated[int, Field(ge=1)]) -> Dict[str, Any]:
    """Retrieve a contact field by its ID."""
    try:
        return _ok(await fields.view_contact_field(_get_config(), field_id))
    except Exception as e:
        return _failure(f"viewing contact field {field_id}", e)


@mcp.tool("create-contact-field")
async def create_contact_field(
    label: str,
    type: Annotated[str, Field(description="e.g. custom_text, custom_dropdown, custom_checkbox")],
    label_for_customers: Optional[str] = None,
    position: Optional[int] = None,
    required_for_agents: Optional[bool] = None,
    required_for_customers: Optional[bool] = None,
    displayed_for_customers: Optional[bool] = None,
    editable_in_signup: Optional[bool] = None,
    customers_can_edit: Optional[bool] = None,
    choices: Annotated[Optional[List[Any]], Field(description="Required for dropdown fields")] = None,
) -> Dict[str, Any]:
    """Create a new custom contact field."""
    try:
        field = ContactFieldCreate(
            label=label, type=type, label_for_customers=label_for_customers, position=position,
            required_for_agents=required_for_agents, required_for_customers=required_for_customers,
            displayed_for_customers=displayed_for_customers, editable_in_signup=editable_in_signup,
            customers_can_edit=customers_can_edit, choices=choices,
        )
        return _ok(await fields.create_contact_field(_get_config(), field))
    except Exception as e:
        return _failure("creating contact field", e)


@mcp.tool("update-contact-field")
async def update_contact_field(
    field_id: Annotated[int, Field(ge=1)],
    label: Optional[str] = None,
    label_for_customers: Optional[str] = None,
    position: Optional[int] = None,
    required_for_agents: Optional[bool] = None,
    required_for_customers: Optional[bool] = None,
    displayed_for_customers: Optional[bool] = None,
    editable_in_signup: Optional[bool] = None,
    customers_can_edit: Optional[bool] = None,
    choices: Optional[List[Any]] = None,
) -> Dict[str, Any]:
    """Update a custom contact field."""
    try:
        update = ContactFieldUpdate(
            field_id=field_id, label=label, label_for_customers=label_for_customers, position=position,
            required_for_agents=required_for_agents, required_for_customers=required_for_customers,
            displayed_for_customers=displayed_for_customers, editable_in_signup=editable_in_signup,
            customers_can_edit=customers_can_edit, choices=choices,
        )
        return _ok(await fields.update_contact_field(_get_config(), update))
    except Exception as e:
        return _failure(f"updating contact field {field_id}", e)


@mcp.tool("server-info")
async def get_server_info() -> Dict[str, Any]:
    """
    Health/version endpoint for clients and operators.
    Reports readiness and basic configuration metadata (non-secret).
    """
    try:
        domain: Optional[str] = _get_config().domain
        ready = True
    except FreshdeskError:
        domain = None
        ready = False
    return _ok({
        "name": "freshdesk-gateway",
        "version": PACKAGE_VERSION,
        "freshdesk_domain": domain,
        "ready": ready,
        "capabilities": {
            "pagination": True,
            "resources": ["freshdesk://articles", "freshdesk://article/{article_id}"],
            "retries": False,
        }
    })


def main():
    load_dotenv(find_dotenv(".env", usecwd=True))
    # Set up logging
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting Freshdesk gateway MCP server")
    try:
        _get_config()
    except Exception as e:
        logger.error(f"Configuration error: {e}")
        raise
    logger.info("Freshdesk gateway MCP server ready")
    mcp.run(transport='stdio')


if __name__ == "__main__":
    main()
