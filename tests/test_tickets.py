import json

import httpx
import pytest

from freshdesk_gateway import tickets
from freshdesk_gateway.errors import RequestValidationError
from freshdesk_gateway.models import (
    NoteCreate,
    ReplyCreate,
    TicketCreate,
    TicketFilters,
    TicketStatus,
    TicketUpdate,
)


def _sent_json(route):
    return json.loads(route.calls.last.request.content)


@pytest.mark.asyncio
async def test_create_without_requester_sends_nothing(config, respx_mock):
    ticket = TicketCreate(subject="Help", description="<p>Broken</p>")
    with pytest.raises(RequestValidationError):
        await tickets.create_ticket(config, ticket)
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_create_phone_without_name_sends_nothing(config, respx_mock):
    ticket = TicketCreate(subject="Help", description="Broken", phone="+15550100")
    with pytest.raises(RequestValidationError):
        await tickets.create_ticket(config, ticket)
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_create_with_email(config, route):
    create = route("POST", "/tickets").mock(return_value=httpx.Response(201, json={"id": 42, "subject": "Help"}))

    ticket = TicketCreate(
        subject="Help",
        description="<p>Broken</p>",
        email="jane@example.com",
        custom_fields={"cf_order_id": "123", "cf_cleared": None},
    )
    created = await tickets.create_ticket(config, ticket)

    assert created["id"] == 42
    assert _sent_json(create) == {
        "subject": "Help",
        "description": "<p>Broken</p>",
        "status": 2,
        "priority": 1,
        "source": 2,
        "email": "jane@example.com",
        "custom_fields": {"cf_order_id": "123", "cf_cleared": None},
    }


@pytest.mark.asyncio
async def test_update_without_changes_sends_nothing(config, respx_mock):
    with pytest.raises(RequestValidationError):
        await tickets.update_ticket(config, TicketUpdate(ticket_id=5))
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_update_with_empty_custom_fields_sends_nothing(config, respx_mock):
    with pytest.raises(RequestValidationError):
        await tickets.update_ticket(config, TicketUpdate(ticket_id=5, custom_fields={}))
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_update_body_leaves_out_ticket_id(config, route):
    update = route("PUT", "/tickets/5").mock(return_value=httpx.Response(200, json={"id": 5, "status": 4}))

    await tickets.update_ticket(config, TicketUpdate(ticket_id=5, status=TicketStatus.RESOLVED))

    assert _sent_json(update) == {"status": 4}


@pytest.mark.asyncio
async def test_delete_returns_empty_record(config, route):
    route("DELETE", "/tickets/5").mock(return_value=httpx.Response(204))
    assert await tickets.delete_ticket(config, 5) == {}


@pytest.mark.asyncio
async def test_list_clamps_and_reads_cursor(config, route):
    listing = route("GET", "/tickets").mock(
        return_value=httpx.Response(
            200,
            json=[{"id": 1}],
            headers={"Link": '<https://example.freshdesk.com/api/v2/tickets?page=2&per_page=100>; rel="next"'},
        )
    )

    page = await tickets.list_tickets(config, page=0, per_page=500)

    params = listing.calls.last.request.url.params
    assert params["page"] == "1"
    assert params["per_page"] == "100"
    assert page.items == [{"id": 1}]
    assert page.pagination.current_page == 1
    assert page.pagination.per_page == 100
    assert page.pagination.next_page == 2
    assert page.pagination.prev_page is None


@pytest.mark.asyncio
async def test_list_sends_one_parameter_per_filter(config, route):
    listing = route("GET", "/tickets").mock(return_value=httpx.Response(200, json=[]))

    filters = TicketFilters(
        status=TicketStatus.PENDING,
        requester_id=7,
        tags=["vip", "billing"],
        custom_fields={"cf_region": "emea", "cf_escalated": True},
    )
    page = await tickets.list_tickets(config, filters=filters)

    params = listing.calls.last.request.url.params
    assert params["status"] == "3"
    assert params["requester_id"] == "7"
    assert params["tag"] == "vip,billing"
    assert params["cf_region"] == "emea"
    assert params["cf_escalated"] == "true"
    assert params["per_page"] == "30"
    assert page.pagination.next_page is None


def test_filters_to_params_without_filters():
    assert tickets.filters_to_params(None) == {}
    assert tickets.filters_to_params(TicketFilters()) == {}


@pytest.mark.asyncio
async def test_search_forwards_query_unchanged(config, route):
    search = route("GET", "/search/tickets").mock(return_value=httpx.Response(200, json={"results": [], "total": 0}))

    await tickets.search_tickets(config, '"priority:3 AND status:2"', page=2)

    params = search.calls.last.request.url.params
    assert params["query"] == '"priority:3 AND status:2"'
    assert params["page"] == "2"


@pytest.mark.asyncio
async def test_conversations_page(config, route):
    route("GET", "/tickets/9/conversations").mock(
        return_value=httpx.Response(
            200,
            json=[{"id": 1, "body_text": "hi"}],
            headers={"Link": '<https://example.freshdesk.com/api/v2/tickets/9/conversations?page=1>; rel="prev"'},
        )
    )

    page = await tickets.get_ticket_conversations(config, 9, page=2, per_page=1)

    assert page.pagination.prev_page == 1
    assert page.pagination.next_page is None


@pytest.mark.asyncio
async def test_reply(config, route):
    reply = route("POST", "/tickets/9/reply").mock(return_value=httpx.Response(201, json={"id": 77}))

    await tickets.create_reply(config, ReplyCreate(ticket_id=9, body="<p>Fixed</p>", cc_emails=["a@example.com"]))

    assert _sent_json(reply) == {"body": "<p>Fixed</p>", "cc_emails": ["a@example.com"]}


@pytest.mark.asyncio
async def test_note_is_private_by_default(config, route):
    note = route("POST", "/tickets/9/notes").mock(return_value=httpx.Response(201, json={"id": 78, "private": True}))

    await tickets.create_note(config, NoteCreate(ticket_id=9, body="internal"))

    assert _sent_json(note) == {"body": "internal", "private": True}
