import json

import httpx
import pytest

from freshdesk_gateway import fields
from freshdesk_gateway.errors import RequestValidationError
from freshdesk_gateway.models import (
    ContactFieldCreate,
    ContactFieldUpdate,
    TicketFieldCreate,
    TicketFieldUpdate,
)


@pytest.mark.parametrize("field_type", ["custom_dropdown", "nested_field", "default_dropdown"])
def test_dropdown_types(field_type):
    assert fields.is_dropdown_type(field_type)


def test_text_is_not_a_dropdown():
    assert not fields.is_dropdown_type("custom_text")


@pytest.mark.asyncio
async def test_dropdown_without_choices_sends_nothing(config, respx_mock):
    with pytest.raises(RequestValidationError):
        await fields.create_ticket_field(config, TicketFieldCreate(label="Region", type="custom_dropdown"))
    with pytest.raises(RequestValidationError):
        await fields.create_contact_field(config, ContactFieldCreate(label="Tier", type="custom_dropdown", choices=[]))
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_create_ticket_field_is_wrapped(config, route):
    create = route("POST", "/admin/ticket_fields").mock(return_value=httpx.Response(201, json={"id": 3}))

    field = TicketFieldCreate(label="Region", type="custom_dropdown", choices=["EMEA", "APAC"], displayed_to_customers=True)
    await fields.create_ticket_field(config, field)

    assert json.loads(create.calls.last.request.content) == {
        "ticket_field": {
            "label": "Region",
            "type": "custom_dropdown",
            "choices": ["EMEA", "APAC"],
            "displayed_to_customers": True,
        }
    }


@pytest.mark.asyncio
async def test_update_ticket_field_without_changes_sends_nothing(config, respx_mock):
    with pytest.raises(RequestValidationError):
        await fields.update_ticket_field(config, TicketFieldUpdate(field_id=3))
    assert len(respx_mock.calls) == 0


@pytest.mark.asyncio
async def test_update_contact_field_is_wrapped(config, route):
    update = route("PUT", "/contact_fields/8").mock(return_value=httpx.Response(200, json={"id": 8}))

    await fields.update_contact_field(config, ContactFieldUpdate(field_id=8, label="Customer tier", editable_in_signup=False))

    assert json.loads(update.calls.last.request.content) == {
        "contact_field": {"label": "Customer tier", "editable_in_signup": False}
    }


@pytest.mark.asyncio
async def test_listing_and_viewing(config, route):
    route("GET", "/ticket_fields").mock(return_value=httpx.Response(200, json=[{"name": "status"}]))
    route("GET", "/admin/ticket_fields/3").mock(return_value=httpx.Response(200, json={"id": 3}))
    route("GET", "/contact_fields").mock(return_value=httpx.Response(200, json=[{"name": "email"}]))
    route("GET", "/contact_fields/8").mock(return_value=httpx.Response(200, json={"id": 8}))

    assert await fields.list_ticket_fields(config) == [{"name": "status"}]
    assert await fields.view_ticket_field(config, 3) == {"id": 3}
    assert await fields.list_contact_fields(config) == [{"name": "email"}]
    assert await fields.view_contact_field(config, 8) == {"id": 8}
