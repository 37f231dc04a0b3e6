from typing import Any, Dict, List, Optional

from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import RequestValidationError
from freshdesk_gateway.models import ContactCreate, ContactUpdate, Page, to_payload
from freshdesk_gateway.pagination import fetch_page
from freshdesk_gateway.transport import request

CONTACT_IDENTIFIERS = ("email", "phone", "mobile", "twitter_id", "unique_external_id")


async def list_contacts(
    config: FreshdeskConfig,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Page:
    return await fetch_page(config, "/contacts", page, per_page)


async def get_contact(config: FreshdeskConfig, contact_id: int) -> Dict[str, Any]:
    return await request(config, f"/contacts/{contact_id}")


async def create_contact(config: FreshdeskConfig, contact: ContactCreate) -> Dict[str, Any]:
    if not any(getattr(contact, name) for name in CONTACT_IDENTIFIERS):
        raise RequestValidationError(
            "At least one contact identifier must be provided: " + ", ".join(CONTACT_IDENTIFIERS)
        )
    return await request(config, "/contacts", "POST", json=to_payload(contact))


async def update_contact(config: FreshdeskConfig, update: ContactUpdate) -> Dict[str, Any]:
    """Update a contact.

    tags and other_emails replace the stored lists; they are not merged.
    """
    changes = to_payload(update, exclude=("contact_id",))
    if not changes:
        raise RequestValidationError("At least one field must be provided to update the contact")
    return await request(config, f"/contacts/{update.contact_id}", "PUT", json=changes)


async def search_contacts(config: FreshdeskConfig, term: str) -> List[Dict[str, Any]]:
    """Autocomplete lookup; the remote returns id, name, email, phone and mobile only."""
    return await request(config, "/contacts/autocomplete", params={"term": term})
