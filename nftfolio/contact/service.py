"""
Contact form.

The backend answers 200 with `{"success": false, "message": ...}` when it
could not deliver the message; that is a failure too.
"""

from __future__ import annotations

from typing import Any

from pydantic import EmailStr, Field, field_validator

from nftfolio.core.cache import QueryCache
from nftfolio.core.http import ApiError, ApiClient
from nftfolio.core.mutation import Mutation
from nftfolio.core.notifications import Notifier
from nftfolio.core.schemas import WireModel


class ContactDeliveryError(ApiError):
    pass


class ContactForm(WireModel):
    name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    message: str = Field(..., min_length=10, max_length=10_000)

    @field_validator("name", "message", mode="before")
    @classmethod
    def _strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class ContactService:
    def __init__(self, *, client: ApiClient, cache: QueryCache, notifier: Notifier) -> None:
        self._client = client
        self.send_mutation: Mutation[dict] = Mutation(
            self._post,
            cache=cache,
            notifier=notifier,
            name="send_contact_message",
            success_title="Message sent!",
            error_title="Failed to send message",
        )

    async def _post(self, form: ContactForm) -> dict:
        result: Any = await self._client.send_json("POST", "/api/contact", form.to_wire())
        if not isinstance(result, dict) or not result.get("success"):
            message = result.get("message") if isinstance(result, dict) else None
            raise ContactDeliveryError(message or "Failed to send message")
        return result

    async def send(self, form: ContactForm) -> dict:
        return await self.send_mutation.run(form)
