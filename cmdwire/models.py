"""Pydantic models for events exchanged with the messaging gateway."""

from pydantic import BaseModel, ConfigDict, Field


class BotIdentity(BaseModel):
    """The bot's own account on the chat service."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, description="Stable account id")
    username: str = Field(..., min_length=1, description="Display name")

    def mentions(self, formats) -> list[str]:
        """Expand mention format strings for this identity.

        Args:
            formats: Strings with ``{user_id}`` / ``{username}`` fields,
                e.g. ``"<@{user_id}>"``.
        """
        return [fmt.format(user_id=self.user_id, username=self.username) for fmt in formats]


class Ready(BaseModel):
    """Gateway signal that the bot's identity is known."""

    model_config = ConfigDict(frozen=True)

    identity: BotIdentity


class MessageReceived(BaseModel):
    """An inbound chat message. Never modified after delivery."""

    model_config = ConfigDict(frozen=True)

    sender_id: str = Field(..., description="Account id of the author")
    channel_id: str = Field(..., description="Where replies are sent")
    text: str = Field(default="", description="Raw message text")
