"""Thin adapter over the Discord client.

The rest of the assistant talks to the chat platform only through
``ChatClient`` and the two normalised event types below, so list and
reminder logic never touches discord.py objects directly.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import discord

from logger import logger

# Plain text or an embed dict (see discord.Embed.from_dict)
Content = Union[str, dict]

_MENTION = re.compile(r'^<@!?(\d+)>$')


class MessageNotFound(Exception):
    """The message being edited/pinned no longer exists."""


@dataclass
class InboundMessage:
    """A chat message as seen by the command router."""
    channel_id: int
    channel_name: str
    user_id: int
    user_display_name: str
    text: str
    is_bot: bool = False
    message_id: Optional[int] = None
    mentions: dict[int, str] = field(default_factory=dict)  # user_id → display name

    @classmethod
    def from_discord(cls, message: discord.Message) -> "InboundMessage":
        return cls(
            channel_id=message.channel.id,
            channel_name=getattr(message.channel, "name", "") or "",
            user_id=message.author.id,
            user_display_name=message.author.display_name,
            text=message.content or "",
            is_bot=message.author.bot,
            message_id=message.id,
            mentions={user.id: user.display_name for user in message.mentions},
        )


@dataclass
class InteractionEvent:
    """A button press. Buttons carry ``<action_id>:<value>`` as custom_id."""
    action_id: str
    value: str
    user_id: int
    user_display_name: str
    channel_id: Optional[int]
    message_id: Optional[int]

    @classmethod
    def from_discord(cls, interaction: discord.Interaction) -> Optional["InteractionEvent"]:
        custom_id = (interaction.data or {}).get("custom_id", "")
        action_id, sep, value = custom_id.partition(":")
        if not sep:
            return None
        return cls(
            action_id=action_id,
            value=value,
            user_id=interaction.user.id,
            user_display_name=interaction.user.display_name,
            channel_id=interaction.channel_id,
            message_id=interaction.message.id if interaction.message else None,
        )


def parse_mention(text: str) -> Optional[int]:
    """User ID from a ``<@123>`` mention, else None."""
    match = _MENTION.match(text.strip())
    return int(match.group(1)) if match else None


def build_view(buttons: Sequence) -> discord.ui.View:
    """Build a non-expiring view from ButtonSpec-like objects."""
    view = discord.ui.View(timeout=None)
    for spec in buttons:
        view.add_item(discord.ui.Button(
            label=spec.label,
            style=getattr(discord.ButtonStyle, spec.style, discord.ButtonStyle.secondary),
            custom_id=spec.custom_id,
        ))
    return view


def _message_kwargs(content: Content) -> dict:
    if isinstance(content, dict):
        return {"content": None, "embed": discord.Embed.from_dict(content)}
    return {"content": content, "embed": None}


class ChatClient:
    """Outbound chat operations used by the assistant."""

    def __init__(self, bot: discord.Client):
        self.bot = bot

    async def _channel(self, channel_id: int):
        channel = self.bot.get_channel(channel_id)
        if not channel:
            channel = await self.bot.fetch_channel(channel_id)
        return channel

    async def post_message(self, channel_id: int, content: Content, buttons: Sequence = ()) -> int:
        """Send a message and return its ID."""
        channel = await self._channel(channel_id)
        kwargs = _message_kwargs(content)
        if kwargs["embed"] is None:
            del kwargs["embed"]
        if buttons:
            kwargs["view"] = build_view(buttons)
        message = await channel.send(**kwargs)
        return message.id

    async def update_message(self, channel_id: int, message_id: int, content: Content) -> None:
        """Edit a message in place.

        Raises:
            MessageNotFound: If the message was deleted
        """
        channel = await self._channel(channel_id)
        try:
            await channel.get_partial_message(message_id).edit(**_message_kwargs(content))
        except discord.NotFound as e:
            raise MessageNotFound(f"Message {message_id} not found in {channel_id}") from e

    async def delete_message(self, channel_id: int, message_id: int) -> None:
        channel = await self._channel(channel_id)
        try:
            await channel.get_partial_message(message_id).delete()
        except discord.NotFound:
            logger.debug(f"Message {message_id} already deleted")

    async def pin_message(self, channel_id: int, message_id: int) -> None:
        channel = await self._channel(channel_id)
        try:
            await channel.get_partial_message(message_id).pin()
        except discord.NotFound as e:
            raise MessageNotFound(f"Message {message_id} not found in {channel_id}") from e

    async def lookup_channel_name(self, channel_id: int) -> Optional[str]:
        try:
            channel = await self._channel(channel_id)
        except discord.HTTPException as e:
            logger.warning(f"Channel lookup failed for {channel_id}: {e}")
            return None
        return getattr(channel, "name", None)

    async def lookup_user_display_name(self, user_id: int) -> Optional[str]:
        user = self.bot.get_user(user_id)
        if not user:
            try:
                user = await self.bot.fetch_user(user_id)
            except discord.HTTPException as e:
                logger.warning(f"User lookup failed for {user_id}: {e}")
                return None
        return user.display_name
