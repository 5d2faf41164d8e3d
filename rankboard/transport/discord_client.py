"""
Discord transport.

Reads update commands from channel history with a bot account and keeps
the leaderboard in a webhook-owned message that is edited in place.

Every Discord or network failure surfaces as TransportError so that one
game's failure stays confined to that game's cycle.
"""

import asyncio

import aiohttp
import discord

from rankboard.config import (
    DISCORD_HISTORY_LIMIT,
    DISCORD_RATE_LIMIT_DELAY,
    WEBHOOK_USERNAME,
)
from rankboard.exceptions import TransportError
from rankboard.models import ChannelMessage
from rankboard.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

# Leaderboard lines mention users; never ping roles or @everyone
ALLOWED_MENTIONS = discord.AllowedMentions(everyone=False, roles=False, users=True)

# Failures of a REST call that are not handled more specifically
NETWORK_ERRORS = (discord.HTTPException, aiohttp.ClientError, asyncio.TimeoutError)


class DiscordTransport:
    """REST-only Discord client for one sync run."""

    def __init__(self, token: str, rate_limit_delay: int = DISCORD_RATE_LIMIT_DELAY):
        self.token = token
        self.rate_limit_delay = rate_limit_delay  # ms before each webhook write
        self.client: discord.Client | None = None
        self.session: aiohttp.ClientSession | None = None
        self.webhooks: dict[str, discord.Webhook] = {}

    async def connect(self) -> "DiscordTransport":
        intents = discord.Intents.default()
        intents.message_content = True
        self.client = discord.Client(intents=intents)
        try:
            await self.client.login(self.token)
        except discord.LoginFailure as e:
            raise TransportError(f"Discord login failed: {e}") from e
        except NETWORK_ERRORS as e:
            raise TransportError(f"Could not reach Discord: {e}") from e

        self.session = aiohttp.ClientSession()
        logger.info(f"Discord bot connected as {self.client.user}")
        return self

    async def fetch_messages(
        self,
        channel_id: str,
        after: str | None = None,
        limit: int = DISCORD_HISTORY_LIMIT,
    ) -> list[ChannelMessage]:
        """
        Fetch messages newer than `after`, oldest first.

        Raises:
            TransportError: If the channel is missing, not readable or
                Discord cannot be reached
        """
        try:
            channel = await self.client.fetch_channel(int(channel_id))
        except discord.Forbidden as e:
            raise TransportError(f"Missing access to channel {channel_id}") from e
        except discord.NotFound as e:
            raise TransportError(f"Channel {channel_id} not found") from e
        except NETWORK_ERRORS as e:
            raise TransportError(f"Failed to fetch channel {channel_id}: {e}") from e

        if not isinstance(channel, discord.abc.Messageable):
            raise TransportError(f"Channel {channel_id} is not a text channel")

        options = {'limit': min(limit, DISCORD_HISTORY_LIMIT)}
        if after:
            options['after'] = discord.Object(id=int(after))
            options['oldest_first'] = True
        else:
            options['oldest_first'] = False

        try:
            history = [message async for message in channel.history(**options)]
        except discord.Forbidden as e:
            raise TransportError(f"Missing access to channel {channel_id}") from e
        except NETWORK_ERRORS as e:
            raise TransportError(f"Failed to read history of channel {channel_id}: {e}") from e

        history.sort(key=lambda m: m.created_at)
        logger.info(f"Fetched {len(history)} messages from channel {channel_id}")

        return [
            ChannelMessage(id=str(m.id), content=m.content, created_at=m.created_at)
            for m in history
        ]

    def get_webhook(self, webhook_url: str) -> discord.Webhook:
        if webhook_url not in self.webhooks:
            try:
                self.webhooks[webhook_url] = discord.Webhook.from_url(webhook_url, session=self.session)
            except ValueError as e:
                raise TransportError(f"Invalid webhook URL format: {webhook_url}") from e
        return self.webhooks[webhook_url]

    async def fetch_snapshot(self, webhook_url: str, message_id: str | None) -> str | None:
        """Return the content of the leaderboard message, or None if it is gone."""
        if not message_id:
            return None

        webhook = self.get_webhook(webhook_url)
        try:
            message = await webhook.fetch_message(int(message_id))
        except discord.NotFound:
            logger.warning(f"Message {message_id} not found")
            return None
        except NETWORK_ERRORS as e:
            raise TransportError(f"Failed to fetch leaderboard message {message_id}: {e}") from e
        return message.content

    async def _edit(self, webhook_url: str, message_id: str, content: str) -> bool:
        await asyncio.sleep(self.rate_limit_delay / 1000)
        webhook = self.get_webhook(webhook_url)
        try:
            await webhook.edit_message(int(message_id), content=content, allowed_mentions=ALLOWED_MENTIONS)
        except discord.NotFound:
            logger.warning(f"Message {message_id} not found, will create new")
            return False
        except NETWORK_ERRORS as e:
            raise TransportError(f"Failed to edit leaderboard message {message_id}: {e}") from e
        logger.info(f"Updated leaderboard message: {message_id}")
        return True

    async def _send(self, webhook_url: str, content: str) -> str:
        await asyncio.sleep(self.rate_limit_delay / 1000)
        webhook = self.get_webhook(webhook_url)
        try:
            message = await webhook.send(
                content=content,
                username=WEBHOOK_USERNAME,
                allowed_mentions=ALLOWED_MENTIONS,
                wait=True,
            )
        except discord.NotFound as e:
            raise TransportError("Webhook not found or deleted") from e
        except NETWORK_ERRORS as e:
            raise TransportError(f"Failed to send leaderboard message: {e}") from e
        logger.info(f"Sent new leaderboard message: {message.id}")
        return str(message.id)

    async def publish(self, webhook_url: str, message_id: str | None, content: str) -> tuple[str, str]:
        """Edit the leaderboard message, or send a new one if it is gone."""
        if message_id and await self._edit(webhook_url, message_id, content):
            return message_id, "updated"
        return await self._send(webhook_url, content), "created"

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            logger.info("Discord client disconnected")
        if self.session is not None:
            await self.session.close()
        self.webhooks.clear()
