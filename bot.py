"""Household Assistant - Main Bot.

A Discord bot for shared household lists and reminders.
Routes commands to list handlers and keeps one pinned message per list.
"""

import time

import discord
from discord.ext import commands
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from chat_client import ChatClient, InboundMessage, InteractionEvent
from config import DISCORD_TOKEN, ASSISTANT_CHANNEL_IDS
from domains.reminders.config import LOCAL_TZ
from logger import logger
from router import CommandRouter
from state import AssistantState
from utils import sanitize_for_log

# Initialize bot
intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix="/", intents=intents)

chat = ChatClient(bot)
state = AssistantState(chat, tz=LOCAL_TZ)
router = CommandRouter(state)

# Initialize scheduler
scheduler = AsyncIOScheduler(timezone=LOCAL_TZ)

# Message deduplication: track recently processed message IDs
_processed_messages: dict[int, float] = {}  # message_id -> timestamp
MESSAGE_DEDUP_SECONDS = 5


@bot.event
async def on_ready():
    """Called when bot is connected and ready."""
    logger.info(f"Logged in as {bot.user}")

    # on_ready fires again after a reconnect
    if scheduler.running:
        return

    state.scheduler.register(scheduler)
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")
    logger.info(f"Bot ready - {len(state.lists.all_lists())} lists registered")

    if ASSISTANT_CHANNEL_IDS:
        for channel_id in ASSISTANT_CHANNEL_IDS:
            name = await chat.lookup_channel_name(channel_id)
            if name:
                logger.info(f"Listening in #{name} ({channel_id})")
            else:
                logger.warning(f"Configured channel {channel_id} not found")
    else:
        logger.info("Listening in all channels")


def _is_duplicate(message_id: int) -> bool:
    """Check and record a message ID, pruning stale entries."""
    now = time.time()
    if message_id in _processed_messages:
        return True
    _processed_messages[message_id] = now
    cutoff = now - MESSAGE_DEDUP_SECONDS * 2
    keys_to_delete = [k for k, v in _processed_messages.items() if v < cutoff]
    for k in keys_to_delete:
        del _processed_messages[k]
    return False


@bot.event
async def on_message(message):
    """Handle incoming messages."""
    # Ignore bot messages
    if message.author.bot:
        return

    if ASSISTANT_CHANNEL_IDS and message.channel.id not in ASSISTANT_CHANNEL_IDS:
        return

    if _is_duplicate(message.id):
        logger.debug(f"Skipping duplicate message {message.id}")
        return

    event = InboundMessage.from_discord(message)
    result = await router.handle_message(event)
    if result is None:
        logger.debug(f"No command in message from {event.user_display_name}: {sanitize_for_log(event.text)}")


@bot.event
async def on_interaction(interaction: discord.Interaction):
    """Handle button presses on reminder prompts and confirmations."""
    if interaction.type != discord.InteractionType.component:
        return

    event = InteractionEvent.from_discord(interaction)
    if event is None:
        return

    # Acknowledge within Discord's 3s window; a due-check tick may hold the store lock
    try:
        await interaction.response.defer()
    except discord.HTTPException as e:
        logger.error(f"Failed to acknowledge button {event.action_id}: {e}")
        return

    result = await router.handle_interaction(event)
    if result is None:
        logger.warning(f"Unknown button action: {event.action_id}")
        return

    try:
        if result.replace_prompt:
            # Swap the prompt for the outcome and drop its buttons
            await interaction.edit_original_response(content=result.reply, embed=None, view=None)
        elif result.reply:
            await interaction.followup.send(result.reply, ephemeral=True)
    except discord.HTTPException as e:
        logger.error(f"Failed to answer button {event.action_id}: {e}")

    await router.refresh_after(result, event)


@bot.event
async def on_error(event, *args, **kwargs):
    """Handle errors."""
    logger.error(f"Bot error in {event}: {args}")


def main():
    """Entry point."""
    if not DISCORD_TOKEN:
        logger.error("DISCORD_TOKEN not set")
        return

    logger.info("Starting Household Assistant...")
    bot.run(DISCORD_TOKEN)


if __name__ == "__main__":
    main()
