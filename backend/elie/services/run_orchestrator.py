"""
Run orchestrator: one outgoing user message to one assistant reply.

Workflow per send, strictly sequential:
    create thread -> [custom prompt] -> user message -> start run
    -> poll until completed -> list messages -> persist reply

A brand-new remote thread is created for every message. The user's
message is persisted as soon as the remote thread accepted it and is
never rolled back; any later failure abandons the rest of the workflow.
Cancelling the calling task stops the workflow at its next await, so no
store write happens after cancellation.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional

from ..config import settings
from ..errors import (
    MissingAssistantBinding,
    MissingConfiguration,
    Offline,
    RunFailed,
    RunTimeout,
)
from ..models import Message, SENDER_BOT, SENDER_USER
from ..schemas.assistant import ROLE_ASSISTANT, Run, ThreadMessage
from ..utils.clock import now_ms
from .assistant_client import AssistantApiError, AssistantClient
from .connectivity import is_network_available
from .store import ApiConfigSnapshot, ConversationStore


logger = logging.getLogger(__name__)

NO_REPLY_TEXT = "No assistant response found."
CONFIGURATION_PROMPT_TEXT = (
    "Configuration missing! Please set your Assistant ID and Vector Store ID in Settings."
)


@dataclass
class SendResult:
    """Messages persisted by a completed send."""
    user_message: Message
    bot_message: Message


def select_reply(messages: Iterable[ThreadMessage]) -> Optional[ThreadMessage]:
    """The newest assistant-authored message; on equal timestamps the last one seen wins."""
    reply = None
    for message in messages:
        if message.role.lower() != ROLE_ASSISTANT:
            continue
        if reply is None or message.created_at >= reply.created_at:
            reply = message
    return reply


def response_latency(bot_timestamp: int, transcript: List[Message]) -> Optional[int]:
    """Whole seconds since the last user message in ``transcript``, or None without one."""
    for message in reversed(transcript):
        if message.sender == SENDER_USER:
            return (bot_timestamp - message.timestamp) // 1000
    return None


class RunOrchestrator:
    """Drives the thread/run workflow and writes its results to the store."""

    def __init__(
        self,
        client: AssistantClient,
        store: ConversationStore,
        is_online: Callable[[], Awaitable[bool]] = is_network_available,
        poll_interval: Optional[float] = None,
        poll_timeout: Optional[float] = None,
        clock: Callable[[], int] = now_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.client = client
        self.store = store
        self.is_online = is_online
        self.poll_interval = poll_interval if poll_interval is not None else settings.RUN_POLL_INTERVAL
        self.poll_timeout = poll_timeout if poll_timeout is not None else settings.RUN_POLL_TIMEOUT
        self.clock = clock
        self.sleep = sleep

    async def check_preconditions(self, conversation_id: int) -> ApiConfigSnapshot:
        """Fail before any remote call when offline or unconfigured."""
        if not await self.is_online():
            raise Offline()

        config = await self.store.get_config()
        if config is None or not config.has_api_key:
            raise MissingConfiguration()

        if not config.has_assistant_binding:
            notice = await self.store.insert_message(
                conversation_id,
                SENDER_BOT,
                CONFIGURATION_PROMPT_TEXT,
                timestamp=self.clock()
            )
            logger.info("Conversation %s: assistant or vector store id missing", conversation_id)
            raise MissingAssistantBinding(message=notice)

        return config

    async def send_message(self, conversation_id: int, text: str) -> SendResult:
        """Send ``text`` through a fresh remote thread and persist both sides."""
        config = await self.check_preconditions(conversation_id)
        api_key = config.api_key

        transcript = await self.store.get_messages(conversation_id)

        try:
            thread = await self.client.create_thread(api_key)
            logger.info("Created thread %s", thread.id)

            if config.custom_prompt and config.custom_prompt.strip():
                await self._send_custom_prompt(api_key, thread.id, config.custom_prompt)

            remote_message = await self.client.add_message(api_key, thread.id, text)
            logger.debug("Added user message %s to thread %s", remote_message.id, thread.id)
        except AssistantApiError as e:
            logger.error("Could not hand the message to the assistant: %s", e)
            raise RunFailed() from e

        user_message = await self.store.insert_message(
            conversation_id, SENDER_USER, text, timestamp=self.clock()
        )
        transcript.append(user_message)

        try:
            run = await self.client.create_run(api_key, thread.id, config.assistant_id)
            logger.info("Started run %s on thread %s", run.id, thread.id)

            await self._wait_for_completion(api_key, thread.id, run)

            thread_messages = await self.client.list_messages(api_key, thread.id)
        except AssistantApiError as e:
            logger.error("Run on thread %s failed: %s", thread.id, e)
            raise RunFailed() from e

        reply = select_reply(thread_messages)
        reply_text = reply.text() if reply is not None else NO_REPLY_TEXT

        bot_timestamp = self.clock()
        bot_message = await self.store.insert_message(
            conversation_id,
            SENDER_BOT,
            reply_text,
            timestamp=bot_timestamp,
            response_time=response_latency(bot_timestamp, transcript)
        )
        logger.info(
            "Conversation %s: reply stored after %ss", conversation_id, bot_message.response_time
        )

        return SendResult(user_message=user_message, bot_message=bot_message)

    async def _send_custom_prompt(self, api_key: str, thread_id: str, prompt: str) -> None:
        # Best effort: the user's own message still goes out without it
        try:
            await self.client.add_message(api_key, thread_id, prompt)
            logger.debug("Added custom prompt to thread %s", thread_id)
        except AssistantApiError as e:
            logger.warning("Custom prompt not sent to thread %s: %s", thread_id, e)

    async def _wait_for_completion(self, api_key: str, thread_id: str, run: Run) -> Run:
        polling = self._poll_until_completed(api_key, thread_id, run.id)
        if self.poll_timeout is None:
            return await polling

        try:
            return await asyncio.wait_for(polling, self.poll_timeout)
        except asyncio.TimeoutError as e:
            logger.error("Run %s not completed after %ss", run.id, self.poll_timeout)
            raise RunTimeout() from e

    async def _poll_until_completed(self, api_key: str, thread_id: str, run_id: str) -> Run:
        while True:
            await self.sleep(self.poll_interval)
            run = await self.client.get_run(api_key, thread_id, run_id)
            logger.debug("Run %s status: %s", run_id, run.status)
            if run.is_completed:
                return run
