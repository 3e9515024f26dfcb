"""Client-side state of the chat view and the sending of messages."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from .models import ModelConfig, load_models
from .render import filter_conversations
from .server import (
    Attachment,
    ChatMessage,
    ChatServer,
    MessageSender,
    ServerError,
    generate_image,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

GENERATED_IMAGE_NAME = "generated_image.png"
GENERATED_IMAGE_TYPE = "image/png"


def _load_catalogue() -> list[ModelConfig]:
    try:
        return load_models()
    except (OSError, ValueError):
        log.error("Failed to load models, using default")
        return [ModelConfig()]


async def _or_default(call: Awaitable[T], default: T) -> T:
    try:
        return await call
    except ServerError:
        return default


class ChatSession:
    """Conversations, messages and options of one user talking to a server."""

    def __init__(
        self,
        server: ChatServer,
        *,
        models: Optional[Sequence[ModelConfig]] = None,
        model: Optional[ModelConfig] = None,
        api_key: str = "",
        conv_id: Optional[int] = None,
        speak: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.server = server
        self.models = list(models) if models is not None else _load_catalogue()
        self.model: Optional[ModelConfig] = model if model is not None else ModelConfig()
        self.api_key = api_key
        self.requested_id = conv_id
        self.current: Optional[int] = conv_id
        self.conversations: list[int] = []
        self.messages: list[ChatMessage] = []
        self.attachment: Optional[Attachment] = None
        self.search = ""
        self.use_web_search = False
        self.use_image_gen = False
        self._speak = speak
        self._spoken = 0

    @property
    def visible_conversations(self) -> list[int]:
        """Conversation ids matching the search box."""
        return filter_conversations(self.conversations, self.search)

    def _announce(self) -> None:
        if len(self.messages) > self._spoken:
            last = self.messages[-1]
            if self._speak is not None and last.text is not None:
                self._speak(last.text)
            self._spoken = len(self.messages)

    async def _reload(self) -> None:
        if self.current is None:
            self.messages = []
        else:
            self.messages = await _or_default(self.server.get_messages(self.current), [])
        self._announce()

    async def start(self) -> None:
        """Fetch conversations, pick the current one and load its messages."""
        self.conversations = await _or_default(self.server.list_conversations(), [])
        if self.requested_id is not None:
            self.current = self.requested_id
        elif self.conversations:
            self.current = self.conversations[0]
        else:
            try:
                self.current = await self.server.create_conversation()
            except ServerError:
                self.current = None
        await self._reload()

    async def new_conversation(self) -> Optional[int]:
        """Create a conversation on the server and switch to it."""
        try:
            conv_id = await self.server.create_conversation()
        except ServerError:
            return None
        self.conversations.append(conv_id)
        await self.select(conv_id)
        return conv_id

    async def select(self, conv_id: int) -> None:
        """Switch to a conversation and load its messages."""
        self.current = conv_id
        await self._reload()

    def attach(self, attachment: Optional[Attachment]) -> None:
        """Set the file to send with the next message."""
        self.attachment = attachment

    def append_chunk(self, chunk: str) -> None:
        """Add streamed text to the AI message being written, or start one."""
        if self.messages and self.messages[-1].sender is MessageSender.AI:
            last = self.messages[-1]
            last.text = chunk if last.text is None else last.text + chunk
            return
        self.messages.append(ChatMessage(MessageSender.AI, text=chunk))
        self._announce()

    async def send(self, text: str) -> None:
        """Send the user's text, then ask for and store the AI reply."""
        text = text.strip()
        if not text:
            return
        conv_id = self.current
        attachment = self.attachment
        want_image = self.use_image_gen
        self.attachment = None
        self.use_web_search = False
        self.use_image_gen = False

        self.messages.append(ChatMessage(MessageSender.USER, text=text))
        self._announce()
        if conv_id is None:
            return

        user_message = ChatMessage(MessageSender.USER, text=text, attachment=attachment)
        try:
            await self.server.send_message(conv_id, user_message)
        except ServerError as exc:
            log.error("Failed to send user message: %s", exc)
            return
        await self._refresh(conv_id)

        model = self.model
        if model is None:
            log.error("No model selected")
            return

        if model.capabilities.image_generation and want_image:
            reply = ChatMessage(
                MessageSender.AI,
                text=f"Generated image for: {text}",
                attachment=Attachment(
                    GENERATED_IMAGE_NAME, GENERATED_IMAGE_TYPE, generate_image(text)
                ),
            )
            await self._store_reply(conv_id, reply, "generated image")
        else:
            try:
                answer = await self.server.chat_completion(self.api_key, text, model)
            except ServerError as exc:
                log.error("Chat completion failed: %s", exc)
            else:
                reply = ChatMessage(MessageSender.AI, text=answer)
                await self._store_reply(conv_id, reply, "AI response")

        await self._refresh(conv_id)
        self.attachment = None

    async def _refresh(self, conv_id: int) -> None:
        try:
            self.messages = await self.server.get_messages(conv_id)
        except ServerError:
            return
        self._announce()

    async def _store_reply(self, conv_id: int, reply: ChatMessage, what: str) -> None:
        try:
            await self.server.send_message(conv_id, reply)
        except ServerError as exc:
            log.error("Failed to send %s: %s", what, exc)