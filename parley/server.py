"""In-memory chat backend: conversations, users and AI provider calls."""

from __future__ import annotations

import asyncio
import base64
import contextlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Optional
from urllib.parse import quote

import httpx

from .models import ModelConfig, Provider

BROADCAST_CAPACITY = 32

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
OPENROUTER_URL = "https://api.openrouter.ai/v1/chat/completions"
ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_MAX_TOKENS = 1024
SEARCH_URL = "https://api.duckduckgo.com/"
SEARCH_RESULTS = 3


class ServerError(Exception):
    """A server operation failed."""


class UserExistsError(ServerError):
    """The username is already registered."""


class MessageSender(Enum):
    USER = "User"
    AI = "AI"


@dataclass
class Attachment:
    """File data sent with a chat message."""

    filename: str
    content_type: str
    data: str


@dataclass
class ChatMessage:
    """One message of a conversation."""

    sender: MessageSender
    text: Optional[str] = None
    attachment: Optional[Attachment] = None

    def to_dict(self) -> dict[str, Any]:
        attachment = None
        if self.attachment is not None:
            attachment = {
                "filename": self.attachment.filename,
                "content_type": self.attachment.content_type,
                "data": self.attachment.data,
            }
        return {"text": self.text, "attachment": attachment, "sender": self.sender.value}

    @classmethod
    def from_dict(cls, data: Any) -> "ChatMessage":
        """Build a message from its JSON form; raise ValueError if malformed."""
        if not isinstance(data, dict) or "sender" not in data:
            raise ValueError("message must be an object with a sender")
        try:
            sender = MessageSender(data["sender"])
        except ValueError:
            raise ValueError(f"unknown sender: {data['sender']!r}") from None
        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise ValueError("text must be a string")
        raw = data.get("attachment")
        attachment = None
        if raw is not None:
            if not isinstance(raw, dict):
                raise ValueError("attachment must be an object")
            try:
                attachment = Attachment(raw["filename"], raw["content_type"], raw["data"])
            except KeyError as exc:
                raise ValueError(f"attachment is missing {exc.args[0]!r}") from None
        return cls(sender=sender, text=text, attachment=attachment)

    def to_json(self) -> str:
        import json

        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


def generate_image(prompt: str) -> str:
    """Return an SVG picture of the prompt as a base64 data URI."""
    svg = (
        "<svg xmlns='http://www.w3.org/2000/svg' width='256' height='256'>"
        "<rect width='100%' height='100%' fill='blue'/>"
        "<text x='50%' y='50%' dominant-baseline='middle' text-anchor='middle' "
        f"font-size='20' fill='white'>{prompt}</text></svg>"
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


@dataclass
class _Conversation:
    messages: list[ChatMessage] = field(default_factory=list)
    subscribers: set[asyncio.Queue] = field(default_factory=set)

    def broadcast(self, msg: ChatMessage) -> None:
        for queue in self.subscribers:
            if queue.full():
                # A lagging reader loses its oldest pending message.
                queue.get_nowait()
            queue.put_nowait(msg)


def _dig(value: Any, *path: Any) -> Optional[str]:
    for key in path:
        if isinstance(key, int):
            if not isinstance(value, list) or not 0 <= key < len(value):
                return None
        elif not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
    return value if isinstance(value, str) else None


async def _empty_stream() -> AsyncIterator[str]:
    return
    yield  # pragma: no cover


class ChatServer:
    """Conversations and users held in memory, plus remote AI calls."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._conversations: list[_Conversation] = [_Conversation()]
        self._users: dict[str, str] = {}
        self._client = client

    def _conversation(self, conv_id: int) -> Optional[_Conversation]:
        if 0 <= conv_id < len(self._conversations):
            return self._conversations[conv_id]
        return None

    def _http(self):
        if self._client is not None:
            return contextlib.nullcontext(self._client)
        return httpx.AsyncClient()

    async def echo(self, text: str) -> str:
        return text

    async def create_conversation(self) -> int:
        self._conversations.append(_Conversation())
        return len(self._conversations) - 1

    async def list_conversations(self) -> list[int]:
        return list(range(len(self._conversations)))

    async def send_message(self, conv_id: int, msg: ChatMessage) -> None:
        """Store a message and pass it to live streams; unknown ids are ignored."""
        conv = self._conversation(conv_id)
        if conv is not None:
            conv.messages.append(msg)
            conv.broadcast(msg)

    async def get_messages(self, conv_id: int) -> list[ChatMessage]:
        conv = self._conversation(conv_id)
        return list(conv.messages) if conv is not None else []

    async def stream_messages(self, conv_id: int, start: int) -> AsyncIterator[str]:
        """Return JSON messages from index `start`, then each new one as it arrives."""
        conv = self._conversation(conv_id)
        if conv is None:
            return _empty_stream()
        past = conv.messages[start:]
        queue: asyncio.Queue = asyncio.Queue(maxsize=BROADCAST_CAPACITY)
        conv.subscribers.add(queue)

        async def stream() -> AsyncIterator[str]:
            try:
                for msg in past:
                    yield msg.to_json()
                while True:
                    msg = await queue.get()
                    yield msg.to_json()
            finally:
                conv.subscribers.discard(queue)

        return stream()

    async def register(self, username: str, password: str) -> None:
        if username in self._users:
            raise UserExistsError("User already exists")
        self._users[username] = password

    async def login(self, username: str, password: str) -> bool:
        return self._users.get(username) == password and username in self._users

    async def _fetch_json(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            async with self._http() as client:
                response = await client.request(method, url, **kwargs)
                return response.json()
        except httpx.HTTPError as exc:
            raise ServerError(str(exc)) from exc
        except ValueError as exc:
            raise ServerError(str(exc)) from exc

    async def chat_completion(self, api_key: str, prompt: str, model: ModelConfig) -> str:
        """Ask the model's provider for a reply to the prompt."""
        messages = [{"role": "user", "content": prompt}]
        if model.provider in (Provider.OPENAI, Provider.OPENROUTER):
            url = OPENAI_URL if model.provider is Provider.OPENAI else OPENROUTER_URL
            body = {"model": model.to_dict(), "messages": messages}
            headers = {"Authorization": f"Bearer {api_key}"}
            path: tuple = ("choices", 0, "message", "content")
        elif model.provider is Provider.ANTHROPIC:
            url = ANTHROPIC_URL
            body = {
                "model": model.to_dict(),
                "max_tokens": ANTHROPIC_MAX_TOKENS,
                "messages": messages,
            }
            headers = {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION}
            path = ("content", 0, "text")
        else:
            raise ServerError("unknown provider")
        data = await self._fetch_json("POST", url, headers=headers, json=body)
        reply = _dig(data, *path)
        if reply is None:
            raise ServerError("invalid response")
        return reply

    async def web_search(self, query: str) -> str:
        """Return the text of the first related topics of a search, one per line."""
        url = (
            f"{SEARCH_URL}?q={quote(query, safe='')}"
            "&format=json&no_redirect=1&no_html=1"
        )
        data = await self._fetch_json("GET", url)
        topics = data.get("RelatedTopics") if isinstance(data, dict) else None
        if not isinstance(topics, list):
            return ""
        results = [
            topic["Text"]
            for topic in topics[:SEARCH_RESULTS]
            if isinstance(topic, dict) and isinstance(topic.get("Text"), str)
        ]
        return "\n".join(results)