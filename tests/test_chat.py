import httpx
import pytest
import respx

from parley.chat import ChatSession
from parley.models import Capabilities, ModelConfig
from parley.server import (
    OPENAI_URL,
    Attachment,
    ChatMessage,
    ChatServer,
    MessageSender,
)


def _session(server=None, **kwargs):
    server = server or ChatServer()
    kwargs.setdefault("models", [ModelConfig()])
    kwargs.setdefault("api_key", "placeholder")
    return ChatSession(server, **kwargs)


@pytest.mark.asyncio
async def test_start_selects_first_conversation():
    server = ChatServer()
    await server.send_message(0, ChatMessage(MessageSender.USER, text="hi"))
    spoken = []
    session = _session(server, speak=spoken.append)
    await session.start()
    assert session.conversations == [0]
    assert session.current == 0
    assert [m.text for m in session.messages] == ["hi"]
    assert spoken == ["hi"]


@pytest.mark.asyncio
async def test_start_with_requested_id():
    server = ChatServer()
    await server.create_conversation()
    session = _session(server, conv_id=1)
    await session.start()
    assert session.current == 1
    assert session.messages == []


@pytest.mark.asyncio
async def test_new_conversation_switches():
    session = _session()
    await session.start()
    conv_id = await session.new_conversation()
    assert conv_id == 1
    assert session.current == 1
    assert session.conversations == [0, 1]


@pytest.mark.asyncio
async def test_select_loads_messages():
    server = ChatServer()
    conv_id = await server.create_conversation()
    await server.send_message(conv_id, ChatMessage(MessageSender.AI, text="there"))
    session = _session(server)
    await session.start()
    await session.select(conv_id)
    assert [m.text for m in session.messages] == ["there"]


def test_visible_conversations_filters_by_search():
    session = _session()
    session.conversations = [0, 1, 10, 2]
    session.search = "1"
    assert session.visible_conversations == [1, 10]


def test_append_chunk_starts_and_extends_ai_message():
    session = _session()
    session.append_chunk("Hel")
    session.append_chunk("lo")
    assert len(session.messages) == 1
    assert session.messages[0].sender is MessageSender.AI
    assert session.messages[0].text == "Hello"


def test_append_chunk_after_user_message_adds_new():
    session = _session()
    session.messages.append(ChatMessage(MessageSender.USER, text="q"))
    session.append_chunk("a")
    assert [(m.sender, m.text) for m in session.messages] == [
        (MessageSender.USER, "q"),
        (MessageSender.AI, "a"),
    ]


def test_append_chunk_fills_empty_ai_text():
    session = _session()
    session.messages.append(ChatMessage(MessageSender.AI))
    session.append_chunk("x")
    assert session.messages[-1].text == "x"
    assert len(session.messages) == 1


@pytest.mark.asyncio
async def test_send_gets_ai_reply():
    server = ChatServer()
    session = _session(server)
    await session.start()
    with respx.mock:
        route = respx.post(OPENAI_URL).mock(
            return_value=httpx.Response(
                200, json={"choices": [{"message": {"content": "Hi there"}}]}
            )
        )
        await session.send("  hello  ")
    assert [m.text for m in session.messages] == ["hello", "Hi there"]
    assert [m.sender for m in session.messages] == [MessageSender.USER, MessageSender.AI]
    assert route.calls.last.request.headers["Authorization"] == "Bearer placeholder"
    assert [m.text for m in await server.get_messages(0)] == ["hello", "Hi there"]


@pytest.mark.asyncio
async def test_send_carries_attachment_and_clears_state():
    server = ChatServer()
    session = _session(server)
    await session.start()
    attachment = Attachment("a.pdf", "application/pdf", "body")
    session.attach(attachment)
    session.use_web_search = True
    with respx.mock:
        respx.post(OPENAI_URL).mock(return_value=httpx.Response(500, text="oops"))
        await session.send("look")
    stored = await server.get_messages(0)
    assert len(stored) == 1
    assert stored[0].attachment == attachment
    assert session.attachment is None
    assert session.use_web_search is False


@pytest.mark.asyncio
async def test_send_blank_text_does_nothing():
    session = _session()
    await session.start()
    attachment = Attachment("a.png", "image/png", "body")
    session.attach(attachment)
    await session.send("   ")
    assert session.messages == []
    assert session.attachment == attachment


@pytest.mark.asyncio
async def test_send_without_conversation_only_local():
    server = ChatServer()
    session = _session(server)
    await session.send("offline")
    assert [m.text for m in session.messages] == ["offline"]
    assert await server.get_messages(0) == []


@pytest.mark.asyncio
async def test_send_generates_image_when_enabled():
    server = ChatServer()
    model = ModelConfig(capabilities=Capabilities(image_generation=True))
    session = _session(server, model=model)
    await session.start()
    session.use_image_gen = True
    await session.send("cat")
    reply = session.messages[-1]
    assert reply.sender is MessageSender.AI
    assert reply.text == "Generated image for: cat"
    assert reply.attachment.filename == "generated_image.png"
    assert reply.attachment.data.startswith("data:image/svg+xml;base64,")
    assert session.use_image_gen is False


@pytest.mark.asyncio
async def test_send_without_model_stops_after_user_message():
    server = ChatServer()
    session = _session(server)
    await session.start()
    session.model = None
    await session.send("hello")
    assert [m.text for m in await server.get_messages(0)] == ["hello"]