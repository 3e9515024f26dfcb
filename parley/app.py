"""Web interface: chat, settings and login pages served over HTTP."""

from __future__ import annotations

import argparse
from html import escape
from typing import Optional, Sequence

from aiohttp import web

from .chat import ChatSession
from .models import ModelConfig
from .render import render_message, selected_model_index
from .routes import Route, RouteKind, resolve
from .server import ChatServer, ServerError
from .storage import Storage
from .theme import Theme, html_classes

PROVIDERS = (("openai", "OpenAI"), ("anthropic", "Anthropic"))


def _navbar(*links: tuple[str, str]) -> str:
    inner = "".join(f'<a href="{escape(href)}">{escape(label)}</a>' for href, label in links)
    return f'<div class="flex flex-row space-x-5">{inner}</div>'


def _page(storage: Storage, body: str, status: int = 200) -> web.Response:
    theme = Theme.from_storage(storage.get("theme"))
    classes = " ".join(sorted(html_classes(theme)))
    html = (
        f'<!DOCTYPE html><html class="{classes}"><head><meta charset="utf-8">'
        f"<title>Chat</title></head><body>{body}</body></html>"
    )
    return web.Response(text=html, status=status, content_type="text/html")


def _option(value: str, label: str, selected: bool) -> str:
    mark = " selected" if selected else ""
    return f'<option value="{escape(value)}"{mark}>{escape(label)}</option>'


def create_app(
    server: ChatServer,
    storage: Storage,
    models: Optional[Sequence[ModelConfig]] = None,
) -> web.Application:
    """Build the web application around a chat server and a settings store."""

    def session(conv_id: Optional[int]) -> ChatSession:
        return ChatSession(
            server, models=models, api_key=storage.get("api_key", "") or "", conv_id=conv_id
        )

    async def chat_page(request: web.Request, conv_id: Optional[int]) -> web.Response:
        chat = session(conv_id)
        await chat.start()
        chat.search = request.query.get("q", "")
        items = "".join(
            f'<li class="{"current" if cid == chat.current else ""}">'
            f'<a href="/chat/{cid}">Conversation {cid}</a></li>'
            for cid in chat.visible_conversations
        )
        sidebar = (
            '<form method="post" action="/conversations"><button>New Chat</button></form>'
            f'<form method="get"><input name="q" placeholder="Search..." '
            f'value="{escape(chat.search)}"></form><ul>{items}</ul>'
            '<a href="/settings">Account</a>'
        )
        name = chat.model.name if chat.model is not None else None
        selected = selected_model_index(chat.models, name)
        options = "".join(
            _option(str(i), m.name, i == selected) for i, m in enumerate(chat.models)
        )
        messages = "".join(
            f'<div class="{msg.sender.value.lower()}">{render_message(msg)}</div>'
            for msg in chat.messages
        )
        current = chat.current if chat.current is not None else 0
        form = (
            f'<form method="post" action="/chat/{current}/send">'
            f'<select name="model">{options}</select>'
            f'<div class="messages">{messages}</div>'
            '<input name="text" placeholder="Type a message...">'
            '<label><input type="checkbox" name="web_search">Web Search</label>'
            '<label><input type="checkbox" name="image">Image Generation</label>'
            "<button>Send</button></form>"
            f'<a href="/chat/{current}">Share</a> <a href="/settings">Settings</a>'
        )
        return _page(storage, f"<div>{sidebar}</div><div>{form}</div>")

    def settings_page() -> web.Response:
        theme = Theme.from_storage(storage.get("theme"))
        provider = storage.get("provider", "openai")
        themes = "".join(_option(t.value, t.value.title(), t is theme) for t in (Theme.SYSTEM, Theme.LIGHT, Theme.DARK))
        providers = "".join(_option(v, label, v == provider) for v, label in PROVIDERS)
        body = (
            '<h1>Settings</h1><form method="post" action="/settings">'
            f'<label>Theme:</label><select name="theme">{themes}</select>'
            f'<label>Provider:</label><select name="provider">{providers}</select>'
            f'<label>API Key:</label><input type="text" name="api_key" '
            f'value="{escape(storage.get("api_key", "") or "")}">'
            '<button>Save</button></form><a href="/">Back</a>'
        )
        return _page(storage, body)

    def login_page(status: int = 200) -> web.Response:
        body = (
            "<h1>Login</h1>"
            '<form method="post" action="/login"><input name="username" placeholder="Username">'
            '<input type="password" name="password" placeholder="Password">'
            "<button>Login</button>"
            '<button formaction="/register">Register</button></form>'
        )
        return _page(storage, body, status)

    async def get_page(request: web.Request) -> web.Response:
        route: Route = resolve(request.path)
        if route.kind is RouteKind.CHAT:
            return await chat_page(request, None)
        if route.kind is RouteKind.CHAT_SHARE:
            return await chat_page(request, route.conv_id)
        if route.kind is RouteKind.SETTINGS:
            return settings_page()
        if route.kind is RouteKind.LOGIN:
            return login_page()
        return _page(storage, _navbar(("/", "Home")) + "<h1>Not Found</h1>", 404)

    async def post_send(request: web.Request) -> web.Response:
        conv_id = int(request.match_info["conv_id"])
        form = await request.post()
        chat = session(conv_id)
        await chat.start()
        index = form.get("model")
        if isinstance(index, str) and index.isdigit() and int(index) < len(chat.models):
            chat.model = chat.models[int(index)]
        chat.use_web_search = form.get("web_search") is not None
        chat.use_image_gen = form.get("image") is not None
        text = form.get("text")
        await chat.send(text if isinstance(text, str) else "")
        raise web.HTTPSeeOther(f"/chat/{conv_id}")

    async def post_conversation(request: web.Request) -> web.Response:
        conv_id = await server.create_conversation()
        raise web.HTTPSeeOther(f"/chat/{conv_id}")

    async def post_settings(request: web.Request) -> web.Response:
        form = await request.post()
        for key in ("theme", "provider", "api_key"):
            value = form.get(key)
            if isinstance(value, str):
                storage.set(key, Theme.from_storage(value).value if key == "theme" else value)
        raise web.HTTPSeeOther("/settings")

    async def post_login(request: web.Request) -> web.Response:
        form = await request.post()
        try:
            ok = await server.login(str(form.get("username", "")), str(form.get("password", "")))
        except ServerError:
            ok = False
        if ok:
            raise web.HTTPSeeOther("/")
        return login_page(401)

    async def post_register(request: web.Request) -> web.Response:
        form = await request.post()
        try:
            await server.register(str(form.get("username", "")), str(form.get("password", "")))
        except ServerError:
            pass
        raise web.HTTPSeeOther("/login")

    async def post_echo(request: web.Request) -> web.Response:
        data = await request.json()
        text = data.get("text", "") if isinstance(data, dict) else ""
        return web.json_response({"text": await server.echo(str(text))})

    app = web.Application()
    app.router.add_post("/chat/{conv_id:\\d+}/send", post_send)
    app.router.add_post("/conversations", post_conversation)
    app.router.add_post("/settings", post_settings)
    app.router.add_post("/login", post_login)
    app.router.add_post("/register", post_register)
    app.router.add_post("/api/echo", post_echo)
    app.router.add_get("/{tail:.*}", get_page)
    return app


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the chat web server."""
    parser = argparse.ArgumentParser(description="Serve the chat interface.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--storage", default=None, help="JSON file for settings")
    args = parser.parse_args(argv)
    web.run_app(create_app(ChatServer(), Storage(args.storage)), host=args.host, port=args.port)