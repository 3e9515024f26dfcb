"""URL routes of the web interface."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote, unquote


class RouteKind(Enum):
    CHAT = "chat"
    CHAT_SHARE = "chat_share"
    SETTINGS = "settings"
    LOGIN = "login"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Route:
    """A resolved page, with the conversation id or unmatched segments it carries."""

    kind: RouteKind
    conv_id: Optional[int] = None
    segments: tuple[str, ...] = ()

    def path(self) -> str:
        """The URL path that leads to this route."""
        if self.kind is RouteKind.CHAT:
            return "/"
        if self.kind is RouteKind.CHAT_SHARE:
            return f"/chat/{self.conv_id}"
        if self.kind is RouteKind.SETTINGS:
            return "/settings"
        if self.kind is RouteKind.LOGIN:
            return "/login"
        return "/" + "/".join(quote(part, safe="") for part in self.segments)


def resolve(path: str) -> Route:
    """Match a URL path against the routes; unmatched paths are NOT_FOUND."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    parts = [unquote(part) for part in path.split("/") if part]
    if not parts:
        return Route(RouteKind.CHAT)
    if len(parts) == 2 and parts[0] == "chat" and parts[1].isascii() and parts[1].isdigit():
        return Route(RouteKind.CHAT_SHARE, conv_id=int(parts[1]))
    if parts == ["settings"]:
        return Route(RouteKind.SETTINGS)
    if parts == ["login"]:
        return Route(RouteKind.LOGIN)
    return Route(RouteKind.NOT_FOUND, segments=tuple(parts))