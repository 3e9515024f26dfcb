import pytest

from parley.routes import Route, RouteKind, resolve


def test_root_is_chat():
    assert resolve("/") == Route(RouteKind.CHAT)


def test_chat_share():
    assert resolve("/chat/7") == Route(RouteKind.CHAT_SHARE, conv_id=7)


def test_settings_and_login():
    assert resolve("/settings").kind is RouteKind.SETTINGS
    assert resolve("/login?next=1").kind is RouteKind.LOGIN


@pytest.mark.parametrize("path", ["/chat/abc", "/chat/-1", "/chat", "/a/b/c", "/chat/1/2"])
def test_not_found(path):
    route = resolve(path)
    assert route.kind is RouteKind.NOT_FOUND
    assert "/".join(route.segments) == path.strip("/")


@pytest.mark.parametrize(
    "route",
    [
        Route(RouteKind.CHAT),
        Route(RouteKind.CHAT_SHARE, conv_id=3),
        Route(RouteKind.SETTINGS),
        Route(RouteKind.LOGIN),
        Route(RouteKind.NOT_FOUND, segments=("x", "y z")),
    ],
)
def test_path_round_trip(route):
    assert resolve(route.path()) == route