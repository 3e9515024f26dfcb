# parley

parley is a small chat application. A `ChatServer` keeps conversations and
users in memory, passes every new message of a conversation to its live
streams, and forwards prompts to AI model providers (OpenAI, Anthropic and
OpenRouter). An aiohttp web front end shows the conversations, renders
replies as Markdown, shows a message that is a single `$...$` or `$$...$$`
formula as math markup, and lets you pick a model, share a conversation
link, and choose a light, dark or system theme.

## Installing

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running the web app

```
parley
```

Options:

- `--host` (default `127.0.0.1`)
- `--port` (default `8080`)
- `--storage PATH`: JSON file in which settings (theme, provider, API key)
  are kept. Without it, settings last only as long as the process.

Pages:

- `/` and `/chat/<id>`: the chat view. The sidebar lists conversations,
  filtered by the `q` search field, with a "New Chat" button. The form
  posts to `/chat/<id>/send`.
- `/settings`: theme, provider and API key.
- `/login`: sign in, or register through the same form.
- Any other path answers 404 "Not Found".

`POST /api/echo` with a JSON body `{"text": "..."}` answers with the same
text as `{"text": "..."}`.

Models are read from `models.json` in the working directory. When that file
is missing or malformed, the built-in default (`gpt-4o` from OpenAI) is the
only model offered.

## Model list

`models.json` holds a list of model entries:

```json
[
  {
    "name": "gpt-4o",
    "provider": "OpenAI",
    "company": "OpenAI",
    "max_tokens": 128000,
    "capabilities": {
      "text": true,
      "image_generation": false,
      "image_understanding": true,
      "web_search": false,
      "file_upload": true,
      "function_calling": true
    },
    "description": "OpenAI's most advanced model"
  }
]
```

Providers are `OpenAI`, `Anthropic`, `Google`, `XAI`, `Groq`, `DeepSeek`
and `OpenRouter`; companies are `OpenAI`, `Anthropic`, `Google`, `XAI`,
`DeepSeek` and `Meta`. Every field and capability is required.

```python
from parley.models import load_models, default_model

models = load_models("models.json")      # raises OSError or ValueError
fallback = default_model("models.json")  # last entry, or the built-in default
```

## Using the server from Python

`ChatServer` holds the conversations and users. Its methods are coroutines.
Conversation 0 exists from the start.

```python
import asyncio

from parley.server import ChatServer, ChatMessage, MessageSender


async def demo():
    server = ChatServer()
    conv_id = await server.create_conversation()
    await server.send_message(conv_id, ChatMessage(MessageSender.USER, text="Hello"))
    for message in await server.get_messages(conv_id):
        print(message.to_json())

    password = "password"
    await server.register("alice", password)
    print(await server.login("alice", password))


asyncio.run(demo())
```

`stream_messages(conv_id, start)` returns an async iterator of JSON strings:
the stored messages from index `start`, then each new message as it is sent.
Messages sent to an unknown conversation id are ignored.

Registering a name that is already taken raises `UserExistsError`. Failed
provider requests, replies of an unexpected shape and providers other than
OpenAI, Anthropic and OpenRouter raise `ServerError`. `web_search(query)`
returns the text of up to three related topics from a DuckDuckGo query, one
per line. `generate_image(prompt)` returns an SVG picture of the prompt text
as a `data:` URI.

`parley.chat.ChatSession` holds the state of one user's chat view on top of
a server: current conversation, messages, attachment and options. Its `send`
stores the user's message, then either a generated image (for a model with
image generation, when asked) or the provider's reply. An optional `speak`
callback is called with the text of each new message.

## Rendering helpers

`parley.render` holds the pieces the chat page is built from:
`markdown_to_html` (tables, strikethrough and task lists), `extract_math`,
`render_message`, `content_type_for`, `filter_conversations` and
`selected_model_index`. `parley.routes.resolve` maps a path such as
`/chat/3` to a `Route`, and `Route.path()` goes back. `parley.theme.Theme`
describes the colour scheme; `parley.storage.Storage` is the settings store.

## What it does not do

- Conversations and users live in memory only and are lost on restart;
  passwords are kept as given.
- Logging in only checks the credentials and redirects; there are no user
  sessions and no page requires a login.
- The web page does not stream messages; it shows them when it is loaded.
- The "Web Search" option is not used when sending a message.
- Math is emitted as `\( ... \)` markup in a span; it is not typeset.
- The web app attaches no files to messages and does not speak replies.