from functools import lru_cache
from typing import Awaitable, Callable, List

from pydantic_ai import Agent
from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, SystemPromptPart, TextPart, UserPromptPart
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from quickchat.config.settings import get_settings
from quickchat.database import models

CHAT_PROMPT = """
You are QuickChat, a friendly and knowledgeable assistant.
- Answer the user's latest message using the conversation so far as context
- Be concise; use markdown for lists and code blocks where it helps
- If you are unsure, say so instead of inventing facts
"""

# (history, prompt) -> reply text
Responder = Callable[[List[models.Message], str], Awaitable[str]]

chat_agent = Agent(system_prompt=CHAT_PROMPT, output_type=str)


@lru_cache(maxsize=1)
def get_model():
    settings = get_settings()
    provider = GoogleProvider(api_key=settings.google_api_key)
    return GoogleModel(settings.chat_model, provider=provider)


def to_model_messages(history: List[models.Message]) -> List[ModelMessage]:
    """Translate stored chat messages into pydantic_ai message history.

    A non-empty history suppresses the agent's own system prompt, so it is
    carried on the first request instead.
    """
    converted: List[ModelMessage] = []
    for msg in history:
        if msg.is_image:
            continue
        if msg.role == "user":
            parts = [UserPromptPart(content=msg.content)]
            if not converted:
                parts.insert(0, SystemPromptPart(content=CHAT_PROMPT))
            converted.append(ModelRequest(parts=parts))
        else:
            converted.append(ModelResponse(parts=[TextPart(content=msg.content)]))
    return converted


async def generate_reply(history: List[models.Message], prompt: str) -> str:
    result = await chat_agent.run(prompt, model=get_model(), message_history=to_model_messages(history) or None)
    return result.output


def get_responder() -> Responder:
    return generate_reply
