"""OpenAI ChatGPT provider for ProviderRegistry."""

from structura.llm.providers import registry
from structura.llm.providers.openai_compat import ChatCompletionsClient
from structura.llm.types import ProviderIdentity


@registry.register
class ChatGPTClient(ChatCompletionsClient):
    identity = ProviderIdentity.CHATGPT
