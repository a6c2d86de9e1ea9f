"""
Language model client for chat completions.

Talks to a local Ollama server (default: http://localhost:11434), any
OpenAI-compatible `/chat/completions` endpoint, or an Azure OpenAI deployment
(`api-key` header, `api-version` query parameter). HTTP 429 is reported as
RateLimitedError so callers can recover from quota exhaustion.

Retrieval-augmented completions look up passages from a retriever registered
under a collection name and render them into the prompt before generating.
"""
import logging
import httpx
from typing import Dict, List, Optional

from subject_router.core.exceptions import LanguageModelError, RateLimitedError
from subject_router.services.session_store import ChatHistory

PROVIDERS = ("ollama", "openai", "azure")
DEFAULT_AZURE_API_VERSION = "2024-02-01"


class LanguageModelClient:
    def __init__(
        self,
        base_url: str,
        model: str,
        provider: str = "ollama",
        api_key: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 200,
        timeout: float = 120.0,
        top_k: int = 3,
        api_version: str = DEFAULT_AZURE_API_VERSION,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown LLM provider '{provider}', expected one of {PROVIDERS}")
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.provider = provider
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.top_k = top_k
        self.api_version = api_version
        self._transport = transport
        self._retrievers: Dict[str, object] = {}

    # -------------------------
    # RETRIEVER REGISTRY
    # -------------------------
    def register_retriever(self, collection: str, retriever) -> None:
        """Make `retriever.recall(collection, query, top_k)` available to retrieval completions."""
        self._retrievers[collection] = retriever
        logging.info(f"[LLM] Registered retriever for collection {collection}")

    def has_retriever(self, collection: str) -> bool:
        return collection in self._retrievers

    # -------------------------
    # TRANSPORT
    # -------------------------
    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            return {}
        if self.provider == "azure":
            return {"api-key": self.api_key}
        if self.provider == "openai":
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    def _params(self) -> Dict[str, str]:
        if self.provider == "azure":
            return {"api-version": self.api_version}
        return {}

    def _build_request(self, messages: List[Dict[str, str]], max_tokens: int):
        if self.provider == "ollama":
            payload = {
                "model": self.model,
                "messages": messages,
                "stream": False,
                "options": {"temperature": self.temperature, "num_predict": max_tokens}
            }
            return f"{self.base_url}/api/chat", payload

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": max_tokens
        }
        if self.provider == "azure":
            # deployment is addressed by the path, the model field is ignored
            return f"{self.base_url}/openai/deployments/{self.model}/chat/completions", payload
        return f"{self.base_url}/chat/completions", payload

    def _parse_response(self, data: dict) -> str:
        if self.provider == "ollama":
            return data.get("message", {}).get("content", "")
        choices = data.get("choices") or []
        if not choices:
            return ""
        return choices[0].get("message", {}).get("content") or ""

    async def _chat(self, messages: List[Dict[str, str]], max_tokens: int) -> str:
        url, payload = self._build_request(messages, max_tokens)

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers=self._headers(),
                    params=self._params(),
                    timeout=self.timeout
                )
                response.raise_for_status()
                return self._parse_response(response.json()).strip()

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitedError(f"Rate limit reached: {e.response.text}") from e
            raise LanguageModelError(f"LLM API error ({e.response.status_code}): {e.response.text}") from e
        except httpx.ConnectError as e:
            raise LanguageModelError(
                f"Cannot connect to the language model at {self.base_url}. "
                "Please ensure the service is running."
            ) from e
        except httpx.HTTPError as e:
            raise LanguageModelError(f"Error calling the language model: {e}") from e
        except ValueError as e:
            raise LanguageModelError(f"Invalid response from the language model: {e}") from e

    # -------------------------
    # COMPLETIONS
    # -------------------------
    async def complete(self, history: ChatHistory, max_tokens: Optional[int] = None) -> str:
        """
        Generate the next assistant message for a conversation.

        Args:
            history: Conversation so far
            max_tokens: Completion length limit (defaults to the client setting)

        Returns:
            Generated response text
        """
        return await self._chat(history.messages, max_tokens or self.max_tokens)

    async def complete_with_retrieval(self, prompt: str, input: str, collection: str) -> str:
        """
        Answer `input` with passages recalled from `collection`.

        The prompt template receives `{context}` (recalled passages) and
        `{input}` (the user's question).
        """
        retriever = self._retrievers.get(collection)
        if retriever is None:
            raise LanguageModelError(f"No retriever registered for collection '{collection}'")

        passages = await retriever.recall(collection, input, top_k=self.top_k)
        rendered = prompt.format(context=create_context(passages), input=input)

        history = ChatHistory()
        history.add_user_message(rendered)
        return await self.complete(history)


def create_context(passages: List[Dict]) -> str:
    """Format recalled passages as numbered context blocks."""
    context_parts = []
    for i, passage in enumerate(passages, 1):
        text = passage.get("document") or passage.get("text", "")
        if text:
            context_parts.append(f"Passage {i}:\n{text}\n")
    return "\n".join(context_parts) if context_parts else "No relevant information found."
