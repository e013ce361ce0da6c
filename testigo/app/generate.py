#!/usr/bin/env python3
"""
Generation module for the driving-school chatbot.

This module sends chat messages to the OpenAI chat-completions API and guards
the call with a hard timeout.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Dict, List

import requests

from .config import Config
from ..utils.logger import get_logger

logger = get_logger("llm")

FALLBACK_REPLY = (
    "Trenutno ne mogu dohvatiti odgovor od AI modela. Pokušaj ponovno ili pitaj konkretnije "
    "(npr. \"Koliko košta kategorija B?\" ili \"Gdje je poligon?\")."
)


class CompletionError(Exception):
    """The completion API failed or returned something unusable."""


class CompletionTimeout(CompletionError):
    """The completion API did not answer in time."""

    def __init__(self, seconds: float):
        super().__init__("OPENAI_TIMEOUT")
        self.seconds = seconds


class CompletionClient:
    """Client for generating replies with the OpenAI chat-completions API."""

    def __init__(self, api_key: str = None, model: str = None, base_url: str = None,
                 temperature: float = None, max_tokens: int = None):
        """Initialize the completion client."""
        self.api_key = api_key or Config.OPENAI_API_KEY
        self.model = model or Config.OPENAI_MODEL
        self.base_url = (base_url or Config.OPENAI_BASE_URL).rstrip("/")
        self.temperature = Config.OPENAI_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or Config.OPENAI_MAX_TOKENS

        if not self.api_key:
            raise ValueError("OpenAI API key is required")

    def _post(self, messages: List[Dict[str, str]], timeout: float) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=timeout + 5,
            )
        except requests.exceptions.RequestException as e:
            raise CompletionError(f"Error generating answer: {e}") from e

        if response.status_code != 200:
            raise CompletionError(f"OpenAI HTTP {response.status_code}: {response.text[:300]}")
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise CompletionError(f"Error parsing generation response: {e}") from e
        return (content or "").strip()

    def complete(self, messages: List[Dict[str, str]], timeout: float = None) -> str:
        """
        Generate a reply, giving up after `timeout` seconds.

        Args:
            messages: Role-tagged chat messages
            timeout: Seconds to wait before raising CompletionTimeout

        Returns:
            Reply text
        """
        timeout = Config.OPENAI_TIMEOUT_SECONDS if timeout is None else timeout
        logger.info(f"[LLM] model={self.model} messages={len(messages)} chars={sum(len(m.get('content') or '') for m in messages)}")
        pool = ThreadPoolExecutor(max_workers=1)
        future = pool.submit(self._post, messages, timeout)
        try:
            return future.result(timeout=timeout)
        except FutureTimeout:
            raise CompletionTimeout(timeout)
        finally:
            # an abandoned call keeps running in its thread; nobody waits for it
            pool.shutdown(wait=False)

    def complete_or_fallback(self, messages: List[Dict[str, str]], timeout: float = None) -> str:
        """Reply text, or FALLBACK_REPLY when the API fails or times out."""
        try:
            reply = self.complete(messages, timeout)
        except CompletionError as e:
            logger.error(f"[LLM] OPENAI_CALL_ERROR {e}")
            return FALLBACK_REPLY
        except Exception:
            logger.exception("[LLM] unexpected completion failure")
            return FALLBACK_REPLY
        return reply or FALLBACK_REPLY
