#!/usr/bin/env python3
"""
Configuration management for the driving-school chatbot backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _csv(name: str) -> frozenset:
    raw = os.getenv(name, "")
    return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())


class Config:
    """Configuration class for the application."""

    PROMPT_VERSION = "v1.5.0"

    # OpenAI (completion API)
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")
    OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", 20))
    OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", 0.2))
    OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", 700))

    # Airtable (record store)
    AIRTABLE_API_KEY = os.getenv("AIRTABLE_API_KEY")
    AIRTABLE_BASE_ID_INDIVIDUAL = os.getenv("AIRTABLE_BASE_ID_INDIVIDUAL")
    AIRTABLE_BASE_ID_GLOBAL = os.getenv("AIRTABLE_BASE_ID_GLOBAL")
    AIRTABLE_API_URL = os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0").rstrip("/")
    AIRTABLE_TIMEOUT_SECONDS = float(os.getenv("AIRTABLE_TIMEOUT_SECONDS", 15))

    # Application Configuration
    SCHOOL_SLUG = os.getenv("SCHOOL_SLUG", "instruktor").strip().lower()
    PORT = int(os.getenv("PORT", 8080))
    HISTORY_LIMIT = int(os.getenv("HISTORY_LIMIT", 12))
    FAQ_SCOPE = os.getenv("FAQ_SCOPE", "global").strip().lower()
    FACTS_DIRECT_REPLY = _flag("FACTS_DIRECT_REPLY", "true")
    INSTRUCTOR_GROUPED_SLUGS = _csv("INSTRUCTOR_GROUPED_SLUGS")

    # Admin / FAQ index sync
    ADMIN_TOKEN = os.getenv("ADMIN_TOKEN")
    VECTOR_STORE_ID = os.getenv("VECTOR_STORE_ID")
    FAQ_SYNC_INTERVAL_SECONDS = int(os.getenv("FAQ_SYNC_INTERVAL_SECONDS", 0))
    FAQ_SYNC_MIN_INTERVAL_SECONDS = int(os.getenv("FAQ_SYNC_MIN_INTERVAL_SECONDS", 60))

    @classmethod
    def missing(cls):
        """Names of mandatory settings that are not set."""
        required = {
            "OPENAI_API_KEY": cls.OPENAI_API_KEY,
            "AIRTABLE_API_KEY": cls.AIRTABLE_API_KEY,
            "AIRTABLE_BASE_ID_INDIVIDUAL": cls.AIRTABLE_BASE_ID_INDIVIDUAL,
        }
        return [name for name, value in required.items() if not value]

    @classmethod
    def validate(cls):
        """Validate that all required configuration is present."""
        missing = cls.missing()
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")
        return True

    @classmethod
    def faq_base_id(cls):
        return cls.AIRTABLE_BASE_ID_GLOBAL or cls.AIRTABLE_BASE_ID_INDIVIDUAL

    @classmethod
    def index_sync_enabled(cls) -> bool:
        return bool(cls.VECTOR_STORE_ID and cls.OPENAI_API_KEY)
