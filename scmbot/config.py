import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env')


def _list_from_env(name: str, default: list) -> list:
    """Read a '|'-separated list of strings, falling back to the default list."""
    raw = os.getenv(name)
    if not raw:
        return list(default)
    items = [item.strip() for item in raw.split("|")]
    return [item for item in items if item] or list(default)


# Sentential Context Model Configuration
SCM_WINDOW_SIZE = int(os.getenv("SCM_WINDOW_SIZE", "3"))
SCM_SIMILARITY_THRESHOLD = float(os.getenv("SCM_SIMILARITY_THRESHOLD", "0.2"))

# Response Budget
# Ratios decide how much of each budget is spent before the best match;
# the remainder goes to the sentences that follow it.
SCM_MAX_SENTENCES = int(os.getenv("SCM_MAX_SENTENCES", "5"))
SCM_MAX_TOKENS = int(os.getenv("SCM_MAX_TOKENS", "500"))
SCM_BEFORE_SENTENCE_RATIO = float(os.getenv("SCM_BEFORE_SENTENCE_RATIO", "0.0"))
SCM_BEFORE_TOKEN_RATIO = float(os.getenv("SCM_BEFORE_TOKEN_RATIO", "0.0"))

# Stop words (one per line). Unset means the built-in English list.
SCM_STOP_WORDS_PATH = os.getenv("SCM_STOP_WORDS_PATH")

# Fallback Responses
DEFAULT_NO_CONTENT_RESPONSES = [
    "I'm sorry, I couldn't find any content on this site about that.",
    "There doesn't seem to be anything here on that topic yet.",
    "I wasn't able to find matching content. Could you try asking another way?",
]
DEFAULT_LOW_SIMILARITY_RESPONSES = [
    "I'm not sure I understand. Could you rephrase your question?",
    "I couldn't find a confident answer to that. Can you give me more details?",
    "That's a bit outside what I know. Could you ask about something else?",
]
SCM_NO_CONTENT_RESPONSES = _list_from_env("SCM_NO_CONTENT_RESPONSES", DEFAULT_NO_CONTENT_RESPONSES)
SCM_LOW_SIMILARITY_RESPONSES = _list_from_env("SCM_LOW_SIMILARITY_RESPONSES", DEFAULT_LOW_SIMILARITY_RESPONSES)

# Corpus Supplier
# "full" scans all published content, "indexed" narrows it through the relevance index
SCM_CORPUS_STRATEGY = os.getenv("SCM_CORPUS_STRATEGY", "full").lower()
SCM_INDEX_WORD_WINDOW = int(os.getenv("SCM_INDEX_WORD_WINDOW", "2"))
SCM_INDEX_MAX_DOCUMENTS = int(os.getenv("SCM_INDEX_MAX_DOCUMENTS", "25"))

# Embedding Cache
SCM_CACHE_ENABLED = os.getenv("SCM_CACHE_ENABLED", "true").lower() == "true"
SCM_CACHE_DIR = os.getenv("SCM_CACHE_DIR", str(Path(__file__).parent / "cache"))
SCM_CACHE_MAX_ENTRIES = int(os.getenv("SCM_CACHE_MAX_ENTRIES", "8"))

# Build Schedule: No, Now, Hourly, Twice Daily, Daily, Weekly, Disable, Cancel
SCM_BUILD_SCHEDULE = os.getenv("SCM_BUILD_SCHEDULE", "No")
SCM_REBUILD_RELEVANCE_INDEX = os.getenv("SCM_REBUILD_RELEVANCE_INDEX", "false").lower() == "true"

# Database Configuration
DB_HOST = os.getenv("DB_HOST")
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")
DB_MAX_RETRIES = int(os.getenv("DB_MAX_RETRIES", "3"))
WP_TABLE_PREFIX = os.getenv("WP_TABLE_PREFIX", "wp_")

# Admin endpoints
SCM_ADMIN_KEY = os.getenv("SCM_ADMIN_KEY")
