import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent.parent

# Language model provider: "ollama", "openai" (any OpenAI-compatible endpoint) or "azure"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "ollama").strip().lower()
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "http://localhost:11434")
LLM_MODEL = os.getenv("LLM_MODEL", "gemma3:1b")
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "200"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))
# Azure OpenAI only; LLM_MODEL is the deployment name
LLM_API_VERSION = os.getenv("LLM_API_VERSION", "2024-02-01")

EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-mpnet-base-v2")
DEVICE = os.getenv("DEVICE", "cpu")
NORMALIZE = os.getenv("NORMALIZE", "true").strip().lower() in ("1", "true", "yes")

REFERENCE_DATA_FILE = os.getenv("REFERENCE_DATA_FILE", "reference_data.json")
TEMPLATES_DIR = os.getenv("TEMPLATES_DIR", str(PACKAGE_DIR / "templates"))

SESSION_TTL_HOURS = float(os.getenv("SESSION_TTL_HOURS", "12"))
FIELD_CACHE_TTL_HOURS = float(os.getenv("FIELD_CACHE_TTL_HOURS", "24"))

CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "1000"))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "100"))
TOP_K = int(os.getenv("TOP_K", "3"))

SQL_ECHO = os.getenv("SQL_ECHO", "false").strip().lower() in ("1", "true", "yes")
