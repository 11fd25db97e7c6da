"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    GEMINI_API_KEY              — Gemini provider API key
    GROQ_API_KEY                — Groq provider API key (OpenAI-compatible)
    OLLAMA_BASE_URL             — Local Ollama chat endpoint (default: http://localhost:11434)
    OLLAMA_MODEL                — Model served by Ollama (default: llama3.1)
    LLM_TIMEOUT_SECONDS         — Per-request HTTP timeout for a provider call
    DETECTION_TIMEOUT_SECONDS   — Ceiling for one file's gateway call, fallbacks included
    BUG_DETECTOR_DEBUG          — Emit pipeline trace logs (default: false)
    LOG_DIR                     — Directory for the dated log file (default: logs)

Debug Flag:
    BUG_DETECTOR_DEBUG only sets the default. Every detection call receives
    the flag explicitly, so a single request can be traced without touching
    process-wide state.
"""
import os
from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1")

# HTTP timeout for a single provider request
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", 30))

# Whole gateway call for one file, including provider fallback
DETECTION_TIMEOUT_SECONDS = float(os.getenv("DETECTION_TIMEOUT_SECONDS", 120))

DEBUG_DEFAULT = os.getenv("BUG_DETECTOR_DEBUG", "false").lower() == "true"

LOG_DIR = os.getenv("LOG_DIR", "logs")

# Provider health cooldown
PROVIDER_COOLDOWN_THRESHOLD = int(os.getenv("PROVIDER_COOLDOWN_THRESHOLD", 4))
PROVIDER_COOLDOWN_SKIP_COUNT = int(os.getenv("PROVIDER_COOLDOWN_SKIP_COUNT", 5))
