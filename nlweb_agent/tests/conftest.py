from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["OPENAI_API_KEY"] = "sk-test-key"
os.environ["APP_ENV"] = "test"
os.environ["NLWEB_SEED_CONTENT"] = "true"
os.environ.setdefault("METRICS_ENABLED", "true")
for name in ("OPENAI_MODEL", "OPENAI_MAX_TOKENS", "OPENAI_TEMPERATURE", "OPENAI_TIMEOUT_MS"):
    os.environ.pop(name, None)
