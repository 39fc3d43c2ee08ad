import os
import sys
from pathlib import Path


# Keep tests deterministic and local-only.
os.environ["BLOODWORK_SKIP_DOTENV"] = "1"
os.environ["BLOODWORK_LLM_BACKEND"] = "mock"
os.environ["BLOODWORK_EXTRACTOR_BACKEND"] = "mock"
os.environ["BLOODWORK_LLM_TIMEOUT_SECONDS"] = "5"
os.environ["BLOODWORK_LOG_LEVEL"] = "DEBUG"
os.environ["GEMINI_API_KEY"] = ""

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))
