import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file in the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

# OpenAI judge
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")

# Prefix for absolute share links (empty means root-relative paths)
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

# Port this app is served on, used to reach its own judge endpoint
PORT = int(os.getenv("PORT", "8000"))


def default_judge_url(public_base_url: str, port: int) -> str:
    """The app's own /api/score-quiz, via the public URL when one is set."""
    base = public_base_url.rstrip("/") or f"http://127.0.0.1:{port}"
    return f"{base}/api/score-quiz"


# Where the quiz results view sends answers to be judged
JUDGE_URL = os.getenv("JUDGE_URL") or default_judge_url(PUBLIC_BASE_URL, PORT)
JUDGE_TIMEOUT_SECONDS = float(os.getenv("JUDGE_TIMEOUT_SECONDS", "15"))

# Quiet period before an edited draft is written to storage
DRAFT_SAVE_DELAY_SECONDS = float(os.getenv("DRAFT_SAVE_DELAY_SECONDS", "1.0"))

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

# Single-user key/value file holding the editor draft and theme
STATE_FILE_PATH = os.getenv("STATE_FILE_PATH", "./flashquiz_state.json")
