"""Runtime configuration for the storefront (toggleable during tests/runtime)."""
import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv


class Settings(NamedTuple):
    storage_path: Optional[str] = None
    db_key: str = "3d-store-db"
    session_key: str = "user"
    chat_history_key: str = "genmesh_chat_history"
    prompt_count_key: str = "genmesh_prompt_count"
    current_chat_key: str = "genmesh_current_chat_id"
    # Re-check a restored session marker against the users table
    revalidate_session: bool = True
    free_prompt_limit: int = 3
    public_base_url: str = "http://localhost:8000"
    bcrypt_rounds: int = 10


def _as_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        storage_path=os.getenv("STOREFRONT_STORAGE_PATH", "./storefront-storage.json"),
        revalidate_session=_as_bool(os.getenv("STOREFRONT_REVALIDATE_SESSION", "1")),
        free_prompt_limit=int(os.getenv("STOREFRONT_FREE_PROMPTS", "3")),
        public_base_url=os.getenv("STOREFRONT_PUBLIC_URL", "http://localhost:8000").rstrip("/"),
    )


# Default: in-memory storage, revalidating restore
state = Settings()


def set_settings(value: Settings):
    global state
    state = value


def get_settings() -> Settings:
    return state
