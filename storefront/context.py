"""The application context: one store, one session, one chat per run.

Built once at startup and handed to whatever needs it instead of living in
module globals.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .auth import AuthService
from .chat import ChatService
from .config import Settings, get_settings
from .db import LocalStore
from .storage import LocalStorage

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    storage: LocalStorage
    store: LocalStore
    auth: AuthService
    chat: ChatService

    def close(self):
        self.store.close()


def create_context(settings: Optional[Settings] = None, storage: Optional[LocalStorage] = None) -> AppContext:
    settings = settings or get_settings()
    storage = storage or LocalStorage(settings.storage_path)
    store = LocalStore(storage, key=settings.db_key, bcrypt_rounds=settings.bcrypt_rounds)
    if not store.initialize():
        logger.error("Local store unavailable; catalog reads will be empty and writes dropped")
    auth = AuthService(store, storage, settings)
    # session restore waits for the store, see AuthService.restore_session
    auth.restore_session()
    chat = ChatService(storage, auth, settings)
    return AppContext(settings=settings, storage=storage, store=store, auth=auth, chat=chat)
