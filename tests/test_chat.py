from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from storefront.chat import ChatService, generate_response
from storefront.errors import AuthRequired
from storefront.seed import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture
def chat(ctx, settings, storage):
    ticks = count()
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return ChatService(storage, ctx.auth, settings, clock=lambda: start + timedelta(minutes=next(ticks)))


def test_keyword_responses():
    assert generate_response("Create a simple CUBE with materials")["download_link"] == "cube_generator.py"
    assert generate_response("a tree please")["download_link"] == "tree_generator.py"
    assert generate_response("low-poly hero")["download_link"] == "character_base.py"
    assert generate_response("make me a character")["download_link"] == "character_base.py"

    fallback = generate_response("hello there")
    assert fallback["code"] is None
    assert "Try being more specific" in fallback["content"]


def test_anonymous_prompt_limit(chat, storage):
    assert chat.prompts_left() == 3
    for _ in range(3):
        chat.send("cube")
    assert chat.prompts_left() == 0
    assert storage.get_item("genmesh_prompt_count") == "3"

    with pytest.raises(AuthRequired):
        chat.send("cube")


def test_signed_in_users_are_not_counted(chat, ctx, storage):
    ctx.auth.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    for _ in range(5):
        chat.send("tree")
    assert chat.prompts_left() is None
    assert storage.get_item("genmesh_prompt_count") is None


def test_transcript_is_persisted(chat, ctx, settings, storage):
    transcript = chat.send("Create a cube with a noise texture")
    assert [m.type for m in transcript.messages] == ["bot", "user", "bot"]
    assert transcript.title == "Create a cube with a noise tex..."
    assert transcript.messages[-1].code.startswith("import bpy")

    reloaded = ChatService(storage, ctx.auth, settings)
    stored = reloaded.get_chat(transcript.id)
    assert stored is not None
    assert [m.content for m in stored.messages] == [m.content for m in transcript.messages]


def test_new_switch_and_delete_chats(chat):
    first = chat.send("cube")
    second = chat.new_chat()
    assert second.id == first.id + 1
    assert chat.current_chat_id == second.id
    # not saved until something is said in it
    assert chat.get_chat(second.id) is None

    chat.send("tree")
    assert [t.id for t in chat.list_chats()] == [second.id, first.id]

    assert chat.switch_chat(first.id).id == first.id
    assert chat.current_chat_id == first.id

    assert chat.delete_chat(first.id)
    assert not chat.delete_chat(first.id)
    assert [t.id for t in chat.list_chats()] == [second.id]


def test_prompt_markup_is_stripped(chat):
    transcript = chat.send("<script>alert(1)</script>tree")
    user_message = transcript.messages[-2]
    assert "<script>" not in user_message.content
    assert transcript.messages[-1].download_link == "tree_generator.py"


def test_prompt_keeps_punctuation(chat):
    transcript = chat.send("a cube; then a tree -- both")
    assert transcript.messages[-2].content == "a cube; then a tree -- both"
    assert transcript.messages[-1].download_link == "cube_generator.py"


def test_prompt_drops_nul_bytes(chat):
    transcript = chat.send("  cu\x00be  ")
    assert transcript.messages[-2].content == "cube"
    assert transcript.messages[-1].download_link == "cube_generator.py"


def test_unreadable_history_is_discarded(chat, storage):
    storage.set_item("genmesh_chat_history", "[broken")
    assert chat.list_chats() == []
    assert storage.get_item("genmesh_chat_history") is None
