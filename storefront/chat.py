"""GenMesh chat assistant.

A canned responder: the prompt is matched against a few keywords and a fixed
answer with a Blender script comes back. Anonymous visitors get a small
number of free prompts; transcripts and the prompt count live in local
storage next to the database snapshot.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from .config import Settings
from .errors import AuthRequired
from .schemas import ChatMessage, ChatTranscript
from .utils import clean_text

logger = logging.getLogger(__name__)

WELCOME = (
    "Welcome to GenMeshAI! I'm your intelligent 3D creation tool. "
    "What would you like to create today?"
)

CUBE_SCRIPT = '''import bpy

bpy.ops.object.select_all(action='SELECT')
bpy.ops.object.delete(use_global=False, confirm=False)

bpy.ops.mesh.primitive_cube_add(size=2, location=(0, 0, 0))
cube = bpy.context.active_object
cube.name = "AI_Generated_Cube"

material = bpy.data.materials.new(name="CubeMaterial")
material.use_nodes = True
cube.data.materials.append(material)

nodes = material.node_tree.nodes
links = material.node_tree.links
nodes.clear()

output = nodes.new(type='ShaderNodeOutputMaterial')
principled = nodes.new(type='ShaderNodeBsdfPrincipled')
noise = nodes.new(type='ShaderNodeTexNoise')
ramp = nodes.new(type='ShaderNodeValToRGB')

noise.inputs['Scale'].default_value = 5.0
noise.inputs['Detail'].default_value = 15.0
ramp.color_ramp.elements[0].color = (0.1, 0.2, 0.8, 1.0)
ramp.color_ramp.elements[1].color = (0.8, 0.2, 0.1, 1.0)

links.new(noise.outputs['Color'], ramp.inputs['Fac'])
links.new(ramp.outputs['Color'], principled.inputs['Base Color'])
links.new(principled.outputs['BSDF'], output.inputs['Surface'])
principled.inputs['Roughness'].default_value = 0.3

print("AI Generated Cube with procedural material created successfully!")
'''

TREE_SCRIPT = '''import bpy
import random

bpy.ops.object.select_all(action='SELECT')
bpy.ops.object.delete(use_global=False, confirm=False)


def shaded(obj, name, color):
    mat = bpy.data.materials.new(name=name)
    mat.use_nodes = True
    obj.data.materials.append(mat)
    nodes = mat.node_tree.nodes
    nodes.clear()
    output = nodes.new('ShaderNodeOutputMaterial')
    principled = nodes.new('ShaderNodeBsdfPrincipled')
    principled.inputs['Base Color'].default_value = color
    mat.node_tree.links.new(principled.outputs['BSDF'], output.inputs['Surface'])


bpy.ops.mesh.primitive_cylinder_add(radius=0.3, depth=4, location=(0, 0, 2))
trunk = bpy.context.active_object
trunk.name = "Tree_Trunk"
shaded(trunk, "TrunkMaterial", (0.3, 0.2, 0.1, 1.0))

bpy.ops.mesh.primitive_ico_sphere_add(subdivisions=2, radius=2.5, location=(0, 0, 5))
leaves = bpy.context.active_object
leaves.name = "Tree_Leaves"
shaded(leaves, "LeavesMaterial", (0.2, 0.6, 0.2, 1.0))

bpy.context.view_layer.objects.active = leaves
bpy.ops.object.mode_set(mode='EDIT')
bpy.ops.mesh.select_all(action='SELECT')
bpy.ops.transform.resize(value=(
    random.uniform(0.8, 1.2),
    random.uniform(0.8, 1.2),
    random.uniform(0.9, 1.1)
))
bpy.ops.object.mode_set(mode='OBJECT')

print("Procedural tree generated successfully!")
'''

CHARACTER_SCRIPT = '''import bpy
import bmesh

bpy.ops.object.select_all(action='SELECT')
bpy.ops.object.delete(use_global=False, confirm=False)

mesh = bpy.data.meshes.new("CharacterBase")
obj = bpy.data.objects.new("LowPolyCharacter", mesh)
bpy.context.collection.objects.link(obj)

bm = bmesh.new()
bmesh.ops.create_uvsphere(bm, u_segments=8, v_segments=6, radius=0.8)
bmesh.ops.create_cube(bm, size=2)
bmesh.ops.remove_doubles(bm, verts=bm.verts, dist=0.001)
bmesh.ops.recalc_face_normals(bm, faces=bm.faces)
bm.to_mesh(mesh)
bm.free()

modifier = obj.modifiers.new(name="Subdivision", type='SUBSURF')
modifier.levels = 1

print("Low-poly character base created successfully!")
'''

HELP_TEXT = (
    "I can help you create various 3D models and Blender scripts! Here are some "
    "examples of what I can generate:\n\n"
    "3D Models: Cubes, spheres, trees, characters, buildings\n"
    "Materials: Procedural textures, PBR materials, animated shaders\n"
    "Tools: Custom Blender operators, automation scripts\n"
    "Game Assets: Low-poly models, optimized meshes\n\n"
    "Try being more specific about what you'd like to create, and I'll generate "
    "the Python code for you!"
)

# (keywords, reply, script, download filename), first match wins
RESPONSES = [
    (
        ("cube",),
        "I've created a Blender script that generates a textured cube with materials. "
        "This script will create a cube, add a material with a procedural texture, "
        "and set up basic lighting.",
        CUBE_SCRIPT,
        "cube_generator.py",
    ),
    (
        ("tree",),
        "Here's a procedural tree generator script! This creates a tree with branches "
        "and adds realistic materials.",
        TREE_SCRIPT,
        "tree_generator.py",
    ),
    (
        ("character", "low-poly"),
        "I've created a low-poly character base mesh perfect for game development. "
        "This includes the basic humanoid shape with proper topology for rigging.",
        CHARACTER_SCRIPT,
        "character_base.py",
    ),
]


def generate_response(prompt: str) -> dict:
    message = prompt.lower()
    for keywords, content, code, filename in RESPONSES:
        if any(k in message for k in keywords):
            return {"content": content, "code": code, "download_link": filename}
    return {"content": HELP_TEXT, "code": None, "download_link": None}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatService:
    def __init__(self, storage, auth, settings: Settings, clock: Callable[[], datetime] = _utcnow):
        self.storage = storage
        self.auth = auth
        self.settings = settings
        self.clock = clock

    # -------------------- persisted state --------------------

    @property
    def prompt_count(self) -> int:
        raw = self.storage.get_item(self.settings.prompt_count_key)
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            return 0

    @property
    def current_chat_id(self) -> int:
        raw = self.storage.get_item(self.settings.current_chat_key)
        try:
            return int(raw) if raw is not None else 1
        except ValueError:
            return 1

    def _load_history(self) -> Dict[int, ChatTranscript]:
        raw = self.storage.get_item(self.settings.chat_history_key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
            return {int(k): ChatTranscript.model_validate(v) for k, v in data.items()}
        except (ValueError, AttributeError, ValidationError):
            logger.warning("Discarding unreadable chat history")
            self.storage.remove_item(self.settings.chat_history_key)
            return {}

    def _save_history(self, history: Dict[int, ChatTranscript]):
        data = {str(k): t.model_dump(mode="json") for k, t in history.items()}
        self.storage.set_item(self.settings.chat_history_key, json.dumps(data))

    def _fresh(self, chat_id: int) -> ChatTranscript:
        now = self.clock()
        welcome = ChatMessage(id=1, type="bot", content=WELCOME, timestamp=now)
        return ChatTranscript(id=chat_id, last_update=now, messages=[welcome])

    # -------------------- operations --------------------

    def prompts_left(self) -> Optional[int]:
        """Free prompts remaining, or None when signed in (unlimited)."""
        if self.auth.is_authenticated:
            return None
        return max(0, self.settings.free_prompt_limit - self.prompt_count)

    def send(self, message: str, chat_id: Optional[int] = None) -> ChatTranscript:
        prompt = clean_text(message or "")
        if not prompt:
            raise ValueError("message must not be empty")
        if not self.auth.is_authenticated:
            if self.prompt_count >= self.settings.free_prompt_limit:
                raise AuthRequired()
            self.storage.set_item(self.settings.prompt_count_key, str(self.prompt_count + 1))

        if chat_id is None:
            chat_id = self.current_chat_id
        history = self._load_history()
        transcript = history.get(chat_id) or self._fresh(chat_id)

        now = self.clock()
        next_id = max(m.id for m in transcript.messages) + 1
        transcript.messages.append(ChatMessage(id=next_id, type="user", content=prompt, timestamp=now))
        transcript.messages.append(ChatMessage(id=next_id + 1, type="bot", timestamp=now, **generate_response(prompt)))
        if transcript.title == "New Chat":
            transcript.title = prompt[:30] + ("..." if len(prompt) > 30 else "")
        transcript.last_update = now

        history[chat_id] = transcript
        self._save_history(history)
        self.storage.set_item(self.settings.current_chat_key, str(chat_id))
        return transcript

    def new_chat(self) -> ChatTranscript:
        history = self._load_history()
        chat_id = max([self.current_chat_id, *history.keys()]) + 1
        self.storage.set_item(self.settings.current_chat_key, str(chat_id))
        return self._fresh(chat_id)

    def switch_chat(self, chat_id: int) -> ChatTranscript:
        self.storage.set_item(self.settings.current_chat_key, str(chat_id))
        return self.get_chat(chat_id) or self._fresh(chat_id)

    def get_chat(self, chat_id: int) -> Optional[ChatTranscript]:
        return self._load_history().get(chat_id)

    def list_chats(self) -> List[ChatTranscript]:
        return sorted(self._load_history().values(), key=lambda t: t.last_update, reverse=True)

    def delete_chat(self, chat_id: int) -> bool:
        history = self._load_history()
        if chat_id not in history:
            return False
        del history[chat_id]
        self._save_history(history)
        return True
