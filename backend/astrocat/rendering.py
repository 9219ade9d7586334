import re
from pathlib import Path

from fastapi.templating import Jinja2Templates
from markdown_it import MarkdownIt
from markupsafe import Markup

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"

# Raw HTML in readings is rendered as text.
_markdown = MarkdownIt("commonmark", {"html": False, "linkify": False})

MOBILE_UA_RE = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)

templates = Jinja2Templates(directory=TEMPLATES_DIR)


def render_markdown(text: str) -> Markup:
    return Markup(_markdown.render(text or ""))


def is_mobile_user_agent(user_agent: str | None) -> bool:
    return bool(user_agent and MOBILE_UA_RE.search(user_agent))
