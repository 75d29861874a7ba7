"""Utilities for preparing HTML snippets before rendering in Streamlit."""
import html
import json
from textwrap import dedent
from typing import Optional


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML so Streamlit doesn't treat it as Markdown code.

    Streamlit's Markdown renderer interprets lines with >=4 leading spaces as
    code blocks, so every line is dedented and left-stripped.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def esc(value: Optional[str]) -> str:
    """Escape API-provided text for interpolation into HTML."""
    return html.escape(value or "", quote=True)


def open_window_script(url: str) -> str:
    """Script that opens `url` in a new browsing context."""
    return f"<script>window.open({json.dumps(url)}, '_blank', 'noopener');</script>"


def expert_avatar_html(name: str, photo_url: Optional[str], size: int = 56) -> str:
    """Round avatar: the photo when there is one, otherwise the name's initial."""
    initial = esc((name or "").strip()[:1].upper() or "E")
    style = (
        f"width: {size}px; height: {size}px; border-radius: 50%; "
        "display: flex; align-items: center; justify-content: center; overflow: hidden;"
    )
    if photo_url:
        return (
            f'<div style="{style}"><img src="{esc(photo_url)}" alt="{esc(name)}" '
            f'style="width: 100%; height: 100%; object-fit: cover;"/></div>'
        )
    return (
        f'<div style="{style} background: linear-gradient(135deg, #2563eb 0%, #1e90ff 100%); '
        f'color: #ffffff; font-weight: 700;">{initial}</div>'
    )
