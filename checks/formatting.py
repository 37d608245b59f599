import html
import json
from typing import Any, Iterable


# Report markup stays here so comparison code never builds HTML itself


def bold(value: Any) -> str:
    return f"<b>{html.escape(str(value), quote=False)}</b>"


def italic(value: Any) -> str:
    return f"<i>{html.escape(str(value), quote=False)}</i>"


def format_html(text: Any) -> str:
    # Escape and keep line structure for rendering inside a div
    escaped = html.escape("" if text is None else str(text), quote=False)
    return escaped.replace("\n", "<br/>").replace("  ", "&nbsp;&nbsp;")


def format_json(data: Any) -> str:
    # Pretty-printed JSON block, None rendered as null
    return "<div><i>" + format_html(json.dumps(data, indent=4, sort_keys=False, default=str)) + "</i></div>"


def format_collection(values: Iterable[Any]) -> str:
    return bold(", ".join(str(value) for value in values))


def format_path(keys: Iterable[Any]) -> str:
    return italic(" → ".join(str(key) for key in keys))


def lower_first(text: str) -> str:
    return text[:1].lower() + text[1:] if text else text


def format_seconds(seconds: float) -> str:
    # 2.0 -> "2.0", 2.345678 -> "2.346"
    return f"{round(seconds, 3)}"
