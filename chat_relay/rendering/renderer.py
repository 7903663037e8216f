"""Jinja2 rendering context for page and fragment templates."""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

import chat_relay

_TEMPLATE_DIR = Path(__file__).parent / "templates"

USER_FRAGMENT = "chat-box-user.html"
STREAM_FRAGMENT = "chat-box-stream.html"
ERROR_FRAGMENT = "chat-box-error.html"
INDEX_PAGE = "index.html"


class FragmentRenderer:
    """Immutable rendering context.

    Built once per application and passed to every session. Global values
    (the package version) are fixed at construction and merged under each
    render's own context.
    """

    def __init__(
        self,
        template_dir: Path | None = None,
        global_context: Mapping[str, object] | None = None,
    ) -> None:
        self._environment = Environment(
            loader=FileSystemLoader(str(template_dir or _TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        globals_ = {"version": chat_relay.__version__}
        globals_.update(global_context or {})
        self._globals = MappingProxyType(globals_)

    @property
    def global_context(self) -> Mapping[str, object]:
        return self._globals

    def render(self, name: str, **context: object) -> str:
        """Render the template ``name`` with the global and given context."""
        template = self._environment.get_template(name)
        return template.render({**self._globals, **context})

    def user_message(self, message: str, turn: int) -> str:
        return self.render(USER_FRAGMENT, message=message, turn=turn)

    def stream_fragment(self, fragment: str, turn: int) -> str:
        return self.render(STREAM_FRAGMENT, fragment=fragment, turn=turn)

    def error_fragment(self, turn: int, notice: str = "The reply was interrupted.") -> str:
        return self.render(ERROR_FRAGMENT, notice=notice, turn=turn)
