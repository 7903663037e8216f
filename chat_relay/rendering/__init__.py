"""HTML fragment rendering for the chat page.

Fragments are small Jinja2 templates swapped into the page by htmx's
WebSocket extension.

Templates:
    - index.html: Chat page
    - chat-box-user.html: Echo of a user message plus the empty reply container
    - chat-box-stream.html: Out-of-band append of reply text to that container
    - chat-box-error.html: Notice appended to that container when a reply fails
"""

from chat_relay.rendering.renderer import FragmentRenderer

__all__ = ["FragmentRenderer"]
