"""Data models for chat history: messages, contacts, sessions, chat rooms, media and XML payloads."""

__version__ = "0.1.0"

__all__ = [
    "appmsg",
    "chatroom",
    "contact",
    "media",
    "message",
    "records",
    "session",
    "sysmsg",
]