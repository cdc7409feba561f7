"""Chat sessions (conversation list entries) for each database layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

_EPOCH = datetime.fromtimestamp(0)


@dataclass
class Session:
    """A conversation list entry in the common form."""

    user_name: str = ""
    n_order: int = 0
    nick_name: str = ""
    content: str = ""
    n_time: datetime = field(default_factory=lambda: _EPOCH)

    def plain_text(self, limit: int) -> str:
        """Render the session as two lines of text.

        The content line is left empty when ``limit`` is not positive, and is
        cut to ``limit`` bytes of UTF-8 followed by `` <...>`` when longer.
        """
        parts = [
            f"{self.nick_name}({self.user_name}) ",
            self.n_time.strftime("%Y-%m-%d %H:%M:%S"),
            "\n",
        ]
        if limit > 0:
            raw = self.content.encode("utf-8")
            if len(raw) > limit:
                parts.append(raw[:limit].decode("utf-8", errors="ignore"))
                parts.append(" <...>")
            else:
                parts.append(self.content)
        parts.append("\n")
        return "".join(parts)


@dataclass
class SessionV3:
    """A row of the v3 ``Session`` table."""

    user_name: str = ""
    n_order: int = 0
    nick_name: str = ""
    content: str = ""
    n_time: int = 0

    def wrap(self) -> Session:
        return Session(
            user_name=self.user_name,
            n_order=self.n_order,
            nick_name=self.nick_name,
            content=self.content,
            n_time=datetime.fromtimestamp(self.n_time),
        )


@dataclass
class SessionDarwinV3:
    """A row of the macOS v3 ``SessionAbstract`` table."""

    user_name: str = ""
    last_time: int = 0

    def wrap(self) -> Session:
        return Session(
            user_name=self.user_name,
            n_order=self.last_time,
            n_time=datetime.fromtimestamp(self.last_time),
        )


@dataclass
class SessionV4:
    """A row of the v4 ``SessionTable`` table."""

    user_name: str = ""
    summary: str = ""
    last_timestamp: int = 0
    last_msg_sender: str = ""
    last_sender_display_name: str = ""

    def wrap(self) -> Session:
        return Session(
            user_name=self.user_name,
            n_order=self.last_timestamp,
            nick_name=self.last_sender_display_name,
            content=self.summary,
            n_time=datetime.fromtimestamp(self.last_timestamp),
        )