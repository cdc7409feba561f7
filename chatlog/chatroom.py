"""Chat rooms (group chats) and their members."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ChatRoomUser:
    """A member of a chat room, with the name shown inside that room."""

    user_name: str = ""
    display_name: str = ""


@dataclass
class ChatRoom:
    """A chat room in the common form shared by all database layouts."""

    name: str = ""
    owner: str = ""
    users: list[ChatRoomUser] = field(default_factory=list)
    remark: str = ""
    nick_name: str = ""
    user2displayname: dict[str, str] = field(default_factory=dict)

    def display_name(self) -> str:
        """Return the remark if set, otherwise the nickname, otherwise ''."""
        return self.remark or self.nick_name or ""


@dataclass
class ChatRoomDarwinV3:
    """A row of the macOS v3 ``GroupContact`` table."""

    user_name: str = ""
    nickname: str = ""
    remark: str = ""
    member_list: str = ""
    admin_list: str = ""

    def wrap(self, user2displayname: dict[str, str]) -> ChatRoom:
        """Build a chat room, keeping display names only for its members."""
        names = self.member_list.split(";")
        users = [ChatRoomUser(user_name=name) for name in names]
        known = {name: user2displayname[name] for name in names if name in user2displayname}
        return ChatRoom(
            name=self.user_name,
            owner=self.admin_list,
            remark=self.remark,
            nick_name=self.nickname,
            users=users,
            user2displayname=known,
        )