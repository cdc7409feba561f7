"""Contact records as stored by the different client database layouts."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Contact:
    """A contact in the common form shared by all database layouts."""

    user_name: str = ""
    alias: str = ""
    remark: str = ""
    nick_name: str = ""
    is_friend: bool = False

    def display_name(self) -> str:
        """Return the remark if set, otherwise the nickname, otherwise ''."""
        return self.remark or self.nick_name or ""


@dataclass
class ContactV3:
    """A row of the v3 ``Contact`` table.

    ``reserved1`` is 1 for friends and joined chat rooms, 0 for chat room
    members who are not friends.
    """

    user_name: str = ""
    alias: str = ""
    remark: str = ""
    nick_name: str = ""
    reserved1: int = 0

    def wrap(self) -> Contact:
        return Contact(
            user_name=self.user_name,
            alias=self.alias,
            remark=self.remark,
            nick_name=self.nick_name,
            is_friend=self.reserved1 == 1,
        )


@dataclass
class ContactDarwinV3:
    """A row of the macOS v3 ``WCContact`` table."""

    user_name: str = ""
    nickname: str = ""
    remark: str = ""
    sex: int = 0
    alias_name: str = ""

    def wrap(self) -> Contact:
        return Contact(
            user_name=self.user_name,
            alias=self.alias_name,
            remark=self.remark,
            nick_name=self.nickname,
            is_friend=True,
        )


@dataclass
class ContactV4:
    """A row of the v4 ``contact`` table.

    ``local_type``: 2 chat room; 3 chat room member (not a friend);
    5 and 6 enterprise accounts.
    """

    user_name: str = ""
    alias: str = ""
    remark: str = ""
    nick_name: str = ""
    local_type: int = 0

    def wrap(self) -> Contact:
        return Contact(
            user_name=self.user_name,
            alias=self.alias,
            remark=self.remark,
            nick_name=self.nick_name,
            is_friend=self.local_type != 3,
        )