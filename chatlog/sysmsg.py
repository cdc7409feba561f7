"""System messages: member removal, recalls and templated notices."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

_PLACEHOLDER = re.compile(r"\$([^$]+)\$")


def _local(tag: object) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if _local(child.tag) == name]


def _child(elem: ET.Element | None, name: str) -> ET.Element | None:
    if elem is None:
        return None
    found = _children(elem, name)
    return found[-1] if found else None


def _text(elem: ET.Element | None) -> str:
    if elem is None:
        return ""
    return (elem.text or "") + "".join(child.tail or "" for child in elem)


def _child_text(elem: ET.Element | None, name: str) -> str:
    return _text(_child(elem, name))


@dataclass
class Member:
    """A user named in a templated system message."""

    username: str = ""
    nickname: str = ""


@dataclass
class Link:
    """A placeholder of a system message template and what fills it."""

    name: str = ""
    type: str = ""
    members: list[Member] = field(default_factory=list)
    separator: str = ""
    title: str = ""

    def replacement(self) -> str:
        if self.type == "link_profile":
            separator = self.separator or "、"
            texts = [
                f"{m.nickname}({m.username})" if m.username else m.nickname
                for m in self.members
                if m.nickname
            ]
            return separator.join(texts)
        return self.title


@dataclass
class DelChatRoomMember:
    """A member removal or QR code invitation notice."""

    plain: str = ""
    text: str = ""
    qr_code: str = ""
    usernames: list[str] = field(default_factory=list)


@dataclass
class RevokeMsg:
    """A message recall notice."""

    content: str = ""
    revoke_time: int = 0


@dataclass
class SysMsg:
    """A parsed ``<sysmsg>`` document.

    ``template`` is None when the message carries no template.
    """

    type: str = ""
    del_chat_room_member: DelChatRoomMember | None = None
    revoke_msg: RevokeMsg | None = None
    template: str | None = None
    links: list[Link] = field(default_factory=list)

    def text(self) -> str:
        """Readable text of the message according to its type."""
        if self.type == "delchatroommember":
            return self.del_chat_room_member_text()
        if self.type == "revokemsg":
            return self.revoke_msg.content if self.revoke_msg is not None else ""
        return self.template_text()

    def del_chat_room_member_text(self) -> str:
        if self.del_chat_room_member is None:
            return ""
        return self.del_chat_room_member.plain

    def template_text(self) -> str:
        """Fill the template's ``$name$`` placeholders; unknown ones stay."""
        if self.template is None:
            return ""
        replacements = {f"${link.name}$": link.replacement() for link in self.links}
        return _PLACEHOLDER.sub(
            lambda match: replacements.get(match.group(0), match.group(0)), self.template
        )


def _int(text: str) -> int:
    text = text.strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"invalid integer in system message: {text!r}") from exc


def _parse_link(elem: ET.Element) -> Link:
    memberlist = _child(elem, "memberlist")
    members = []
    if memberlist is not None:
        members = [
            Member(username=_child_text(m, "username"), nickname=_child_text(m, "nickname"))
            for m in _children(memberlist, "member")
        ]
    return Link(
        name=elem.get("name", ""),
        type=elem.get("type", ""),
        members=members,
        separator=_child_text(elem, "separator"),
        title=_child_text(elem, "title"),
    )


def parse_sysmsg(text: str) -> SysMsg:
    """Parse a system message document; raises ValueError if it is malformed."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"invalid system message XML: {exc}") from exc

    msg = SysMsg(type=root.get("type", ""))

    removal = _child(root, "delchatroommember")
    if removal is not None:
        link = _child(removal, "link")
        memberlist = _child(link, "memberlist")
        msg.del_chat_room_member = DelChatRoomMember(
            plain=_child_text(removal, "plain"),
            text=_child_text(removal, "text"),
            qr_code=_child_text(link, "qrcode"),
            usernames=[_text(u) for u in _children(memberlist, "username")]
            if memberlist is not None
            else [],
        )

    revoke = _child(root, "revokemsg")
    if revoke is not None:
        msg.revoke_msg = RevokeMsg(
            content=_child_text(revoke, "content"),
            revoke_time=_int(_child_text(revoke, "revoketime")),
        )

    template = _child(root, "sysmsgtemplate")
    if template is not None:
        content = _child(template, "content_template")
        msg.template = _child_text(content, "template")
        link_list = _child(content, "link_list")
        if link_list is not None:
            msg.links = [_parse_link(link) for link in _children(link_list, "link")]

    return msg