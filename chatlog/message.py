"""Chat messages: parsing of their payloads and rendering as plain text."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any

import lz4.block

from chatlog.appmsg import App, MediaMsg, parse_media_msg
from chatlog.records import RecordInfo, parse_record_info
from chatlog.sysmsg import SysMsg, parse_sysmsg

DEBUG = False
"""When true, parsed payloads are kept on the message as ``media_msg``/``sys_msg``."""

WECHAT_V3 = "wechatv3"
WECHAT_V4 = "wechatv4"
WECHAT_DARWIN_V3 = "wechatdarwinv3"

DEFAULT_TIME_FORMAT = "%m-%d %H:%M:%S"
CSV_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_EPOCH = datetime.fromtimestamp(0)
_MAX_LZ4_RATIO = 4


class MessageType(IntEnum):
    """Top level message types."""

    TEXT = 1
    IMAGE = 3
    VOICE = 34
    CARD = 42
    VIDEO = 43
    ANIMATION = 47
    LOCATION = 48
    SHARE = 49
    VOIP = 50
    SYSTEM = 10000


class MessageSubType(IntEnum):
    """Sub types of share messages."""

    TEXT = 1
    LINK = 4
    LINK2 = 5
    FILE = 6
    GIF = 8
    MERGE_FORWARD = 19
    NOTE = 24
    MINI_PROGRAM = 33
    MINI_PROGRAM2 = 36
    CHANNEL = 51
    QUOTE = 57
    PAT = 62
    CHANNEL_LIVE = 63
    CHAT_ROOM_NOTICE = 87
    MUSIC = 92
    PAY = 2000
    RED_ENVELOPE = 2001
    RED_ENVELOPE_COVER = 2003


_RECORD_KINDS = {
    MessageSubType.MERGE_FORWARD: "合并转发",
    MessageSubType.NOTE: "笔记",
    MessageSubType.CHAT_ROOM_NOTICE: "群公告",
}

_PAY_KINDS = {1: "发送 ", 7: "发送 ", 3: "接收 ", 5: "接收 ", 4: "退还 "}


def split_type(value: int) -> tuple[int, int]:
    """Split a combined type into (low 32 bits, high 32 bits)."""
    return value & 0xFFFFFFFF, value >> 32


def _show(value: Any) -> str:
    return "" if value is None else str(value)


def _oneline(text: str) -> str:
    return text.replace("\n", " ").strip()


def _read_length(src: bytes, pos: int, length: int) -> tuple[int, int]:
    if length != 15:
        return length, pos
    while True:
        if pos >= len(src):
            raise ValueError("truncated LZ4 block")
        byte = src[pos]
        pos += 1
        length += byte
        if byte != 255:
            return length, pos


def _lz4_block_size(src: bytes) -> int:
    """Size of the data an LZ4 block decompresses to."""
    pos = size = 0
    while pos < len(src):
        token = src[pos]
        literals, pos = _read_length(src, pos + 1, token >> 4)
        pos += literals
        size += literals
        if pos > len(src):
            raise ValueError("truncated LZ4 block")
        if pos == len(src):
            break
        if pos + 2 > len(src):
            raise ValueError("truncated LZ4 block")
        match, pos = _read_length(src, pos + 2, token & 0x0F)
        size += match + 4
    return size


def _lz4_decompress(src: bytes) -> bytes:
    """Decompress a raw LZ4 block whose ratio is at most four."""
    size = _lz4_block_size(src)
    if size > len(src) * _MAX_LZ4_RATIO:
        raise ValueError("LZ4 block too large for its buffer")
    if size == 0:
        return b""
    try:
        return lz4.block.decompress(src, uncompressed_size=size)
    except lz4.block.LZ4BlockError as exc:
        raise ValueError(f"invalid LZ4 block: {exc}") from exc


@dataclass
class Message:
    """A chat message in the common form shared by all database layouts."""

    version: str = ""
    seq: int = 0
    time: datetime = field(default_factory=lambda: _EPOCH)
    talker: str = ""
    talker_name: str = ""
    is_chat_room: bool = False
    sender: str = ""
    sender_name: str = ""
    is_self: bool = False
    type: int = 0
    sub_type: int = 0
    content: str = ""
    contents: dict[str, Any] = field(default_factory=dict)
    media_msg: MediaMsg | None = None
    sys_msg: SysMsg | None = None

    def parse_media_info(self, data: str) -> None:
        """Fill content fields from the raw payload ``data``.

        Raises ValueError when a media payload is not a valid message document.
        """
        self.type, self.sub_type = split_type(self.type)

        if self.type == MessageType.TEXT:
            self.content = data
            return

        if self.type == MessageType.SYSTEM:
            self.sender = "系统消息"
            self.sender_name = ""
            try:
                sys_msg = parse_sysmsg(data)
            except ValueError:
                self.content = data
                return
            if DEBUG:
                self.sys_msg = sys_msg
            self.content = sys_msg.text()
            return

        msg = parse_media_msg(data)
        if DEBUG:
            self.media_msg = msg

        if self.type == MessageType.IMAGE:
            self.contents["md5"] = msg.image.md5
        elif self.type == MessageType.VIDEO:
            if msg.video.md5:
                self.contents["md5"] = msg.video.md5
            if msg.video.raw_md5:
                self.contents["rawmd5"] = msg.video.raw_md5
        elif self.type == MessageType.ANIMATION:
            self.contents["cdnurl"] = msg.emoji.cdn_url
        elif self.type == MessageType.LOCATION:
            self.contents["x"] = msg.location.x
            self.contents["y"] = msg.location.y
            self.contents["label"] = msg.location.label
            self.contents["cityname"] = msg.location.city_name
        elif self.type == MessageType.SHARE:
            self._parse_share(msg.app)

    def _parse_share(self, app: App) -> None:
        self.sub_type = app.type
        sub = self.sub_type
        if sub in (MessageSubType.TEXT, MessageSubType.LINK, MessageSubType.LINK2, MessageSubType.MUSIC):
            self.contents["title"] = app.title
            self.contents["desc"] = app.des
            self.contents["url"] = app.url
        elif sub == MessageSubType.FILE:
            self.contents["title"] = app.title
            self.contents["md5"] = app.md5
        elif sub in _RECORD_KINDS:
            self.contents["title"] = app.title
            self.contents["desc"] = app.des
            if app.record_item is not None:
                self.contents["recordInfo"] = parse_record_info(app.record_item)
        elif sub in (MessageSubType.MINI_PROGRAM, MessageSubType.MINI_PROGRAM2):
            self.contents["title"] = app.source_display_name
            self.contents["url"] = app.url
        elif sub == MessageSubType.CHANNEL:
            feed = app.finder_feed
            if feed is not None:
                self.contents["title"] = _oneline(feed.desc)
                if feed.media:
                    self.contents["url"] = feed.media[0].url
        elif sub == MessageSubType.QUOTE:
            self.content = app.title
            self._parse_quote(app)
        elif sub == MessageSubType.PAT:
            if app.pat_msg is not None and app.pat_msg.records:
                first = app.pat_msg.records[0]
                self.sender = first.from_user
                self.content = first.templete
            if app.pat_info is not None:
                self.content = app.title
        elif sub == MessageSubType.CHANNEL_LIVE:
            if app.finder_live is not None:
                self.contents["title"] = app.finder_live.desc
        elif sub == MessageSubType.PAY:
            pay = app.wcpay_info
            if pay is not None:
                kind = _PAY_KINDS.get(pay.pay_sub_type, "")
                memo = f"({pay.pay_memo})" if pay.pay_memo else ""
                self.content = f"[转账|{kind}{pay.fee_desc}]{memo}"

    def _parse_quote(self, app: App) -> None:
        refer = app.refer_msg
        if refer is None:
            return
        quoted = Message(
            type=refer.type,
            time=datetime.fromtimestamp(refer.create_time),
            sender=refer.chat_usr or refer.from_usr,
            sender_name=refer.display_name,
        )
        try:
            quoted.parse_media_info(refer.content)
        except ValueError:
            return
        self.contents["refer"] = quoted

    def set_content(self, key: str, value: Any) -> None:
        self.contents[key] = value

    def plain_text(self, show_chat_room: bool, time_format: str, host: str) -> str:
        """Render a header line (sender, room, time) followed by the content."""
        time_format = time_format or DEFAULT_TIME_FORMAT
        self.set_content("host", host)

        sender = "我" if self.is_self else self.sender
        parts = [f"{self.sender_name}({sender})" if self.sender_name else sender, " "]
        if self.is_chat_room and show_chat_room:
            room = f"{self.talker_name}({self.talker})" if self.talker_name else self.talker
            parts.append(f"[{room}] ")
        parts.append(self.time.strftime(time_format))
        parts.append("\n")
        parts.append(self.plain_text_content())
        parts.append("\n")
        return "".join(parts)

    def _host(self) -> str:
        return _show(self.contents.get("host"))

    def _string_values(self, *keys: str) -> list[str]:
        return [v for v in (self.contents.get(k) for k in keys) if isinstance(v, str)]

    def plain_text_content(self) -> str:
        """Render the message content as Markdown-like text."""
        host = self._host()
        kind = self.type
        if kind == MessageType.TEXT:
            return self.content
        if kind == MessageType.IMAGE:
            keys = ",".join(self._string_values("md5", "path", "thumbpath"))
            return f"![图片](http://{host}/image/{keys})"
        if kind == MessageType.VOICE:
            if "voice" in self.contents:
                return f"[语音](http://{host}/voice/{_show(self.contents['voice'])})"
            return "[语音]"
        if kind == MessageType.CARD:
            return "[名片]"
        if kind == MessageType.VIDEO:
            keys = ",".join(self._string_values("md5", "rawmd5", "path"))
            return f"![视频](http://{host}/video/{keys})"
        if kind == MessageType.ANIMATION:
            cdn_url = self.contents.get("cdnurl")
            if isinstance(cdn_url, str):
                return f"![动画表情]({cdn_url})"
            return "[动画表情]"
        if kind == MessageType.LOCATION:
            return f"[位置|{'|'.join(self._string_values('label', 'cityname', 'x', 'y'))}]"
        if kind == MessageType.SHARE:
            return self._share_text(host)
        if kind == MessageType.VOIP:
            return "[语音通话]"
        if kind == MessageType.SYSTEM:
            return self.content
        raw = self.content.encode("utf-8")
        content = self.content
        if len(raw) > 120:
            content = raw[:120].decode("utf-8", errors="ignore") + "<...>"
        return f"Type: {kind} Content: {content}"

    def _share_text(self, host: str) -> str:
        sub = self.sub_type
        get = self.contents.get
        if sub == MessageSubType.TEXT:
            return f"[链接|{_show(get('title'))}]({_show(get('desc'))})"
        if sub in (MessageSubType.LINK, MessageSubType.LINK2):
            return f"[链接|{_show(get('title'))}]({_show(get('url'))})"
        if sub == MessageSubType.FILE:
            return f"[文件|{_show(get('title'))}](http://{host}/file/{_show(get('md5'))})"
        if sub == MessageSubType.GIF:
            return "[GIF表情]"
        if sub in _RECORD_KINDS:
            label = _RECORD_KINDS[MessageSubType(sub)]
            record = get("recordInfo")
            if not isinstance(record, RecordInfo):
                return f"[{label}]"
            return record.render(label, "", host)
        if sub in (MessageSubType.MINI_PROGRAM, MessageSubType.MINI_PROGRAM2):
            if get("title") == "":
                return "[小程序]"
            return f"[小程序|{_show(get('title'))}]({_show(get('url'))})"
        if sub == MessageSubType.CHANNEL:
            if get("title") == "":
                return "[视频号]"
            return f"[视频号|{_show(get('title'))}]({_show(get('url'))})"
        if sub == MessageSubType.QUOTE:
            return self._quote_text(host)
        if sub in (MessageSubType.PAT, MessageSubType.PAY):
            return self.content
        if sub == MessageSubType.CHANNEL_LIVE:
            if get("title") is not None:
                return f"[视频号直播|{_show(get('title'))}]"
            return "[视频号直播]"
        if sub == MessageSubType.MUSIC:
            return f"[音乐|{_show(get('title'))}]({_show(get('url'))})"
        if sub == MessageSubType.RED_ENVELOPE:
            return "[红包]"
        if sub == MessageSubType.RED_ENVELOPE_COVER:
            return "[红包封面]"
        return "[分享]"

    def _quote_text(self, host: str) -> str:
        refer = self.contents.get("refer")
        if not isinstance(refer, Message):
            if not self.content:
                return "[引用]"
            return "> [引用]\n" + self.content
        quoted = refer.plain_text(False, "", host)
        lines = "".join(f"> {line}\n" for line in quoted.split("\n") if line)
        return lines + self.content

    def csv(self, host: str) -> list[str]:
        """The message as a CSV row: time, sender name, sender, talker name, talker, content."""
        self.set_content("host", host)
        return [
            self.time.strftime(CSV_TIME_FORMAT),
            self.sender_name,
            self.sender,
            self.talker_name,
            self.talker,
            self.plain_text_content(),
        ]


@dataclass
class MessageDarwinV3:
    """A row of a macOS v3 ``Chat_<md5>`` table.

    ``mes_des`` is 0 for sent messages and 1 for received ones.
    """

    msg_create_time: int = 0
    msg_content: str = ""
    message_type: int = 0
    mes_des: int = 0
    compress_content: bytes = b""

    def wrap(self, talker: str) -> Message:
        message = Message(
            time=datetime.fromtimestamp(self.msg_create_time),
            type=self.message_type,
            talker=talker,
            is_chat_room=talker.endswith("@chatroom"),
            is_self=self.mes_des == 0,
            version=WECHAT_DARWIN_V3,
        )

        content = self.msg_content
        if message.type == MessageType.SHARE and not content and self.compress_content:
            try:
                content = _lz4_decompress(self.compress_content).decode("utf-8", errors="replace")
            except ValueError:
                pass

        if message.is_chat_room:
            head, sep, rest = content.partition(":\n")
            if sep:
                message.sender = head
                content = rest
        elif not message.is_self:
            message.sender = talker

        try:
            message.parse_media_info(content)
        except ValueError:
            pass
        return message