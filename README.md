# chatlog

Data models for chat history kept in the databases of desktop chat
clients. The package turns rows from several client database layouts
into one common set of objects, and renders them as readable text or
CSV rows.

## Modules

- `chatlog.contact`: `ContactV3`, `ContactV4` and `ContactDarwinV3` rows
  wrap into a `Contact`, whose `display_name()` prefers the remark over
  the nickname.
- `chatlog.session`: `SessionV3`, `SessionV4` and `SessionDarwinV3` rows
  wrap into a `Session`; `Session.plain_text(limit)` prints a header line
  and the content, cut to `limit` bytes of UTF-8 followed by ` <...>`
  when longer, and left out when `limit` is not positive.
- `chatlog.media`: `MediaV3`, `MediaV4` and `MediaDarwinV3` records wrap
  into a `Media` holding the relative path of the stored file.
- `chatlog.chatroom`: `ChatRoom`, `ChatRoomUser`, and
  `ChatRoomDarwinV3.wrap(user2displayname)`, which builds a `ChatRoom`
  from its `;`-separated member list, keeping the display names of its
  members only.
- `chatlog.appmsg`: `parse_media_msg(text)` parses a `<msg>` document
  (images, videos, emoji, locations and `<appmsg>` shares) into a
  `MediaMsg`.
- `chatlog.records`: `parse_record_info(text)` parses a `<recordinfo>`
  document of forwarded records and notes; `RecordInfo.render(kind,
  title, host)` renders it as indented text with links under `host`.
- `chatlog.sysmsg`: `parse_sysmsg(text)` parses a `<sysmsg>` document;
  `SysMsg.text()` gives the readable notice, filling `$name$`
  placeholders of templated notices.
- `chatlog.message`: `Message.parse_media_info(data)` fills a message's
  content from its raw body; `Message.plain_text(show_chat_room,
  time_format, host)`, `Message.plain_text_content()` and
  `Message.csv(host)` render it. `MessageDarwinV3.wrap(talker)` builds a
  `Message` from a macOS v3 row, decompressing LZ4 content of share
  messages where needed. `MessageType` and `MessageSubType` name the
  message kinds, and `split_type(value)` splits a combined type into
  `(type, sub_type)`. Setting `chatlog.message.DEBUG` to true keeps the
  parsed documents on the message as `media_msg` and `sys_msg`.

Parsers raise `ValueError` on malformed XML.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from chatlog.contact import ContactV4
from chatlog.message import Message, MessageType

contact = ContactV4(user_name="friend_01", nick_name="Friend", local_type=1).wrap()
print(contact.display_name())   # Friend

msg = Message(talker="friend_01", sender="friend_01", type=MessageType.TEXT)
msg.parse_media_info("hello")
print(msg.plain_text(False, "", "127.0.0.1:5030"))
```

## What it does not do

The package works on rows and documents handed to it. It does not find,
open, decrypt or read client database files, does not store messages
anywhere, and has no command, HTTP server or terminal screen. Links it
renders (`http://<host>/image/...` and the like) point at a host given
by the caller; nothing here serves them.