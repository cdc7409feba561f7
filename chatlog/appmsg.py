"""Media and share messages: the ``<msg>`` documents carried by non-text messages."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _local(tag: object) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _children(elem: ET.Element | None, name: str) -> list[ET.Element]:
    if elem is None:
        return []
    return [child for child in elem if _local(child.tag) == name]


def _child(elem: ET.Element | None, name: str) -> ET.Element | None:
    found = _children(elem, name)
    return found[-1] if found else None


def _text(elem: ET.Element | None) -> str:
    """Character data directly inside ``elem``, without nested elements."""
    if elem is None:
        return ""
    return (elem.text or "") + "".join(child.tail or "" for child in elem)


def _int(text: str, name: str) -> int:
    if text == "":
        return 0
    value = text.strip()
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"invalid integer in <{name}>: {text!r}")
    return int(value)


def _strings(elem: ET.Element, spec: dict[str, str]) -> dict[str, str]:
    """Map child element texts to keyword arguments."""
    return {attr: _text(_child(elem, tag)) for tag, attr in spec.items()}


def _ints(elem: ET.Element, spec: dict[str, str]) -> dict[str, int]:
    return {attr: _int(_text(_child(elem, tag)), tag) for tag, attr in spec.items()}


def _attrs(elem: ET.Element | None, spec: dict[str, str]) -> dict[str, str]:
    if elem is None:
        return {}
    return {attr: elem.get(name, "") for name, attr in spec.items()}


@dataclass
class Image:
    """An image message."""

    md5: str = ""


@dataclass
class Video:
    """A video message."""

    md5: str = ""
    raw_md5: str = ""


@dataclass
class Emoji:
    """An animated sticker."""

    from_username: str = ""
    to_username: str = ""
    type: str = ""
    id_buffer: str = ""
    md5: str = ""
    len: str = ""
    cdn_url: str = ""
    aes_key: str = ""
    width: str = ""
    height: str = ""


@dataclass
class Location:
    """A shared location."""

    x: str = ""
    y: str = ""
    scale: str = ""
    label: str = ""
    map_type: str = ""
    adcode: str = ""
    city_name: str = ""


@dataclass
class ReferMsg:
    """The message a quote refers to."""

    type: int = 0
    svr_id: str = ""
    from_usr: str = ""
    chat_usr: str = ""
    display_name: str = ""
    msg_source: str = ""
    content: str = ""
    str_id: str = ""
    create_time: int = 0


@dataclass
class AppAttach:
    """A file attached to a share message."""

    total_len: str = ""
    attach_id: str = ""
    cdn_attach_url: str = ""
    emoticon_md5: str = ""
    aes_key: str = ""
    file_ext: str = ""
    is_large_file_msg: str = ""


@dataclass
class PatRecord:
    """One "pat" action."""

    from_user: str = ""
    patted_user: str = ""
    templete: str = ""
    create_time: int = 0
    svr_id: str = ""
    read_status: int = 0


@dataclass
class PatMsg:
    """A "pat" message with its records."""

    chat_user: str = ""
    record_num: int = 0
    records: list[PatRecord] = field(default_factory=list)


@dataclass
class PatInfo:
    """A "pat" message in the newer layout."""

    from_username: str = ""
    chat_username: str = ""
    patted_username: str = ""
    pat_suffix: str = ""
    pat_suffix_version: int = 0
    template: str = ""


@dataclass
class WCPayInfo:
    """A money transfer."""

    pay_sub_type: int = 0
    fee_desc: str = ""
    transcation_id: str = ""
    transfer_id: str = ""
    invalid_time: str = ""
    begin_transfer_time: str = ""
    effective_date: str = ""
    pay_memo: str = ""
    receiver_username: str = ""
    payer_username: str = ""


@dataclass
class FinderMedia:
    """One media item of a channel post."""

    thumb_url: str = ""
    full_cover_url: str = ""
    video_play_duration: str = ""
    url: str = ""
    cover_url: str = ""
    height: str = ""
    media_type: str = ""
    full_clip_inset: str = ""
    width: str = ""


@dataclass
class FinderFeed:
    """A shared channel post."""

    object_id: str = ""
    feed_type: str = ""
    nickname: str = ""
    avatar: str = ""
    desc: str = ""
    media_count: str = ""
    object_nonce_id: str = ""
    live_id: str = ""
    username: str = ""
    auth_icon_url: str = ""
    auth_icon_type: int = 0
    contact_jump_info_str: str = ""
    source_comment_scene: int = 0
    media: list[FinderMedia] = field(default_factory=list)
    mega_video_object_id: str = ""
    mega_video_object_nonce_id: str = ""
    biz_username: str = ""
    biz_nickname: str = ""
    biz_avatar: str = ""
    biz_username_v2: str = ""
    biz_auth_icon_url: str = ""
    biz_auth_icon_type: int = 0
    ec_source: str = ""
    last_gmsg_id: str = ""
    share_byp_data: str = ""
    is_debug: int = 0
    content_type: int = 0
    finder_forward_source: str = ""


@dataclass
class FinderLive:
    """A shared channel live stream."""

    finder_live_id: str = ""
    finder_username: str = ""
    finder_object_id: str = ""
    finder_nonce_id: str = ""
    nickname: str = ""
    head_url: str = ""
    desc: str = ""
    live_status: int = 0
    live_source_type_str: str = ""
    ext_flag: int = 0
    live_secondary_device_flag_str: str = ""
    live_flag: int = 0
    auth_icon_url: str = ""
    auth_icon_type_str: str = ""
    bind_type: int = 0
    biz_username: str = ""
    biz_nickname: str = ""
    charge_flag: int = 0
    replay_status: int = 0
    spam_live_ext_flag_string: str = ""
    enter_session_id: str = ""
    live_mode: int = 0
    live_sub_mode: int = 0
    cover_url: str = ""
    media_height: int = 0
    media_width: int = 0
    share_scene: int = 0


@dataclass
class App:
    """A share message (``<appmsg>``); ``type`` is its sub type.

    ``record_item`` holds the raw ``<recordinfo>`` document of forwarded
    records and notes, or None when there is none.
    """

    type: int = 0
    title: str = ""
    des: str = ""
    url: str = ""
    app_attach: AppAttach | None = None
    md5: str = ""
    record_item: str | None = None
    source_display_name: str = ""
    finder_feed: FinderFeed | None = None
    refer_msg: ReferMsg | None = None
    pat_msg: PatMsg | None = None
    pat_info: PatInfo | None = None
    finder_live: FinderLive | None = None
    wcpay_info: WCPayInfo | None = None


@dataclass
class MediaMsg:
    """A parsed ``<msg>`` document."""

    image: Image = field(default_factory=Image)
    video: Video = field(default_factory=Video)
    app: App = field(default_factory=App)
    emoji: Emoji = field(default_factory=Emoji)
    location: Location = field(default_factory=Location)


def _parse_refer(elem: ET.Element) -> ReferMsg:
    return ReferMsg(
        **_ints(elem, {"type": "type", "createtime": "create_time"}),
        **_strings(
            elem,
            {
                "svrid": "svr_id",
                "fromusr": "from_usr",
                "chatusr": "chat_usr",
                "displayname": "display_name",
                "msgsource": "msg_source",
                "content": "content",
                "strid": "str_id",
            },
        ),
    )


def _parse_attach(elem: ET.Element) -> AppAttach:
    return AppAttach(
        **_strings(
            elem,
            {
                "totallen": "total_len",
                "attachid": "attach_id",
                "cdnattachurl": "cdn_attach_url",
                "emoticonmd5": "emoticon_md5",
                "aeskey": "aes_key",
                "fileext": "file_ext",
                "islargefilemsg": "is_large_file_msg",
            },
        )
    )


def _parse_pat_record(elem: ET.Element) -> PatRecord:
    return PatRecord(
        **_strings(
            elem,
            {"fromUser": "from_user", "pattedUser": "patted_user", "templete": "templete", "svrId": "svr_id"},
        ),
        **_ints(elem, {"createTime": "create_time", "readStatus": "read_status"}),
    )


def _parse_pat_msg(elem: ET.Element) -> PatMsg:
    return PatMsg(
        chat_user=_text(_child(elem, "chatUser")),
        record_num=_int(_text(_child(elem, "recordNum")), "recordNum"),
        records=[_parse_pat_record(r) for r in _children(_child(elem, "records"), "record")],
    )


def _parse_pat_info(elem: ET.Element) -> PatInfo:
    return PatInfo(
        **_strings(
            elem,
            {
                "fromusername": "from_username",
                "chatusername": "chat_username",
                "pattedusername": "patted_username",
                "patsuffix": "pat_suffix",
                "template": "template",
            },
        ),
        **_ints(elem, {"patsuffixversion": "pat_suffix_version"}),
    )


def _parse_pay(elem: ET.Element) -> WCPayInfo:
    return WCPayInfo(
        **_ints(elem, {"paysubtype": "pay_sub_type"}),
        **_strings(
            elem,
            {
                "feedesc": "fee_desc",
                "transcationid": "transcation_id",
                "transferid": "transfer_id",
                "invalidtime": "invalid_time",
                "begintransfertime": "begin_transfer_time",
                "effectivedate": "effective_date",
                "pay_memo": "pay_memo",
                "receiver_username": "receiver_username",
                "payer_username": "payer_username",
            },
        ),
    )


def _parse_finder_media(elem: ET.Element) -> FinderMedia:
    return FinderMedia(
        **_strings(
            elem,
            {
                "thumbUrl": "thumb_url",
                "fullCoverUrl": "full_cover_url",
                "videoPlayDuration": "video_play_duration",
                "url": "url",
                "coverUrl": "cover_url",
                "height": "height",
                "mediaType": "media_type",
                "fullClipInset": "full_clip_inset",
                "width": "width",
            },
        )
    )


def _parse_feed(elem: ET.Element) -> FinderFeed:
    mega = _child(elem, "megaVideo")
    return FinderFeed(
        **_strings(
            elem,
            {
                "objectId": "object_id",
                "feedType": "feed_type",
                "nickname": "nickname",
                "avatar": "avatar",
                "desc": "desc",
                "mediaCount": "media_count",
                "objectNonceId": "object_nonce_id",
                "liveId": "live_id",
                "username": "username",
                "authIconUrl": "auth_icon_url",
                "contactJumpInfoStr": "contact_jump_info_str",
                "bizUsername": "biz_username",
                "bizNickname": "biz_nickname",
                "bizAvatar": "biz_avatar",
                "bizUsernameV2": "biz_username_v2",
                "bizAuthIconUrl": "biz_auth_icon_url",
                "ecSource": "ec_source",
                "lastGMsgID": "last_gmsg_id",
                "shareBypData": "share_byp_data",
                "finderForwardSource": "finder_forward_source",
            },
        ),
        **_ints(
            elem,
            {
                "authIconType": "auth_icon_type",
                "sourceCommentScene": "source_comment_scene",
                "bizAuthIconType": "biz_auth_icon_type",
                "isDebug": "is_debug",
                "content_type": "content_type",
            },
        ),
        media=[_parse_finder_media(m) for m in _children(_child(elem, "mediaList"), "media")],
        mega_video_object_id=_text(_child(mega, "objectId")),
        mega_video_object_nonce_id=_text(_child(mega, "objectNonceId")),
    )


def _parse_live(elem: ET.Element) -> FinderLive:
    media = _child(elem, "media")
    return FinderLive(
        **_strings(
            elem,
            {
                "finderLiveID": "finder_live_id",
                "finderUsername": "finder_username",
                "finderObjectID": "finder_object_id",
                "finderNonceID": "finder_nonce_id",
                "nickname": "nickname",
                "headUrl": "head_url",
                "desc": "desc",
                "liveSourceTypeStr": "live_source_type_str",
                "liveSecondaryDeviceFlagStr": "live_secondary_device_flag_str",
                "authIconUrl": "auth_icon_url",
                "authIconTypeStr": "auth_icon_type_str",
                "bizUsername": "biz_username",
                "bizNickname": "biz_nickname",
                "spamLiveExtFlagString": "spam_live_ext_flag_string",
                "enterSessionId": "enter_session_id",
            },
        ),
        **_ints(
            elem,
            {
                "liveStatus": "live_status",
                "extFlag": "ext_flag",
                "liveFlag": "live_flag",
                "bindType": "bind_type",
                "chargeFlag": "charge_flag",
                "replayStatus": "replay_status",
                "liveMode": "live_mode",
                "liveSubMode": "live_sub_mode",
                "shareScene": "share_scene",
            },
        ),
        cover_url=_text(_child(media, "coverUrl")),
        media_height=_int(_text(_child(media, "height")), "height"),
        media_width=_int(_text(_child(media, "width")), "width"),
    )


def _optional(elem: ET.Element, name: str, parse):
    found = _child(elem, name)
    return parse(found) if found is not None else None


def _parse_app(elem: ET.Element) -> App:
    record = _child(elem, "recorditem")
    return App(
        type=_int(_text(_child(elem, "type")), "type"),
        **_strings(
            elem,
            {
                "title": "title",
                "des": "des",
                "url": "url",
                "md5": "md5",
                "sourcedisplayname": "source_display_name",
            },
        ),
        app_attach=_optional(elem, "appattach", _parse_attach),
        record_item=_text(record) if record is not None else None,
        finder_feed=_optional(elem, "finderFeed", _parse_feed),
        refer_msg=_optional(elem, "refermsg", _parse_refer),
        pat_msg=_optional(elem, "patMsg", _parse_pat_msg),
        pat_info=_optional(elem, "patinfo", _parse_pat_info),
        finder_live=_optional(elem, "finderLive", _parse_live),
        wcpay_info=_optional(elem, "wcpayinfo", _parse_pay),
    )


def parse_media_msg(text: str) -> MediaMsg:
    """Parse a ``<msg>`` document.

    Raises ValueError for malformed XML, a different root element or a
    malformed integer field.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"invalid message XML: {exc}") from exc
    if _local(root.tag) != "msg":
        raise ValueError(f"expected element type <msg> but have <{_local(root.tag)}>")

    msg = MediaMsg(
        image=Image(**_attrs(_child(root, "img"), {"md5": "md5"})),
        video=Video(**_attrs(_child(root, "videomsg"), {"md5": "md5", "rawmd5": "raw_md5"})),
        emoji=Emoji(
            **_attrs(
                _child(root, "emoji"),
                {
                    "fromusername": "from_username",
                    "tousername": "to_username",
                    "type": "type",
                    "idbuffer": "id_buffer",
                    "md5": "md5",
                    "len": "len",
                    "cdnurl": "cdn_url",
                    "aeskey": "aes_key",
                    "width": "width",
                    "height": "height",
                },
            )
        ),
        location=Location(
            **_attrs(
                _child(root, "location"),
                {
                    "x": "x",
                    "y": "y",
                    "scale": "scale",
                    "label": "label",
                    "maptype": "map_type",
                    "adcode": "adcode",
                    "cityname": "city_name",
                },
            )
        ),
    )
    app = _child(root, "appmsg")
    if app is not None:
        msg.app = _parse_app(app)
    return msg