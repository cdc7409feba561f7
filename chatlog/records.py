"""Forwarded chat records and notes, embedded as XML in share messages."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field


def _local(tag: object) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if _local(child.tag) == name]


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    found = _children(elem, name)
    return found[-1] if found else None


def _text(elem: ET.Element | None) -> str:
    """Character data directly inside ``elem``, without nested elements."""
    if elem is None:
        return ""
    return (elem.text or "") + "".join(child.tail or "" for child in elem)


def _child_text(elem: ET.Element, name: str) -> str:
    return _text(_child(elem, name))


def _oneline(text: str) -> str:
    return text.replace("\n", " ").strip()


@dataclass
class DataItemLocation:
    """A location attached to a record item."""

    lat: str = ""
    lng: str = ""
    scale: str = ""
    label: str = ""
    poi_name: str = ""


@dataclass
class DataItem:
    """One entry of a forwarded record."""

    data_type: str = ""
    data_id: str = ""
    html_id: str = ""
    data_fmt: str = ""
    source_name: str = ""
    source_time: str = ""
    source_head_url: str = ""
    data_desc: str = ""
    thumb_source_path: str = ""
    data_source_path: str = ""
    full_md5: str = ""
    data_size: str = ""
    src_chatname: str = ""
    message_uuid: str = ""
    link: str = ""
    stream_web_url: str = ""
    location: DataItemLocation = field(default_factory=DataItemLocation)
    data_title: str = ""
    record_xml: RecordInfo | None = None


@dataclass
class RecordInfo:
    """A forwarded chat record or note."""

    from_scene: str = ""
    fav_username: str = ""
    fav_create_time: str = ""
    is_chat_room: str = ""
    title: str = ""
    desc: str = ""
    info: str = ""
    data_count: str = ""
    items: list[DataItem] = field(default_factory=list)

    def render(self, kind: str, title: str, host: str) -> str:
        """Render the record as indented text with links served by ``host``."""
        if not title:
            title = self.title
        if not title:
            title = _oneline(self.desc)
            raw = title.encode("utf-8")
            if len(raw) > 80:
                title = raw[:80].decode("utf-8", errors="ignore") + "..."
        out = [f"[{kind}|{title}]\n"]
        for item in self.items:
            out.append(f"  {item.source_name} {item.source_time}\n")
            if item.data_type == "17" and item.record_xml is not None:
                content = item.record_xml.render(kind, item.data_title, host)
                if content:
                    out.extend(f"  {line}\n" for line in content.split("\n"))
                continue
            body = _render_item(item, host)
            if body is None:
                continue
            out.append(body)
            out.append("\n")
        return "".join(out)


def _render_item(item: DataItem, host: str) -> str | None:
    """The lines for one item, or None when the item is skipped."""
    kind = item.data_type
    if kind == "2":
        return f"  ![图片](http://{host}/image/{item.full_md5})\n"
    if kind == "4":
        return f"  ![视频](http://{host}/video/{item.full_md5})\n"
    if kind == "8":
        # The first entry of a note is its HTML body.
        if item.data_fmt == ".htm":
            return None
        return f"  [文件|{item.data_title}](http://{host}/file/{item.full_md5})\n"
    if kind == "5":
        return f"  [链接|{item.data_title}]({item.link})\n"
    if kind == "6":
        return f"  [位置|{item.location.poi_name}]\n"
    if kind == "22":
        return f"  [视频号|{_oneline(item.data_desc)}]\n"
    if kind == "23":
        return f"  [视频号直播|{_oneline(item.data_desc)}]\n"
    if kind == "32":
        return f"  [音乐|{item.data_title}]({item.stream_web_url})\n"
    if kind == "37":
        return "  [动画表情]\n"
    return "".join(f"  {line}\n" for line in item.data_desc.split("\n"))


_ITEM_TEXT_FIELDS = {
    "datafmt": "data_fmt",
    "sourcename": "source_name",
    "sourcetime": "source_time",
    "sourceheadurl": "source_head_url",
    "datadesc": "data_desc",
    "thumbsourcepath": "thumb_source_path",
    "datasourcepath": "data_source_path",
    "fullmd5": "full_md5",
    "datasize": "data_size",
    "srcChatname": "src_chatname",
    "messageuuid": "message_uuid",
    "link": "link",
    "streamweburl": "stream_web_url",
    "datatitle": "data_title",
}


def _parse_item(elem: ET.Element) -> DataItem:
    item = DataItem(
        data_type=elem.get("datatype", ""),
        data_id=elem.get("dataid", ""),
        html_id=elem.get("htmlid", ""),
    )
    for tag, attr in _ITEM_TEXT_FIELDS.items():
        setattr(item, attr, _child_text(elem, tag))
    location = _child(elem, "location")
    if location is not None:
        item.location = DataItemLocation(
            lat=location.get("lat", ""),
            lng=location.get("lng", ""),
            scale=location.get("scale", ""),
            label=location.get("label", ""),
            poi_name=location.get("poiname", ""),
        )
    record_xml = _child(elem, "recordxml")
    if record_xml is not None:
        inner = _child(record_xml, "recordinfo")
        item.record_xml = _parse_record(inner) if inner is not None else RecordInfo()
    return item


def _parse_record(elem: ET.Element) -> RecordInfo:
    info = RecordInfo(
        from_scene=_child_text(elem, "fromscene"),
        fav_username=_child_text(elem, "favusername"),
        fav_create_time=_child_text(elem, "favcreatetime"),
        is_chat_room=_child_text(elem, "isChatRoom"),
        title=_child_text(elem, "title"),
        desc=_child_text(elem, "desc"),
        info=_child_text(elem, "info"),
    )
    datalist = _child(elem, "datalist")
    if datalist is not None:
        info.data_count = datalist.get("count", "")
        info.items = [_parse_item(child) for child in _children(datalist, "dataitem")]
    return info


def parse_record_info(text: str) -> RecordInfo:
    """Parse a ``<recordinfo>`` document.

    Raises ValueError for malformed XML or a different root element.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"invalid record XML: {exc}") from exc
    if _local(root.tag) != "recordinfo":
        raise ValueError(f"expected element type <recordinfo> but have <{_local(root.tag)}>")
    return _parse_record(root)