import pytest

from chatlog.sysmsg import Link, Member, RevokeMsg, SysMsg, parse_sysmsg

INVITE = """<sysmsg type="sysmsgtemplate">
<sysmsgtemplate><content_template type="tmpl_type_profile">
<plain><![CDATA[]]></plain>
<template><![CDATA["$username$"邀请"$names$"加入了群聊]]></template>
<link_list>
<link name="username" type="link_profile">
<memberlist><member><username><![CDATA[wxid_a]]></username><nickname><![CDATA[Alice]]></nickname></member></memberlist>
</link>
<link name="names" type="link_profile">
<memberlist>
<member><username><![CDATA[wxid_b]]></username><nickname><![CDATA[Bob]]></nickname></member>
<member><username><![CDATA[wxid_c]]></username><nickname><![CDATA[Carol]]></nickname></member>
</memberlist>
</link>
</link_list>
</content_template></sysmsgtemplate>
</sysmsg>"""


def test_template_with_profiles():
    msg = parse_sysmsg(INVITE)
    assert msg.type == "sysmsgtemplate"
    assert [link.name for link in msg.links] == ["username", "names"]
    assert msg.text() == '"Alice(wxid_a)"邀请"Bob(wxid_b)、Carol(wxid_c)"加入了群聊'


def test_custom_separator_and_member_without_username():
    link = Link(
        name="who",
        type="link_profile",
        separator=" & ",
        members=[Member(nickname="A"), Member(username="u", nickname="B"), Member(username="x")],
    )
    msg = SysMsg(template="$who$ joined", links=[link])
    assert msg.template_text() == "A & B(u) joined"


def test_other_link_type_uses_title_and_unknown_placeholder_stays():
    msg = SysMsg(
        template="$revoke$ and $missing$",
        links=[Link(name="revoke", type="link_revoke", title="Undo")],
    )
    assert msg.template_text() == "Undo and $missing$"


def test_no_template_gives_empty_text():
    assert SysMsg(type="sysmsgtemplate").text() == ""
    assert SysMsg(type="delchatroommember").text() == ""


def test_del_chat_room_member():
    doc = """<sysmsg type="delchatroommember"><delchatroommember>
<plain><![CDATA[You removed Bob]]></plain><text>t</text>
<link><scene>invite</scene><memberlist><username>wxid_b</username><username>wxid_c</username></memberlist>
<qrcode>qr</qrcode></link>
</delchatroommember></sysmsg>"""
    msg = parse_sysmsg(doc)
    assert msg.text() == "You removed Bob"
    assert msg.del_chat_room_member.usernames == ["wxid_b", "wxid_c"]
    assert msg.del_chat_room_member.qr_code == "qr"


def test_revoke_message():
    doc = """<sysmsg type="revokemsg"><revokemsg>
<content>Bob recalled a message</content><revoketime>1700000000</revoketime>
</revokemsg></sysmsg>"""
    msg = parse_sysmsg(doc)
    assert msg.revoke_msg == RevokeMsg(content="Bob recalled a message", revoke_time=1700000000)
    assert msg.text() == "Bob recalled a message"


def test_bad_revoke_time_raises():
    with pytest.raises(ValueError):
        parse_sysmsg("<sysmsg type='revokemsg'><revokemsg><revoketime>soon</revoketime></revokemsg></sysmsg>")


def test_malformed_raises():
    with pytest.raises(ValueError):
        parse_sysmsg("not xml at all")