import pytest

from chatlog.contact import Contact, ContactDarwinV3, ContactV3, ContactV4


def test_display_name_prefers_remark():
    contact = Contact(user_name="wxid_a", remark="Boss", nick_name="Alice")
    assert contact.display_name() == "Boss"


def test_display_name_falls_back_to_nickname():
    contact = Contact(user_name="wxid_a", nick_name="Alice")
    assert contact.display_name() == "Alice"


def test_display_name_empty_when_nothing_set():
    assert Contact(user_name="wxid_a").display_name() == ""


@pytest.mark.parametrize("reserved1, expected", [(1, True), (0, False), (2, False)])
def test_v3_wrap_friend_flag(reserved1, expected):
    contact = ContactV3(user_name="wxid_a", reserved1=reserved1).wrap()
    assert contact.is_friend is expected


def test_v3_wrap_copies_fields():
    row = ContactV3(user_name="wxid_a", alias="al", remark="rm", nick_name="nn", reserved1=1)
    contact = row.wrap()
    assert contact == Contact(
        user_name="wxid_a", alias="al", remark="rm", nick_name="nn", is_friend=True
    )


def test_darwin_wrap_is_always_friend():
    row = ContactDarwinV3(user_name="wxid_b", nickname="Bob", remark="", sex=1, alias_name="bobby")
    contact = row.wrap()
    assert contact.is_friend is True
    assert contact.alias == "bobby"
    assert contact.nick_name == "Bob"
    assert contact.user_name == "wxid_b"
    assert contact.display_name() == "Bob"


@pytest.mark.parametrize("local_type, expected", [(1, True), (2, True), (3, False), (5, True)])
def test_v4_wrap_friend_flag(local_type, expected):
    contact = ContactV4(user_name="wxid_c", local_type=local_type).wrap()
    assert contact.is_friend is expected


def test_v4_wrap_copies_fields():
    row = ContactV4(user_name="wxid_c", alias="c", remark="Carol R", nick_name="Carol")
    contact = row.wrap()
    assert (contact.user_name, contact.alias, contact.remark, contact.nick_name) == (
        "wxid_c",
        "c",
        "Carol R",
        "Carol",
    )
    assert contact.display_name() == "Carol R"