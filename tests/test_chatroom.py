from chatlog.chatroom import ChatRoom, ChatRoomDarwinV3, ChatRoomUser


def test_display_name_prefers_remark():
    room = ChatRoom(name="r@chatroom", remark="Friends", nick_name="Group")
    assert room.display_name() == "Friends"


def test_display_name_falls_back_to_nickname():
    room = ChatRoom(name="r@chatroom", nick_name="Group")
    assert room.display_name() == "Group"


def test_display_name_empty_when_nothing_set():
    assert ChatRoom(name="r@chatroom").display_name() == ""


def test_darwin_wrap_splits_members_and_keeps_fields():
    row = ChatRoomDarwinV3(
        user_name="room1@chatroom",
        nickname="Team",
        remark="Work",
        member_list="alice;bob;carol",
        admin_list="alice",
    )
    room = row.wrap({"alice": "Ali", "dave": "Dave"})
    assert room.name == "room1@chatroom"
    assert room.owner == "alice"
    assert room.remark == "Work"
    assert room.nick_name == "Team"
    assert [u.user_name for u in room.users] == ["alice", "bob", "carol"]
    assert all(u.display_name == "" for u in room.users)
    assert room.user2displayname == {"alice": "Ali"}


def test_darwin_wrap_filters_display_names_to_members():
    row = ChatRoomDarwinV3(member_list="x;y")
    names = {"x": "X", "y": "Y", "z": "Z"}
    room = row.wrap(names)
    assert set(room.user2displayname) <= {u.user_name for u in room.users}
    assert room.user2displayname == {"x": "X", "y": "Y"}


def test_darwin_wrap_empty_member_list_gives_single_empty_user():
    room = ChatRoomDarwinV3(user_name="r@chatroom").wrap({})
    assert room.users == [ChatRoomUser(user_name="")]
    assert room.user2displayname == {}