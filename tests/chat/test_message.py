"""Tests for ChatMessage addressing helpers."""

from incidentbot.chat.message import ChatMessage, is_channel


def test_is_channel():
    assert is_channel("#ops")
    assert not is_channel("BlabberBot")


def test_channel_of_public_line():
    message = ChatMessage(command="PRIVMSG", sender="alice", target="#ops", content="hi", params=["#ops", "hi"])
    assert message.is_privmsg
    assert message.in_channel
    assert message.channel == "#ops"


def test_private_line_has_no_channel():
    message = ChatMessage(command="PRIVMSG", sender="alice", target="BlabberBot", content="hi")
    assert not message.in_channel
    assert message.channel is None


def test_topic_numerics_carry_channel_in_params():
    reply = ChatMessage(command="332", sender="server", target="BlabberBot", content="Welcome", params=["BlabberBot", "#ops", "Welcome"])
    assert reply.channel == "#ops"
    assert reply.topic_text == "Welcome"

    no_topic = ChatMessage(command="331", sender="server", target="BlabberBot", content="No topic is set", params=["BlabberBot", "#ops"])
    assert no_topic.channel == "#ops"
    assert no_topic.topic_text == ""


def test_topic_change():
    change = ChatMessage(command="TOPIC", sender="bob", target="#ops", content="New", params=["#ops", "New"])
    assert not change.is_privmsg
    assert change.channel == "#ops"
    assert change.topic_text == "New"
