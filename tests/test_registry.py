"""Tests for Command and CommandRegistry."""

import pytest

from cmdwire.commands.base import (
    Command,
    CommandAction,
    CommandRegistry,
    FunctionAction,
    InvocationRequest,
)
from cmdwire.exceptions import ActionError, RegistrationError
from cmdwire.flags import FlagSpec, bool_flag


class EchoAction(CommandAction):
    async def handle(self, request):
        return " ".join(request.args)


def _command(name, **kwargs):
    return Command(name=name, action=EchoAction(), **kwargs)


def test_register_and_get():
    registry = CommandRegistry()
    command = registry.register(_command("echo", description="repeat"))
    assert registry.get("echo") is command
    assert "echo" in registry
    assert len(registry) == 1


def test_get_missing_returns_none():
    assert CommandRegistry().get("nope") is None
    assert "nope" not in CommandRegistry()


def test_duplicate_name_rejected():
    registry = CommandRegistry()
    registry.register(_command("echo"))
    with pytest.raises(RegistrationError, match="already registered"):
        registry.register(_command("echo"))
    assert len(registry) == 1


def test_register_after_freeze_rejected():
    registry = CommandRegistry()
    registry.freeze()
    assert registry.frozen is True
    with pytest.raises(RegistrationError, match="frozen"):
        registry.register(_command("echo"))


def test_iteration_is_sorted_regardless_of_insertion_order():
    registry = CommandRegistry()
    for name in ("zeta", "alpha", "mid", "Beta"):
        registry.register(_command(name))
    assert registry.names == ("Beta", "alpha", "mid", "zeta")
    assert [c.name for c in registry] == ["Beta", "alpha", "mid", "zeta"]


def test_case_insensitive_lookup():
    registry = CommandRegistry(case_insensitive=True)
    registry.register(_command("Deploy"))
    assert registry.get("deploy").name == "Deploy"
    assert "DEPLOY" in registry
    with pytest.raises(RegistrationError):
        registry.register(_command("deploy"))


def test_case_sensitive_by_default():
    registry = CommandRegistry()
    registry.register(_command("deploy"))
    assert registry.get("Deploy") is None


@pytest.mark.parametrize("name", ["", "two words", "back`quote"])
def test_invalid_command_names(name):
    with pytest.raises(RegistrationError):
        _command(name)


def test_action_must_be_command_action():
    async def plain(request):
        return "x"

    with pytest.raises(RegistrationError):
        Command(name="plain", action=plain)


@pytest.mark.asyncio
async def test_decorator_registers_function_action():
    registry = CommandRegistry()

    @registry.command("greet", usage="<name>", description="say hello",
                      flags=(bool_flag("loud"),))
    async def greet(request):
        return f"hello {request.arg(0)}"

    command = registry.get("greet")
    assert isinstance(command.action, FunctionAction)
    assert command.usage == "<name>"
    assert "loud" in command.flags
    request = InvocationRequest("u", "c", "greet bob", "greet", args=("bob",))
    assert await command.action.handle(request) == "hello bob"


def test_default_flags_are_empty():
    assert len(_command("echo").flags) == 0
    assert isinstance(_command("echo").flags, FlagSpec)


def test_request_arg_out_of_range_is_action_error():
    request = InvocationRequest("u", "c", "greet", "greet")
    with pytest.raises(ActionError, match="missing argument #1 for greet"):
        request.arg(0)


@pytest.mark.asyncio
async def test_request_send_without_reply_channel():
    request = InvocationRequest("u", "c", "x", "x")
    with pytest.raises(RuntimeError):
        await request.send("hi")


@pytest.mark.asyncio
async def test_request_send_uses_send_fn():
    sent = []

    async def send_fn(text):
        sent.append(text)

    request = InvocationRequest("u", "c", "x", "x", send_fn=send_fn)
    await request.send("hi")
    assert sent == ["hi"]
    assert "send_fn" not in repr(request)
