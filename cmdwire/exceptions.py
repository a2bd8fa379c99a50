"""Exception hierarchy for cmdwire.

Every error raised by the dispatch pipeline inherits from CmdwireError,
so callers can catch broadly or per stage. Errors flagged
``user_visible`` are turned into a single chat reply by the
dispatcher; the rest are programmer errors that propagate.
"""

from typing import Any, Optional


class CmdwireError(Exception):
    """Base exception for all cmdwire errors.

    Attributes:
        message: Human-readable error description. For user-visible
            errors this is exactly the text sent back to the channel.
        module: Originating module name (e.g. "tokenizer").
        context: Arbitrary key-value pairs for structured logging.
    """

    user_visible = False

    def __init__(
        self,
        message: str = "",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.module = module
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        return self.message or self.__class__.__name__

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}({self.message!r}, module={self.module!r})"

    def log_fields(self) -> dict:
        """Keyword arguments describing the error for a structlog call.

        The free-form context is nested under a single ``context`` key
        so it can never clash with the caller's own keywords. The text
        of a user-visible error can echo what the user typed, so only
        its length is logged.
        """
        fields = {"error_type": type(self).__name__}
        if self.user_visible:
            fields["error_length"] = len(str(self))
        else:
            fields["error"] = str(self)
        if self.module:
            fields["module"] = self.module
        if self.context:
            fields["context"] = dict(self.context)
        return fields


class UserFacingError(CmdwireError):
    """An error whose message is replied to the originating channel."""

    user_visible = True


# ---------------------------------------------------------------------------
# Lifecycle / setup errors (never shown to chat users)
# ---------------------------------------------------------------------------

class NotReadyError(CmdwireError):
    """Dispatch was attempted before the Ready event arrived."""

    def __init__(
        self,
        message: str = "bot not yet initialized, deliver the Ready event first",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(message, module=module or "bot", **context)


class RegistrationError(CmdwireError):
    """Invalid command or flag registration.

    Raised for duplicate command names, duplicate flag names, defaults
    that do not match the declared flag kind, and registrations after
    the registry has been frozen.
    """

    def __init__(
        self,
        message: str = "",
        *,
        name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.name = name
        super().__init__(message, module=module or "commands", **context)


class ConfigurationError(CmdwireError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: The settings key that failed validation.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(message, module=module or "config", **context)


# ---------------------------------------------------------------------------
# Dispatch errors (replied to the channel)
# ---------------------------------------------------------------------------

class TokenizeError(UserFacingError):
    """The command line could not be split into arguments."""

    def __init__(
        self,
        message: str = "",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(message, module=module or "tokenizer", **context)


class CommandNotFoundError(UserFacingError):
    """No command is registered under the requested name.

    Attributes:
        command: The name that was looked up.
    """

    def __init__(
        self,
        command: str,
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command = command
        super().__init__(
            f"command not found: {command}",
            module=module or "commands",
            **context,
        )


class FlagParseError(UserFacingError):
    """A leading option token could not be parsed.

    Attributes:
        token: The offending token as the user typed it.
    """

    def __init__(
        self,
        message: str = "",
        *,
        token: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.token = token
        super().__init__(message, module=module or "flags", **context)


class ActionError(UserFacingError):
    """Failure reported by a command's own handler.

    The message is sent to the channel verbatim.
    """

    def __init__(
        self,
        message: str = "",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        super().__init__(message, module=module or "action", **context)
