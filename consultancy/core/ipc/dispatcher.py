"""
Command dispatch table for the IPC layer.

Commands are registered by name together with a Pydantic input model. A
dispatch validates the payload, runs the handler and always answers with a
``CommandResult``; errors never cross the IPC boundary as exceptions.
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from consultancy.core.autosave.errors import AutoSaveError
from consultancy.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[BaseModel], Awaitable[Any] | Any]


class CommandResult(BaseModel):
    """Envelope returned to the renderer for every command."""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class UnknownCommandError(AutoSaveError):
    """No handler is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown command: {name}")
        self.name = name


@dataclass(frozen=True)
class CommandSpec:
    """A registered command."""

    name: str
    input_model: type[BaseModel]
    handler: Handler
    description: str = ""


class CommandDispatcher:
    """Maps command names to handlers with validated inputs."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandSpec] = {}

    def register(
        self,
        name: str,
        input_model: type[BaseModel],
        handler: Handler,
        description: str = "",
    ) -> None:
        """Add a command. Names must be unique."""
        if name in self._commands:
            raise ValueError(f"Command already registered: {name}")
        self._commands[name] = CommandSpec(name, input_model, handler, description)
        logger.debug(f"Registered command: {name}")

    def command(self, name: str, input_model: type[BaseModel], description: str = ""):
        """Decorator form of ``register``."""

        def decorator(handler: Handler) -> Handler:
            self.register(name, input_model, handler, description)
            return handler

        return decorator

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)

    def get(self, name: str) -> CommandSpec:
        try:
            return self._commands[name]
        except KeyError:
            raise UnknownCommandError(name) from None

    async def dispatch(self, name: str, payload: Optional[dict[str, Any]] = None) -> CommandResult:
        """
        Run command ``name`` with ``payload``.

        Returns:
            CommandResult carrying the handler's return value, or the error
        """
        try:
            spec = self.get(name)
            arguments = spec.input_model.model_validate(payload or {})
            data = spec.handler(arguments)
            if inspect.isawaitable(data):
                data = await data
        except ValidationError as e:
            logger.warning(f"Invalid payload for {name}: {e.error_count()} error(s)")
            return CommandResult(success=False, error=f"Invalid payload: {e.errors()[0]['msg']}")
        except AutoSaveError as e:
            logger.warning(f"Command {name} rejected: {e}")
            return CommandResult(success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Command {name} failed")
            return CommandResult(success=False, error=str(e))

        if isinstance(data, CommandResult):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump()
        return CommandResult(success=True, data=data)
