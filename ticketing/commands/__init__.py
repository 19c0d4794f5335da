from ticketing.commands.base import CommandService, command
from ticketing.commands.result import CommandError, CommandResult

__all__ = ["CommandError", "CommandResult", "CommandService", "command"]
