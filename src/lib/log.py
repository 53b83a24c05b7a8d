"""
Centralized logging using Loguru with context-aware verbosity.

Library code (scanner, macro handlers, compiler) calls LOG() freely; output
appears only when a ProgramState has been connected to the current context
and its verbosity is high enough. Compiling from plain library calls
therefore stays silent.

Usage:
    from setupmini.lib.log import LOG, state_connectToLogger

    # At start of the CLI pipeline:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Compiled TodoList.vue", level=1)
    LOG("Hoisted 3 imports, 1 components", level=2)
    LOG("Rewrote defineProps at offset 118", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

from ..config import appsettings

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <22}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """
    Verbosity of the connected state

    With no state connected this is 0, or full debug output when
    SETUPMINI_DEBUG_MODE is set.
    """
    state = _program_state.get()
    if state is not None:
        return getattr(state, 'verbosity', 0)
    return 3 if appsettings.debug_mode else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v): imports hoisted, bindings returned, skipped macros
        3 = Debug (-vv or higher): every macro rewrite and edit count
    """
    if verbosity_get() >= level:
        logger.opt(depth=1).debug(message, **kwargs)
