"""
Language state machines.

One StateMachine subclass per grammar, registered per Language. The
analyzer obtains a fresh machine for each analysis through
``create_state_machine``.
"""

from typing import Dict, List, Type

from complexityscanner.core.conditions import LanguageConditions
from complexityscanner.core.context import FunctionContext
from complexityscanner.core.errors import UnsupportedLanguageError
from complexityscanner.core.types import Language
from complexityscanner.machines.base import StateMachine

# Registry of available state machines
_machines: Dict[Language, Type[StateMachine]] = {}


def register_machine(language: Language):
    """Decorator to register a state machine for a language."""
    def decorator(cls: Type[StateMachine]) -> Type[StateMachine]:
        _machines[language] = cls
        return cls
    return decorator


def create_state_machine(
    language: Language,
    context: FunctionContext,
    conditions: LanguageConditions,
) -> StateMachine:
    """Create the state machine registered for a language."""
    try:
        machine_class = _machines[language]
    except KeyError:
        raise UnsupportedLanguageError(language) from None
    return machine_class(context, conditions)


def list_supported_languages() -> List[Language]:
    """List all languages with a registered state machine."""
    return list(_machines.keys())


# Import machines to register them
from complexityscanner.machines.go_machine import GoStateMachine  # noqa: E402
from complexityscanner.machines.typescript_machine import TypeScriptStateMachine  # noqa: E402
from complexityscanner.machines.python_machine import PythonStateMachine  # noqa: E402

__all__ = [
    "StateMachine",
    "create_state_machine",
    "register_machine",
    "list_supported_languages",
    "GoStateMachine",
    "TypeScriptStateMachine",
    "PythonStateMachine",
]
