"""Minimal example unit: a greeting component found by its name."""

from pydantic import BaseModel


class GreetInput(BaseModel):
    """Input for the greeting."""

    name: str


class GreetModule:
    """A simple greeting component.

    Exported under a name containing ``Module``, so the naming convention
    picks it up. GreetInput is exported too but does not qualify.
    """

    description = "Greet a user by name"

    def greet(self, inputs: GreetInput) -> str:
        return f"Hello, {inputs.name}!"
