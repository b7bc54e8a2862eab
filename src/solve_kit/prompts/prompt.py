from jinja2 import Environment, StrictUndefined
from pydantic import BaseModel

# Plain text prompts: no HTML escaping, trailing newline kept, unknown names fail.
_env = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


class Prompt(BaseModel):
    name: str
    version: str
    description: str
    inputs: dict[str, str]
    template: str

    class Config:
        extra = "forbid"

    def render(self, **values: str) -> str:
        """Render the Jinja2 template with the given values.

        Raises:
            ValueError: If a value is passed for an undeclared input.
            jinja2.UndefinedError: If the template uses a value not passed.
        """
        unknown = sorted(set(values) - set(self.inputs))
        if unknown:
            raise ValueError(
                f"Prompt '{self.name}' got undeclared inputs: {', '.join(unknown)}"
            )

        return _env.from_string(self.template).render(**values)
