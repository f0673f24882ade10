import re
from typing import Any

from element_di.domain import IContainer

SERVICE_PREFIX = "@"
PARAMETER_TOKEN = re.compile(r"%([^%]+)%")


class ValueResolver:
    """Resolves ``@service`` and ``%parameter%`` tokens inside definition values.

    Rules, applied recursively into lists, tuples and dicts:
    - ``"@id"`` is replaced by ``container.get("id")``.
    - ``"%name%"`` (the whole string) is replaced by the parameter value, keeping its type.
    - Any other string containing ``%name%`` tokens has each token replaced by
      the string form of the parameter.
    - Unknown parameters leave their token in place.
    """

    def resolve(self, container: IContainer, value: Any) -> Any:
        if isinstance(value, list):
            return [self.resolve(container, item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.resolve(container, item) for item in value)
        if isinstance(value, dict):
            return {key: self.resolve(container, item) for key, item in value.items()}
        if not isinstance(value, str):
            return value

        if value.startswith(SERVICE_PREFIX) and len(value) > len(SERVICE_PREFIX):
            return container.get(value[len(SERVICE_PREFIX) :])

        single = PARAMETER_TOKEN.fullmatch(value)
        if single:
            return container.get_parameter(single.group(1), value)

        if PARAMETER_TOKEN.search(value):
            return PARAMETER_TOKEN.sub(
                lambda match: str(container.get_parameter(match.group(1), match.group(0))),
                value,
            )

        return value
