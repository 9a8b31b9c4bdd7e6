# statedispatch/extensions/pydantic_schema.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any

from pydantic import TypeAdapter, ValidationError

from statedispatch.core.types import ParseFailure, ParseIssue, ParseResult, ParseSuccess


class PydanticSchema:
    """
    Adapts a pydantic model, or any type pydantic can validate, to the
    ``safe_parse`` schema contract used by ``create_validated_dispatch``.

    Example:
        class Counter(BaseModel):
            count: int = Field(ge=0)

        machine = create_validated_dispatch(
            schema=PydanticSchema(Counter),
            initial_state={"count": 0},
            events={"increment": lambda s: {"count": s["count"] + 1}},
        )
    """

    def __init__(self, model: Any) -> None:
        """
        :param model: A ``BaseModel`` subclass or a type such as ``TypedDict``
            or ``Dict[str, int]``.
        """
        self._model = model
        self._adapter = TypeAdapter(model)

    @property
    def model(self) -> Any:
        return self._model

    def safe_parse(self, value: Any) -> ParseResult:
        """Validate ``value`` and report the outcome instead of raising."""
        try:
            data = self._adapter.validate_python(value)
        except ValidationError as e:
            return ParseFailure(error=ParseIssue(message=str(e)))
        return ParseSuccess(data=data)
