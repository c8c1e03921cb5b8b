"""Application submission schemas."""

import json
from typing import Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from api.schemas.common import CamelModel, ResourceId


class AnswerBody(CamelModel):
    """
    One answer of a submitted application.

    Free-text answers may be sent as ``textValue`` or ``value``; choice
    answers reference the selected option.
    """

    question_id: ResourceId
    text_value: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("textValue", "value", "text_value"),
    )
    question_option_id: Optional[ResourceId] = None

    @model_validator(mode="after")
    def require_text_or_option(self):
        if not self.text_value and not self.question_option_id:
            raise ValueError("Each answer needs a text value or a selected option")
        return self


class SubmitApplicationBody(CamelModel):
    """Body of POST /applications/submit/{slug}."""

    answers: list[AnswerBody] = Field(min_length=1)
    recaptcha_token: str = Field(min_length=1)

    @field_validator("answers", mode="before")
    @classmethod
    def decode_answers(cls, v):
        """Multipart forms carry the answers as a JSON string."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except ValueError:
                return v
        return v
