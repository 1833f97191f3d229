"""
Decoding of chat-completion output into typed payloads.

The model is asked for a fixed JSON schema but nothing guarantees it complies. Instead of trusting the shape,
the content is parsed and validated with pydantic and the outcome is returned as a tagged result:

- Decoded(value, invalid_fields): a JSON object came back. Fields that failed validation are dropped (and listed)
  so the caller can fill them from the fallback generators one by one.
- Rejected(reason): nothing usable (empty, not JSON, not an object).
"""

import json
import re
from typing import Annotated, Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import AliasChoices, BaseModel, Field, StringConstraints, ValidationError, field_validator

from src.core.entities import CamelModel, Impact

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NonEmptyList = Annotated[List[NonEmptyStr], Field(min_length=1)]

PayloadT = TypeVar("PayloadT", bound=BaseModel)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class ImplicationsPayload(CamelModel):
    short_term: Optional[NonEmptyStr] = None
    long_term: Optional[NonEmptyStr] = None


class ArticleAnalysisPayload(CamelModel):
    """What the article prompt asks for; every field optional so partial answers still decode."""
    impact: Optional[Impact] = None
    sector: Optional[NonEmptyStr] = None
    key_insights: Optional[NonEmptyList] = None
    implications: Optional[ImplicationsPayload] = None
    relevance_score: Optional[int] = Field(None, ge=1, le=10)
    workforce_trends: Optional[NonEmptyList] = None

    @field_validator("impact", mode="before")
    @classmethod
    def normalize_impact(cls, value):
        return value.strip().capitalize() if isinstance(value, str) else value


class DocumentAnalysisPayload(CamelModel):
    title: Optional[NonEmptyStr] = None
    # older prompts called the executive summary "content"
    summary: Optional[NonEmptyStr] = Field(None, validation_alias=AliasChoices("summary", "content"))
    category: Optional[NonEmptyStr] = None
    tags: Optional[NonEmptyList] = None
    key_stats: Optional[NonEmptyList] = None
    thought_leadership: Optional[NonEmptyList] = None
    key_topics: Optional[NonEmptyList] = None
    sentiment: Optional[NonEmptyStr] = None


def _all_present(model: BaseModel) -> bool:
    for name in type(model).model_fields:
        value = getattr(model, name)
        if value is None or (isinstance(value, BaseModel) and not _all_present(value)):
            return False
    return True


class Decoded(BaseModel, Generic[PayloadT]):
    value: PayloadT
    invalid_fields: List[str] = Field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every field of the payload is present and valid."""
        return not self.invalid_fields and _all_present(self.value)


class Rejected(BaseModel):
    reason: str


AnalysisResult = Union[Decoded, Rejected]


def _strip_fence(raw: str) -> str:
    text = raw.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def _drop_invalid(data: Dict[str, Any], loc: Tuple[Any, ...]) -> Optional[str]:
    """
    Remove the deepest object key on an error path and return its dotted name.
    List elements are not removed individually; the whole list goes.
    """
    if not loc or loc[0] not in data:
        return None

    container, key = data, loc[0]
    node = data[loc[0]]
    path = [str(loc[0])]
    for part in loc[1:]:
        if isinstance(node, dict) and part in node:
            container, key = node, part
            node = node[part]
            path.append(str(part))
        else:
            break

    container.pop(key, None)
    return ".".join(path)


def decode_payload(raw: Optional[str], model: Type[PayloadT]) -> AnalysisResult:
    if raw is None or not raw.strip():
        return Rejected(reason="empty response")

    try:
        data = json.loads(_strip_fence(raw))
    except json.JSONDecodeError as e:
        return Rejected(reason=f"invalid JSON: {e.msg}")

    if not isinstance(data, dict):
        return Rejected(reason=f"expected a JSON object, got {type(data).__name__}")

    invalid: List[str] = []
    # each pass drops at least one key, so this is bounded by the size of the payload
    while True:
        try:
            return Decoded[model](value=model.model_validate(data), invalid_fields=invalid)
        except ValidationError as exc:
            dropped = [_drop_invalid(data, tuple(error["loc"])) for error in exc.errors()]
            dropped = [name for name in dropped if name]
            if not dropped:
                return Rejected(reason=str(exc))
            invalid.extend(name for name in dict.fromkeys(dropped) if name not in invalid)


def decode_article_analysis(raw: Optional[str]) -> AnalysisResult:
    return decode_payload(raw, ArticleAnalysisPayload)


def decode_document_analysis(raw: Optional[str]) -> AnalysisResult:
    return decode_payload(raw, DocumentAnalysisPayload)
