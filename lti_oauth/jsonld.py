"""
JSON-LD serialization for LTI resource descriptions.

Not part of request signing: LTI services describe resources (results,
line items, tool settings) as JSON-LD documents, and this module only takes
care of emitting the ``@context``, ``@id`` and ``@type`` keys first.
"""

import json
from typing import Any, Optional, Union

Context = Union[str, dict[str, str], list[Any]]


def _serialize(value: Any) -> Any:
    """Convert nested JSON-LD nodes, including those inside lists and dicts."""
    if isinstance(value, JsonLdObject):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


class JsonLdObject:
    """
    A JSON-LD node whose ``@context`` is formed from an external context URI
    and/or a mapping of short terms to full identifiers.

    Usage:
        obj = JsonLdObject(
            external_context_id="http://purl.imsglobal.org/ctx/lis/v2/Result",
            type="Result",
            resultScore=0.75,
        )
        obj.to_json()
        # {"@context": "http://purl.imsglobal.org/ctx/lis/v2/Result", "@type": "Result", "resultScore": 0.75}
    """

    def __init__(
        self,
        external_context_id: Optional[str] = None,
        terms: Optional[dict[str, str]] = None,
        id: Optional[str] = None,
        type: Optional[str] = None,
        **properties: Any,
    ):
        self.external_context_id = external_context_id
        self.terms = dict(terms or {})
        self.id = id
        self.type = type
        self.properties = properties

    @property
    def context(self) -> Optional[Context]:
        """
        The ``@context`` value: the external URI, the terms, or both as a list.
        None when neither is set.
        """
        if self.external_context_id and self.terms:
            return [self.external_context_id, dict(self.terms)]
        if self.external_context_id:
            return self.external_context_id
        if self.terms:
            return dict(self.terms)
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        context = self.context
        if context is not None:
            data["@context"] = context
        if self.id is not None:
            data["@id"] = self.id
        if self.type is not None:
            data["@type"] = self.type
        for key, value in self.properties.items():
            if value is not None:
                data[key] = _serialize(value)
        return data

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JsonLdObject":
        """
        Rebuild an object from a parsed JSON-LD document.

        A list context is split back into its URI and terms parts.
        """
        data = dict(data)
        context = data.pop("@context", None)
        external_context_id = None
        terms: dict[str, str] = {}
        for part in context if isinstance(context, list) else [context]:
            if isinstance(part, str):
                external_context_id = part
            elif isinstance(part, dict):
                terms.update(part)

        return cls(
            external_context_id=external_context_id,
            terms=terms,
            id=data.pop("@id", None),
            type=data.pop("@type", None),
            **data,
        )

    @classmethod
    def from_json(cls, text: str) -> "JsonLdObject":
        return cls.from_dict(json.loads(text))
