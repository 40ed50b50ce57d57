"""
Base Schema Models for x402 Autopay

Core Classes:
    - CanonicalModel: Pydantic base model with deterministic JSON serialization

Dependencies:
    - pydantic: For data validation and serialization
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from ..utils import canonical_json


class CanonicalModel(BaseModel):
    """
    RFC8785-compliant Pydantic base model with canonical JSON serialization.

    Ensures consistent, deterministic JSON representation so that identical
    models always serialize to identical bytes.

    Example:
        class MyModel(CanonicalModel):
            name: str
            value: int

        model = MyModel(name="test", value=123)
        canonical_json = model.to_canonical_json()  # '{"name":"test","value":123}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to RFC8785-compliant canonical JSON string.

        Keys are sorted and separators are compact. Field aliases are used so
        the output matches the wire format.

        Returns:
            str: JSON string with sorted keys and no extra whitespace.
        """
        return canonical_json(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to its wire dictionary representation.

        Returns:
            Dict[str, Any]: Dictionary keyed by wire (alias) names.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
