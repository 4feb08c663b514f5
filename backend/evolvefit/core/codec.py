"""Entity Codec - JSON text to and from domain models.

Pure and stateless. Every top-level value in the backing store is one of
three shapes: a single entity, a map of id/date to entity, or a list of
entities. Anything that does not parse into the expected shape raises
MalformedStoredValue; deciding what to do about it is the caller's job.
"""

from functools import lru_cache
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import MalformedStoredValue


M = TypeVar("M", bound=BaseModel)


@lru_cache(maxsize=None)
def _map_adapter(model_type: type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(dict[str, model_type])


@lru_cache(maxsize=None)
def _list_adapter(model_type: type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(list[model_type])


def encode_entity(entity: BaseModel) -> str:
    """Serialize one entity to JSON text."""
    return entity.model_dump_json()


def decode_entity(key: str, text: str, model_type: type[M]) -> M:
    """Parse one entity stored under key.

    Raises:
        MalformedStoredValue: If the text is not valid JSON for model_type
    """
    try:
        return model_type.model_validate_json(text)
    except ValidationError as e:
        raise MalformedStoredValue(key, f"{e.error_count()} validation error(s)") from e


def encode_map(entities: dict[str, M], model_type: type[M]) -> str:
    """Serialize a map of key to entity to a JSON object."""
    return _map_adapter(model_type).dump_json(entities).decode("utf-8")


def decode_map(key: str, text: str, model_type: type[M]) -> dict[str, M]:
    """Parse a JSON object of key to entity stored under key.

    Raises:
        MalformedStoredValue: If the text is not a JSON object of model_type
    """
    try:
        return _map_adapter(model_type).validate_json(text)
    except ValidationError as e:
        raise MalformedStoredValue(key, f"{e.error_count()} validation error(s)") from e


def encode_list(entities: list[M], model_type: type[M]) -> str:
    """Serialize a list of entities to a JSON array."""
    return _list_adapter(model_type).dump_json(entities).decode("utf-8")


def decode_list(key: str, text: str, model_type: type[M]) -> list[M]:
    """Parse a JSON array of entities stored under key.

    Raises:
        MalformedStoredValue: If the text is not a JSON array of model_type
    """
    try:
        return _list_adapter(model_type).validate_json(text)
    except ValidationError as e:
        raise MalformedStoredValue(key, f"{e.error_count()} validation error(s)") from e
