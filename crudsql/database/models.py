"""
Model hydration
Turns result rows (column -> value mappings) into model instances and back
"""

import dataclasses
from typing import Any, Callable, Dict, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from ..errors import HydrationError

ModelT = TypeVar("ModelT")
Row = Mapping[str, Any]
Hydrator = Callable[[Row], ModelT]


def hydrator_for(model: type) -> Hydrator:
    """
    Pick the row -> instance function for a model type

    Supported model types, checked in order:
    - classes with a ``from_row`` classmethod
    - pydantic models (validated with ``model_validate``)
    - dataclasses (required fields must be present in the row)
    - dict subclasses (built from a copy of the row)
    - any other class (row fields copied onto a bare instance)

    Args:
        model: Model class

    Returns:
        Hydrator: Callable building an instance from a row
    """
    from_row = getattr(model, "from_row", None)
    if callable(from_row):
        return from_row
    if isinstance(model, type) and issubclass(model, BaseModel):
        return lambda row: _hydrate_pydantic(model, row)
    if dataclasses.is_dataclass(model):
        return lambda row: _hydrate_dataclass(model, row)
    if isinstance(model, type) and issubclass(model, dict):
        return lambda row: model(row)
    return lambda row: _hydrate_plain(model, row)


def to_mapping(instance: Any) -> Dict[str, Any]:
    """
    Field values of a model instance as a plain dict

    Args:
        instance: Model instance (pydantic, dataclass, mapping or plain object)

    Returns:
        Dict[str, Any]: Shallow copy of its fields
    """
    if isinstance(instance, BaseModel):
        return instance.model_dump()
    if dataclasses.is_dataclass(instance) and not isinstance(instance, type):
        return {field.name: getattr(instance, field.name) for field in dataclasses.fields(instance)}
    if isinstance(instance, Mapping):
        return dict(instance)
    if not hasattr(instance, "__dict__"):
        slots = type(instance).__slots__
        if isinstance(slots, str):
            slots = (slots,)
        return {name: getattr(instance, name) for name in slots if hasattr(instance, name)}
    return dict(vars(instance))


def _hydrate_pydantic(model: type, row: Row) -> Any:
    try:
        return model.model_validate(dict(row))
    except ValidationError as e:
        missing = [
            ".".join(str(loc) for loc in error["loc"])
            for error in e.errors()
            if error["type"] == "missing"
        ]
        raise HydrationError(
            f"Cannot build {model.__name__} from row: {e}",
            model=model,
            missing=missing,
        ) from e


def _hydrate_dataclass(model: type, row: Row) -> Any:
    kwargs = {}
    missing = []
    for field in dataclasses.fields(model):
        if not field.init:
            continue
        if field.name in row:
            kwargs[field.name] = row[field.name]
        elif field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING:
            missing.append(field.name)

    if missing:
        raise HydrationError(
            f"Cannot build {model.__name__} from row, missing fields: {', '.join(missing)}",
            model=model,
            missing=missing,
        )
    return model(**kwargs)


def _hydrate_plain(model: type, row: Row) -> Any:
    # Constructor is bypassed; fields are assigned after creation
    instance = object.__new__(model)
    if hasattr(instance, "__dict__"):
        instance.__dict__.update(row)
        return instance

    # __slots__ class: every column needs a slot of the same name
    unknown = []
    for column, value in row.items():
        try:
            setattr(instance, column, value)
        except AttributeError:
            unknown.append(column)
    if unknown:
        raise HydrationError(
            f"Cannot build {model.__name__} from row, no slot for columns: {', '.join(unknown)}",
            model=model,
        )
    return instance
