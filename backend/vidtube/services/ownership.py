# vidtube/services/ownership.py
"""
Ownership-gated mutations.

Identity and ownership are matched in the same statement
(`WHERE id = ? AND owner_id = ?`), so there is no read-check-write window.
A missing row and a row owned by someone else are reported the same way:
"<Entity> not found or unauthorized" (404).
"""
from typing import Type

from tortoise import timezone
from tortoise.models import Model

from vidtube.core.errors import NotFoundError


def _not_found(model: Type[Model]) -> NotFoundError:
    return NotFoundError(f"{model.__name__} not found or unauthorized")


async def get_owned(model: Type[Model], obj_id: str, owner_id: str) -> Model:
    """
    Single conditional read of a row the actor owns.

    Used when the mutation needs the row's current state first (asset keys,
    current publish flag).
    """
    obj = await model.get_or_none(id=obj_id, owner_id=owner_id)
    if not obj:
        raise _not_found(model)
    return obj


async def update_owned(model: Type[Model], obj_id: str, owner_id: str, patch: dict, **expected) -> int:
    """
    Apply `patch` to the row only if it exists and is owned by `owner_id`.

    Extra keyword arguments are matched in the same WHERE clause, so a row
    whose state changed since it was read is not updated.

    Returns:
        Number of rows updated (always 1)

    Raises:
        NotFoundError (404): No row matched id + owner (+ expected state)
    """
    values = dict(patch)
    values["updated_at"] = timezone.now()
    updated = await model.filter(id=obj_id, owner_id=owner_id, **expected).update(**values)
    if not updated:
        raise _not_found(model)
    return updated


async def delete_owned(model: Type[Model], obj_id: str, owner_id: str) -> int:
    """
    Delete the row only if it exists and is owned by `owner_id`.

    Raises:
        NotFoundError (404): No row matched id + owner
    """
    deleted = await model.filter(id=obj_id, owner_id=owner_id).delete()
    if not deleted:
        raise _not_found(model)
    return deleted
