"""
Update Helpers - applying partial updates to entities
"""
from typing import TypeVar, List
from sqlalchemy import inspect
from sqlalchemy.orm import Session
from pydantic import BaseModel

T = TypeVar('T')


def update_entity(
    db: Session,
    entity: T,
    update_data: BaseModel,
    exclude_fields: List[str] = None,
    commit: bool = True
) -> T:
    """
    Copies the fields explicitly set on a Pydantic schema onto the entity.

    Primary keys are never rewritten, and an explicit null sent for a
    NOT NULL column leaves the stored value untouched.

    Args:
        db: Database session
        entity: Entity to update
        update_data: Pydantic schema with the changes
        exclude_fields: Fields to ignore
        commit: Commit right away

    Returns:
        The updated entity

    Usage:
        teacher = update_entity(db, teacher, teacher_update)
    """
    columns = inspect(type(entity)).columns
    skipped = set(exclude_fields or [])
    data = update_data.model_dump(exclude_unset=True)

    for field, value in data.items():
        if field in skipped or field not in columns:
            continue
        column = columns[field]
        if column.primary_key or (value is None and not column.nullable):
            continue
        setattr(entity, field, value)

    if commit:
        db.commit()
        db.refresh(entity)

    return entity
