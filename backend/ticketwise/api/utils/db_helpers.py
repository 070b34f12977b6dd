"""
Database Helpers - shared lookups used by the routes
"""
from typing import Type, TypeVar, Optional, Any, List
from sqlalchemy.orm import Session
from fastapi import HTTPException

T = TypeVar('T')


def get_by_id(
    db: Session,
    model: Type[T],
    entity_id: Any,
    raise_not_found: bool = True,
    error_message: str = None
) -> Optional[T]:
    """
    Looks an entity up by primary key.

    Args:
        db: Database session
        model: SQLAlchemy model class
        entity_id: Primary key
        raise_not_found: If True, raises HTTPException 404 when missing
        error_message: Custom error message (optional)

    Returns:
        The entity or None

    Raises:
        HTTPException 404 if raise_not_found=True and the entity does not exist

    Usage:
        sheet = get_by_id(db, Sheet, sheet_id)
        family = get_by_id(db, Family, family_id, error_message="Family not found")
    """
    entity = db.get(model, entity_id)

    if not entity and raise_not_found:
        msg = error_message or f"{model.__name__} not found"
        raise HTTPException(status_code=404, detail=msg)

    return entity


def validate_unique(
    db: Session,
    model: Type[T],
    field_name: str,
    field_value: Any,
    exclude_id: Any = None,
    display_name: str = None
) -> None:
    """
    Checks a field value is not used by another row.

    Args:
        db: Database session
        model: Model class
        field_name: Column to check
        field_value: Value to check
        exclude_id: ID to ignore (updates)
        display_name: Field name shown in the message

    Raises:
        HTTPException 409 if the value already exists

    Usage:
        validate_unique(db, User, "email", email)
        validate_unique(db, User, "username", username, exclude_id=user.id)
    """
    field = getattr(model, field_name)
    query = db.query(model).filter(field == field_value)

    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)

    if query.first():
        name = display_name or field_name
        raise HTTPException(status_code=409, detail=f"{name} already exists")


def bulk_get(
    db: Session,
    model: Type[T],
    ids: List[Any],
    field_name: str = None
) -> List[T]:
    """
    Fetches several entities at once, all of them must exist.

    Raises:
        HTTPException 404 listing the missing IDs
    """
    if not ids:
        return []

    entities = db.query(model).filter(model.id.in_(ids)).all()

    found_ids = {e.id for e in entities}
    missing = [i for i in ids if i not in found_ids]

    if missing:
        name = field_name or model.__name__
        raise HTTPException(
            status_code=404,
            detail=f"{name}(s) not found: {missing}"
        )

    return entities
