import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from ticketwise.api.deps import get_db, get_current_user
from ticketwise.api.utils import get_by_id, apply_search_filter, update_entity
from ticketwise.models.teacher import Teacher
from ticketwise.models.user import User
from ticketwise.schemas.teacher import TeacherCreate, TeacherUpdate, TeacherResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[TeacherResponse])
def list_teachers(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    query = apply_search_filter(
        db.query(Teacher), search,
        Teacher.first_name, Teacher.last_name, Teacher.email
    )
    return query.order_by(Teacher.last_name, Teacher.first_name).all()


@router.get("/{teacher_id}", response_model=TeacherResponse)
def get_teacher(
    teacher_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_by_id(db, Teacher, teacher_id, error_message="Teacher not found")


@router.post("", response_model=TeacherResponse, status_code=201)
def create_teacher(
    data: TeacherCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    teacher = Teacher(
        id=f"teacher-{uuid.uuid4().hex}",
        **data.model_dump(exclude={"name"})
    )
    db.add(teacher)
    db.commit()
    db.refresh(teacher)

    logger.info(f"[TEACHERS] Teacher {teacher.name} created")
    return teacher


@router.put("/{teacher_id}", response_model=TeacherResponse)
def update_teacher(
    teacher_id: str,
    data: TeacherUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    teacher = get_by_id(db, Teacher, teacher_id, error_message="Teacher not found")

    if "specializations" in data.model_fields_set and not data.specializations:
        raise HTTPException(status_code=400, detail="At least one specialization is required")

    return update_entity(db, teacher, data)


@router.delete("/{teacher_id}", status_code=204)
def delete_teacher(
    teacher_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    teacher = get_by_id(db, Teacher, teacher_id, error_message="Teacher not found")
    db.delete(teacher)
    db.commit()
    logger.info(f"[TEACHERS] Teacher {teacher_id} deleted")
    return None
