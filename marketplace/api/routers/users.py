from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from marketplace.api.deps import HANDLED, to_http
from marketplace.data.database import get_db
from marketplace.services.user_service import UserService
from marketplace.domain.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except HANDLED as e:
        raise to_http(e)

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: str, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except HANDLED as e:
        raise to_http(e)
