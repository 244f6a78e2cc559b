from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel
from marketplace.domain.errors import NotFoundError
from marketplace.repos.user_repo import UserRepo
from marketplace.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        if payload.id:
            existing = self.repo.get_user(payload.id)
            if existing:
                return UserRead.model_validate(existing)

        user = UserModel(name=payload.name, email=payload.email, role=payload.role)
        if payload.id:
            user.id = payload.id
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)

    def require_role(self, user_id: str, *roles: str) -> UserModel:
        """Identity gate: the user must exist and hold one of ``roles``."""
        user = self.repo.get_user(user_id)
        if not user:
            raise PermissionError("Unknown user")
        if roles and user.role not in roles:
            raise PermissionError(f"Operation requires role: {', '.join(roles)}")
        return user
