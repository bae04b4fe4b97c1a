from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.repos.base_repo import BaseRepo


class UserRepo(BaseRepo):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_user(self, subject_id: str) -> UserModel | None:
        return self.db.get(UserModel, subject_id)

    def add_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        return user

    def refresh(self, user: UserModel) -> UserModel:
        self.db.refresh(user)
        return user
