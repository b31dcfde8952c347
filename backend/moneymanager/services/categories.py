import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from moneymanager.models.schemas import Category, Profile
from moneymanager.services.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db):
        self.db = db

    def add(self, owner: Profile, name: str, icon: Optional[str], type: str) -> Category:
        if self.db.exists("categories", {"name": name, "profile_id": owner.id}):
            raise ConflictError(f"Category with the name: {name} already exists")

        try:
            created = self.db.insert("categories", {
                "name": name,
                "icon": icon,
                "type": type,
                "profile_id": owner.id,
            })
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Category with the name: {name} already exists")

        return Category(**created)

    def list_for_owner(self, owner: Profile) -> List[Category]:
        return [Category(**doc) for doc in self.db.find("categories", {"profile_id": owner.id})]

    def list_by_type(self, owner: Profile, type: str) -> List[Category]:
        docs = self.db.find("categories", {"profile_id": owner.id, "type": type})
        return [Category(**doc) for doc in docs]

    def update(self, owner: Profile, category_id: str, name: str, icon: Optional[str], type: str) -> Category:
        existing = self.db.find_one("categories", {"id": category_id, "profile_id": owner.id})
        if not existing:
            raise NotFoundError(f"Category with id: {category_id} not found")

        clash = self.db.find_one("categories", {"name": name, "profile_id": owner.id})
        if clash and clash["id"] != category_id:
            raise ConflictError(f"Category with the name: {name} already exists")

        self.db.update("categories", category_id, {"name": name, "icon": icon, "type": type})
        self.db.commit()

        return Category(**self.db.find_one("categories", {"id": category_id}))
