from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from app.models.farmer import Farmer
from app.schemas.farmer import FarmerCreate, FarmerUpdate


class FarmerRepository:
    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        branch_ids: list[UUID] | None = None,
        search: str | None = None,
        branch_id: UUID | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Farmer)
        # None means unrestricted; an empty list matches nothing
        if branch_ids is not None:
            query = query.filter(Farmer.branch_id.in_(branch_ids))
        if branch_id is not None:
            query = query.filter(Farmer.branch_id == branch_id)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(func.lower(Farmer.name).like(pattern), Farmer.phone.like(f"%{search}%"))
            )
        return query

    def get_all(
        self,
        branch_ids: list[UUID] | None = None,
        search: str | None = None,
        branch_id: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Farmer]:
        """List farmers by name, optionally restricted to branches or a search term.

        The search term matches the name case-insensitively or the phone number.
        """
        return (
            self._filtered(branch_ids, search, branch_id)
            .order_by(Farmer.name.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(
        self,
        branch_ids: list[UUID] | None = None,
        search: str | None = None,
        branch_id: UUID | None = None,
    ) -> int:
        return self._filtered(branch_ids, search, branch_id).count()

    def get_by_id(self, farmer_id: UUID) -> Farmer | None:
        return self.db.query(Farmer).filter(Farmer.id == farmer_id).first()

    def get_by_ids(self, farmer_ids: list[UUID]) -> list[Farmer]:
        if not farmer_ids:
            return []
        return self.db.query(Farmer).filter(Farmer.id.in_(farmer_ids)).all()

    def create(self, data: FarmerCreate) -> Farmer:
        farmer = Farmer(**data.model_dump())
        self.db.add(farmer)
        self.db.commit()
        self.db.refresh(farmer)
        return farmer

    def update(self, farmer_id: UUID, data: FarmerUpdate) -> Farmer | None:
        farmer = self.get_by_id(farmer_id)
        if not farmer:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(farmer, key, value)
        self.db.commit()
        self.db.refresh(farmer)
        return farmer

    def delete(self, farmer_id: UUID) -> bool:
        farmer = self.get_by_id(farmer_id)
        if not farmer:
            return False
        self.db.delete(farmer)
        self.db.commit()
        return True
