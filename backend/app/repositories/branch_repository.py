from uuid import UUID

from sqlalchemy.orm import Session

from app.models.branch import Branch
from app.schemas.branch import BranchCreate


class BranchRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self, branch_ids: list[UUID] | None = None, skip: int = 0, limit: int = 100
    ) -> list[Branch]:
        query = self.db.query(Branch)
        if branch_ids is not None:
            query = query.filter(Branch.id.in_(branch_ids))
        return query.order_by(Branch.name.asc()).offset(skip).limit(limit).all()

    def get_by_id(self, branch_id: UUID) -> Branch | None:
        return self.db.query(Branch).filter(Branch.id == branch_id).first()

    def get_by_code(self, code: str) -> Branch | None:
        return self.db.query(Branch).filter(Branch.code == code).first()

    def create(self, data: BranchCreate) -> Branch:
        branch = Branch(**data.model_dump())
        self.db.add(branch)
        self.db.commit()
        self.db.refresh(branch)
        return branch
