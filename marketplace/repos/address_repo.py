# marketplace/repos/address_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.address import AddressModel


class AddressRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_addresses(self, user_id: str) -> list[AddressModel]:
        stmt = (
            select(AddressModel)
            .where(AddressModel.user_id == user_id)
            .order_by(AddressModel.is_default.desc(), AddressModel.created_at.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_address(self, address_id: str) -> AddressModel | None:
        return self.db.get(AddressModel, address_id)

    def create_address(self, address: AddressModel) -> AddressModel:
        if address.is_default:
            #only one default per user
            self.db.execute(
                update(AddressModel)
                .where(AddressModel.user_id == address.user_id)
                .values(is_default=False)
            )
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address
