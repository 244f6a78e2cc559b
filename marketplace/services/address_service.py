# marketplace/services/address_service.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.address import AddressModel
from marketplace.domain.checkout import AddressSnapshot, validate_address
from marketplace.domain.errors import NotFoundError, RemoteFetchError
from marketplace.domain.schemas import AddressCreate
from marketplace.repos.address_repo import AddressRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class AddressService:
    def __init__(self, db: Session):
        self.repo = AddressRepo(db)

    def list_addresses(self, user_id: str) -> list[AddressModel]:
        """Saved addresses, default one first."""
        try:
            return self.repo.list_addresses(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch addresses for {user_id}: {e}")
            raise RemoteFetchError("Failed to fetch addresses") from e

    def create_address(self, user_id: str, payload: AddressCreate) -> AddressModel:
        data = payload.model_dump()
        validate_address(AddressSnapshot(**{k: v for k, v in data.items() if k != "is_default"}))

        address = AddressModel(user_id=user_id, type="shipping", **data)
        created = self.repo.create_address(address)
        logger.info(f"Saved address {created.id} for user {user_id}")
        return created

    def get_snapshot(self, user_id: str, address_id: str) -> AddressSnapshot:
        try:
            address = self.repo.get_address(address_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch address {address_id}: {e}")
            raise RemoteFetchError("Failed to fetch addresses") from e

        if not address:
            raise NotFoundError("Address not found")
        if address.user_id != user_id:
            raise PermissionError("Address belongs to another user")

        return AddressSnapshot(**address.as_dict())
