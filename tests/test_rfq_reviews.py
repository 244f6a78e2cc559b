"""Tests for quotations, reviews and role gating."""

from decimal import Decimal

import pytest

from marketplace.data.models.user import UserModel
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.domain.schemas import ProductCreate, ReviewIn, RFQCreate, RFQResponseIn
from marketplace.services.product_service import ProductService
from marketplace.services.review_service import ReviewService, aggregate_ratings
from marketplace.services.rfq_service import RFQService, quoted_total


def rfq_request(product_id, quantity=500):
    return RFQCreate(
        product_id=product_id,
        quantity=quantity,
        message="Need galvanised finish",
        company_name="Asha Traders",
        contact_person="Asha Rao",
        email="asha@example.com",
    )


class TestRFQ:
    def test_quoted_total(self):
        assert quoted_total(Decimal("8.25"), 500) == Decimal("4125.00")
        assert quoted_total(None, 500) is None

    def test_buyer_asks_seller_quotes(self, db, buyer, seller, make_product):
        product = make_product("10.00")
        svc = RFQService(db)

        rfq = svc.create_rfq(buyer.id, rfq_request(product.id))
        assert rfq["seller_id"] == seller.id
        assert rfq["status"] == "pending"
        assert rfq["quoted_total"] is None

        answered = svc.respond(seller.id, rfq["id"], RFQResponseIn(quoted_price=Decimal("8.25"), response="Can ship in 10 days"))

        assert answered["status"] == "responded"
        assert answered["quoted_total"] == Decimal("4125.00")
        assert answered["response_date"] is not None

    def test_only_owning_seller_responds(self, db, buyer, make_product):
        product = make_product("10.00")
        other = UserModel(id="seller-2", name="Rival", role="seller")
        db.add(other)
        db.commit()

        rfq = RFQService(db).create_rfq(buyer.id, rfq_request(product.id))

        with pytest.raises(PermissionError):
            RFQService(db).respond(other.id, rfq["id"], RFQResponseIn(quoted_price=Decimal("9"), response="ok"))

    def test_sellers_cannot_request_quotes(self, db, seller, make_product):
        product = make_product("10.00")
        with pytest.raises(PermissionError):
            RFQService(db).create_rfq(seller.id, rfq_request(product.id))

    def test_listing_by_role(self, db, buyer, seller, make_product):
        product = make_product("10.00")
        svc = RFQService(db)
        svc.create_rfq(buyer.id, rfq_request(product.id))

        assert len(svc.list_rfqs(buyer.id)) == 1
        assert len(svc.list_rfqs(seller.id)) == 1

    def test_unknown_product(self, db, buyer):
        with pytest.raises(NotFoundError):
            RFQService(db).create_rfq(buyer.id, rfq_request("missing"))


class TestRatings:
    def test_no_reviews(self):
        assert aggregate_ratings([]) == (0.0, 0)

    def test_average_rounded_to_one_decimal(self):
        assert aggregate_ratings([5, 4, 4]) == (4.3, 3)
        assert aggregate_ratings([4, 5]) == (4.5, 2)

    def test_one_review_per_buyer(self, db, buyer, make_product):
        product = make_product("10.00")
        svc = ReviewService(db)
        svc.create_review(buyer.id, product.id, ReviewIn(rating=4))

        with pytest.raises(ValidationError):
            svc.create_review(buyer.id, product.id, ReviewIn(rating=5))

    def test_product_rating(self, db, buyer, make_product):
        product = make_product("10.00")
        other = UserModel(id="buyer-2", name="Other", role="buyer")
        db.add(other)
        db.commit()

        svc = ReviewService(db)
        svc.create_review(buyer.id, product.id, ReviewIn(rating=5))
        svc.create_review(other.id, product.id, ReviewIn(rating=2))

        assert svc.product_rating(product.id) == {
            "product_id": product.id,
            "average_rating": 3.5,
            "review_count": 2,
        }

    def test_update_own_review_only(self, db, buyer, make_product):
        product = make_product("10.00")
        svc = ReviewService(db)
        review = svc.create_review(buyer.id, product.id, ReviewIn(rating=2))

        updated = svc.update_review(buyer.id, review.id, ReviewIn(rating=4, review_text="Better batch"))
        assert updated.rating == 4
        assert updated.updated_at is not None

        with pytest.raises(PermissionError):
            svc.update_review("seller-1", review.id, ReviewIn(rating=1))


class TestProducts:
    def test_buyers_cannot_list_products(self, db, buyer):
        payload = ProductCreate(title="Bolts", category="hardware", price=Decimal("10"))
        with pytest.raises(PermissionError):
            ProductService(db).create_product(buyer.id, payload)

    def test_seller_lists_product(self, db, seller):
        payload = ProductCreate(title="Bolts", category="hardware", price=Decimal("10"), min_order=100)
        product = ProductService(db).create_product(seller.id, payload)

        assert product.status == "active"
        assert [p.id for p in ProductService(db).list_products(seller_id=seller.id)] == [product.id]
