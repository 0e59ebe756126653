import itertools

import pytest

from configuration.services import get_global_settings
from payouts.models import Payout
from sellers.models import Seller
from sellers.services import register_seller, verify_seller

_order_refs = itertools.count(1)


@pytest.fixture
def individual_seller(db):
    return register_seller(
        seller_type=Seller.SellerType.INDIVIDUAL,
        name="Boutique Marie",
        email="marie@test.com",
        first_name="Marie",
        last_name="Curie",
    )


@pytest.fixture
def company_seller(db):
    return register_seller(
        seller_type=Seller.SellerType.COMPANY,
        name="Atelier SARL",
        email="contact@atelier.test",
        company_name="Atelier SARL",
        vat_number="FR12345678901",
        legal_form=Seller.LegalForm.LLC,
    )


@pytest.fixture
def verified_seller(individual_seller):
    return verify_seller(individual_seller)


@pytest.fixture
def global_settings(db):
    return get_global_settings()


@pytest.fixture
def make_payout(db):
    """Factory writing payouts directly, in any status."""

    def _make(seller, amount=1000, status=Payout.Status.HOLD, **kwargs):
        kwargs.setdefault("order_reference", f"ORD-{next(_order_refs):05d}")
        return Payout.objects.create(seller=seller, amount=amount, status=status, **kwargs)

    return _make
