import os
import sys
# ensure backend package is on path for tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from fastapi.testclient import TestClient

from chavi.config import Settings
from chavi.errors import GatewayError
from chavi.main import create_app
from chavi.razorpay_gateway import RazorpayGateway, payment_signature
from chavi.store import RecordStore

KEY_ID = 'rzp_test_key'
KEY_SECRET = 'test_secret'


class FakeGateway(RazorpayGateway):
    """Records orders in memory instead of calling Razorpay."""

    def __init__(self):
        super().__init__(KEY_ID, KEY_SECRET)
        self.orders = {}
        self.calls = []
        self.fail = False

    def create_order(self, amount, currency, receipt=None, notes=None):
        self.calls.append({'amount': amount, 'currency': currency, 'receipt': receipt, 'notes': notes})
        if self.fail:
            raise GatewayError(detail='gateway down')
        order = {
            'id': f'order_test_{len(self.orders) + 1}',
            'amount': amount,
            'currency': currency,
            'receipt': receipt,
            'status': 'created',
        }
        self.orders[order['id']] = order
        return order


def sign(order_id, payment_id):
    return payment_signature(order_id, payment_id, KEY_SECRET)


@pytest.fixture
def settings():
    return Settings(
        database_url='sqlite://',
        razorpay_key_id=KEY_ID,
        razorpay_key_secret=KEY_SECRET,
        currency='INR',
        admin_api_key=None,
        cors_origins=['*'],
    )


@pytest.fixture
def store(settings):
    return RecordStore.from_url(settings.database_url)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(settings, store, gateway):
    return create_app(settings=settings, store=store, gateway=gateway)


@pytest.fixture
def client(app):
    # context manager runs the startup check and creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture(name='sign')
def sign_fixture():
    return sign
