import logging

from chavi import models


def create_donation(client, amount=500):
    resp = client.post('/api/donations', json={'name': 'A', 'email': 'a@b.com', 'amount': amount})
    assert resp.status_code == 200
    return resp.json()['id']


def test_create_order_for_client_amount(client, gateway, store):
    resp = client.post('/api/create-order', json={'amount': 250})
    assert resp.status_code == 200
    body = resp.json()
    assert body['key'] == 'rzp_test_key'
    assert body['amount'] == 25000
    assert body['currency'] == 'INR'

    # what the gateway recorded matches the amount we asked for
    recorded = gateway.orders[body['orderId']]
    assert recorded['amount'] == 25000
    assert recorded['currency'] == 'INR'
    assert gateway.calls[0]['receipt'].startswith('rcpt_')

    order = store.get_order(body['orderId'])
    assert order.amount == 25000
    assert order.donation_id is None
    assert order.status == models.ORDER_CREATED


def test_create_order_rejects_bad_amount_before_gateway(client, gateway):
    for payload in ({}, {'amount': 0}, {'amount': -10}, {'amount': 'abc'}, {'amount': 0.001},
                    {'amount': 1e307}):
        resp = client.post('/api/create-order', json=payload)
        assert resp.status_code == 400, payload
        assert resp.json() == {'error': 'Invalid amount'}
    assert gateway.calls == []


def test_create_order_gateway_failure(client, gateway, store):
    gateway.fail = True
    resp = client.post('/api/create-order', json={'amount': 100})
    assert resp.status_code == 500
    assert resp.json() == {'error': 'Failed to create order'}


def test_create_order_uses_stored_donation_amount(client, gateway, store):
    donation_id = create_donation(client, amount=750)
    resp = client.post('/api/create-order', json={'donationId': donation_id})
    assert resp.status_code == 200
    body = resp.json()
    assert body['amount'] == 75000
    assert gateway.calls[0]['receipt'] == f'donation_{donation_id}'
    assert gateway.calls[0]['notes'] == {'donation_id': str(donation_id)}

    donation = store.get_donation(donation_id)
    assert donation.status == models.ORDER_CREATED
    assert donation.order_id == body['orderId']


def test_create_order_rejects_tampered_amount(client, gateway):
    donation_id = create_donation(client, amount=750)
    resp = client.post('/api/create-order', json={'donationId': donation_id, 'amount': 1})
    assert resp.status_code == 400
    assert gateway.calls == []

    # matching amount is fine
    resp = client.post('/api/create-order', json={'donationId': donation_id, 'amount': '750'})
    assert resp.status_code == 200


def test_create_order_unknown_donation(client, gateway):
    resp = client.post('/api/create-order', json={'donationId': 42, 'amount': 10})
    assert resp.status_code == 400
    assert resp.json() == {'error': 'Unknown donation'}
    assert gateway.calls == []


def test_verify_payment_with_valid_signature(client, store, sign):
    donation_id = create_donation(client)
    order_id = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']

    payload = {'paymentId': 'pay_123', 'orderId': order_id, 'signature': sign(order_id, 'pay_123')}
    resp = client.post('/api/verify-payment', json=payload)
    assert resp.status_code == 200
    assert resp.json() == {'success': True}

    order = store.get_order(order_id)
    assert order.status == models.VERIFIED
    assert order.payment_id == 'pay_123'
    donation = store.get_donation(donation_id)
    assert donation.status == models.VERIFIED
    assert donation.payment_id == 'pay_123'


def test_verify_payment_accepts_checkout_field_names(client, sign):
    order_id = client.post('/api/create-order', json={'amount': 10}).json()['orderId']
    payload = {
        'razorpay_payment_id': 'pay_9',
        'razorpay_order_id': order_id,
        'razorpay_signature': sign(order_id, 'pay_9'),
    }
    assert client.post('/api/verify-payment', json=payload).status_code == 200


def test_verify_payment_forged_signature(client, store):
    donation_id = create_donation(client)
    order_id = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']

    payload = {'paymentId': 'pay_123', 'orderId': order_id, 'signature': 'deadbeef' * 8}
    resp = client.post('/api/verify-payment', json=payload)
    assert resp.status_code == 400
    assert resp.json() == {'error': 'Payment verification failed'}

    assert store.get_order(order_id).status == models.VERIFICATION_FAILED
    assert store.get_donation(donation_id).status == models.VERIFICATION_FAILED


def test_verify_payment_signature_bound_to_order(client, sign):
    # a genuine signature for one order cannot confirm another
    first = client.post('/api/create-order', json={'amount': 10}).json()['orderId']
    second = client.post('/api/create-order', json={'amount': 10}).json()['orderId']
    payload = {'paymentId': 'pay_1', 'orderId': second, 'signature': sign(first, 'pay_1')}
    assert client.post('/api/verify-payment', json=payload).status_code == 400


def test_verify_payment_missing_fields(client, sign):
    full = {'paymentId': 'pay_1', 'orderId': 'order_1', 'signature': sign('order_1', 'pay_1')}
    for missing in full:
        payload = {k: v for k, v in full.items() if k != missing}
        resp = client.post('/api/verify-payment', json=payload)
        assert resp.status_code == 400
        assert resp.json() == {'error': 'Invalid payment details'}


def test_paid_donation_cannot_be_ordered_again(client, sign):
    donation_id = create_donation(client)
    order_id = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']
    client.post('/api/verify-payment', json={'paymentId': 'p', 'orderId': order_id, 'signature': sign(order_id, 'p')})

    resp = client.post('/api/create-order', json={'donationId': donation_id})
    assert resp.status_code == 400
    assert resp.json() == {'error': 'Donation already paid'}


def test_huge_stored_donation_amount_is_invalid(client, gateway):
    donation_id = create_donation(client, amount=1e307)
    resp = client.post('/api/create-order', json={'donationId': donation_id})
    assert resp.status_code == 400
    assert resp.json() == {'error': 'Invalid amount'}
    assert gateway.calls == []


def test_forged_verify_on_second_order_keeps_donation_paid(client, store, sign):
    donation_id = create_donation(client, amount=100)
    first = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']
    second = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']

    # the checkout for the first order is the one that got paid
    resp = client.post('/api/verify-payment', json={'paymentId': 'pay_1', 'orderId': first, 'signature': sign(first, 'pay_1')})
    assert resp.status_code == 200

    resp = client.post('/api/verify-payment', json={'paymentId': 'forged', 'orderId': second, 'signature': 'deadbeef' * 8})
    assert resp.status_code == 400

    donation = store.get_donation(donation_id)
    assert donation.status == models.VERIFIED
    assert donation.payment_id == 'pay_1'
    assert donation.order_id == first
    assert store.get_order(second).status == models.VERIFICATION_FAILED


def test_failed_verify_on_stale_order_leaves_donation(client, store):
    donation_id = create_donation(client, amount=100)
    first = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']
    second = client.post('/api/create-order', json={'donationId': donation_id}).json()['orderId']

    resp = client.post('/api/verify-payment', json={'paymentId': 'x', 'orderId': first, 'signature': 'deadbeef' * 8})
    assert resp.status_code == 400

    donation = store.get_donation(donation_id)
    assert donation.status == models.ORDER_CREATED
    assert donation.order_id == second


def test_order_created_but_not_stored_is_logged(client, gateway, store, caplog):
    donation_id = create_donation(client, amount=100)
    models.PaymentOrder.__table__.drop(store.engine)

    with caplog.at_level(logging.ERROR):
        resp = client.post('/api/create-order', json={'donationId': donation_id})

    assert resp.status_code == 500
    assert resp.json() == {'error': 'Failed to save record'}
    assert len(gateway.calls) == 1
    assert 'order_test_1' in caplog.text
    assert f'donation={donation_id}' in caplog.text
