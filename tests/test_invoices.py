"""
Tests for invoice line packages and invoice terms (invoice database).
"""
from app.extensions import db
from app.models.invoice import InvoicePackage, InvoiceTerm


def create_invoice_package(client, auth, **overrides):
    payload = {
        'sku': 'BOR-3D2N',
        'items': 'Boracay 3D2N',
        'category': 'Tour Package',
        'price': '12500.00',
    }
    payload.update(overrides)
    return client.post('/api/v1/invoice-packages', json=payload, headers=auth)


class TestInvoicePackages:

    def test_create(self, client, auth):
        resp = create_invoice_package(client, auth)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body['message'] == 'Invoice package created successfully.'
        assert body['data']['sku'] == 'BOR-3D2N'
        assert body['data']['quantity'] == 1
        assert body['data']['price'] == 12500.0

    def test_create_with_items_only(self, client, auth):
        resp = create_invoice_package(client, auth, sku=None, category=None)
        assert resp.status_code == 201
        assert resp.get_json()['data']['sku'] is None

    def test_sku_or_items_required(self, client, auth):
        resp = create_invoice_package(client, auth, sku='', items='')
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'sku'

    def test_price_must_be_positive(self, client, auth):
        assert create_invoice_package(client, auth, price='0').status_code == 422
        assert create_invoice_package(client, auth, price='abc').status_code == 422

    def test_price_required(self, client, auth):
        resp = client.post('/api/v1/invoice-packages', json={'sku': 'X'}, headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0] == {
            'field': 'price',
            'message': 'Missing data for required field.',
            'code': 'required',
        }

    def test_list_all(self, client, auth):
        create_invoice_package(client, auth, sku='B')
        create_invoice_package(client, auth, sku='A')

        resp = client.get('/api/v1/invoice-packages', headers=auth)
        assert [p['sku'] for p in resp.get_json()['data']] == ['B', 'A']

    def test_paginated_search_and_sort(self, client, auth):
        create_invoice_package(client, auth, sku='BOR-3D2N', category='Tour Package')
        create_invoice_package(client, auth, sku='VAN-RENT', items='Van rental', category='Transport')
        create_invoice_package(client, auth, sku='PAL-4D3N', items='Palawan 4D3N', category='Tour Package')

        body = client.get(
            '/api/v1/invoice-packages/paginated?search=tour&sortBy=sku&sortDir=asc',
            headers=auth,
        ).get_json()
        assert [p['sku'] for p in body['data']] == ['BOR-3D2N', 'PAL-4D3N']
        assert body['meta']['per_page'] == 10

        body = client.get('/api/v1/invoice-packages/paginated?sortBy=sku&sortDir=desc', headers=auth).get_json()
        assert [p['sku'] for p in body['data']] == ['VAN-RENT', 'PAL-4D3N', 'BOR-3D2N']

    def test_paginated_ignores_unknown_sort_column(self, client, auth):
        create_invoice_package(client, auth)
        resp = client.get('/api/v1/invoice-packages/paginated?sortBy=password', headers=auth)
        assert resp.status_code == 200
        assert resp.get_json()['meta']['total'] == 1

    def test_update_keeps_quantity_when_omitted(self, client, auth):
        package_id = create_invoice_package(client, auth, quantity=4).get_json()['data']['id']

        resp = client.put(f'/api/v1/invoice-packages/{package_id}', json={
            'sku': 'BOR-4D3N',
            'items': 'Boracay 4D3N',
            'category': 'Tour Package',
            'price': 15000,
        }, headers=auth)

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['sku'] == 'BOR-4D3N'
        assert data['quantity'] == 4
        assert data['price'] == 15000.0

    def test_update_requires_all_core_fields(self, client, auth):
        package_id = create_invoice_package(client, auth).get_json()['data']['id']
        resp = client.put(f'/api/v1/invoice-packages/{package_id}', json={'price': 100}, headers=auth)
        assert resp.status_code == 422
        fields = {d['field'] for d in resp.get_json()['error']['details']}
        assert {'sku', 'items', 'category'} <= fields

    def test_get_and_delete(self, client, auth):
        package_id = create_invoice_package(client, auth).get_json()['data']['id']

        assert client.get(f'/api/v1/invoice-packages/{package_id}', headers=auth).status_code == 200
        assert client.delete(f'/api/v1/invoice-packages/{package_id}', headers=auth).status_code == 200
        assert db.session.get(InvoicePackage, package_id) is None

        resp = client.get(f'/api/v1/invoice-packages/{package_id}', headers=auth)
        assert resp.status_code == 404
        assert resp.get_json()['error']['message'] == 'Invoice package not found.'


class TestInvoiceTerms:

    def test_crud(self, client, auth):
        resp = client.post('/api/v1/invoice-terms', json={
            'category': 'Payment',
            'details': '50% downpayment upon booking.',
        }, headers=auth)
        assert resp.status_code == 201
        term_id = resp.get_json()['data']['id']

        resp = client.put(f'/api/v1/invoice-terms/{term_id}', json={
            'category': 'Payment',
            'details': 'Full payment 7 days before travel.',
        }, headers=auth)
        assert resp.status_code == 200
        assert resp.get_json()['data']['details'] == 'Full payment 7 days before travel.'

        listing = client.get('/api/v1/invoice-terms', headers=auth).get_json()['data']
        assert [t['id'] for t in listing] == [term_id]

        assert client.delete(f'/api/v1/invoice-terms/{term_id}', headers=auth).status_code == 200
        assert InvoiceTerm.query.count() == 0

    def test_fields_required(self, client, auth):
        resp = client.post('/api/v1/invoice-terms', json={'category': 'Payment'}, headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'details'

    def test_update_missing_term(self, client, auth):
        resp = client.put('/api/v1/invoice-terms/42', json={'category': 'A', 'details': 'B'}, headers=auth)
        assert resp.status_code == 404
