"""
Tests for terms and conditions: CRUD, PDF uploads, toggles and bulk actions.
"""
import io
import os
from unittest.mock import patch

from app.extensions import db
from app.models.terms import TermsAndCondition

PDF_BYTES = b'%PDF-1.4 minimal test document'


def create_terms(client, auth, **overrides):
    payload = {'title': 'Booking Terms', 'content': 'Payments are non-refundable.'}
    payload.update(overrides)
    return client.post('/api/v1/terms', json=payload, headers=auth)


def upload_terms(client, auth, filename='Booking Terms (v2).pdf', body=PDF_BYTES, **fields):
    data = {'title': 'Booking Terms', 'content': 'See attached PDF.'}
    data.update(fields)
    data['pdf_file'] = (io.BytesIO(body), filename)
    return client.post('/api/v1/terms', data=data, content_type='multipart/form-data', headers=auth)


class TestTermsCrud:

    def test_create_json(self, client, auth):
        resp = create_terms(client, auth)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body['message'] == 'Terms and conditions created successfully.'
        assert body['data']['is_active'] is True
        assert body['data']['has_pdf'] is False
        assert body['data']['pdf_url'] is None
        assert body['data']['pdf_file_name'] is None

    def test_create_inactive(self, client, auth):
        resp = create_terms(client, auth, is_active=False)
        assert resp.get_json()['data']['is_active'] is False

    def test_title_and_content_required(self, client, auth):
        resp = client.post('/api/v1/terms', json={'title': ''}, headers=auth)
        assert resp.status_code == 422
        fields = {d['field'] for d in resp.get_json()['error']['details']}
        assert fields == {'title', 'content'}

    def test_create_with_pdf(self, app, client, auth):
        resp = upload_terms(client, auth, is_active='false')

        assert resp.status_code == 201
        data = resp.get_json()['data']
        assert data['has_pdf'] is True
        assert data['is_active'] is False
        assert data['pdf_file_name'] == 'Booking Terms (v2).pdf'
        assert data['pdf_file_path'].startswith('terms_conditions/')
        assert data['pdf_file_path'].endswith('_BookingTermsv2.pdf')
        assert data['pdf_url'].startswith('http://localhost/storage/terms_conditions/')
        assert os.path.isfile(os.path.join(app.config['UPLOAD_FOLDER'], data['pdf_file_path']))

    def test_rejects_non_pdf(self, client, auth):
        resp = upload_terms(client, auth, filename='terms.docx')
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'pdf_file'
        assert TermsAndCondition.query.count() == 0

    def test_rejects_oversized_pdf(self, client, auth):
        resp = upload_terms(client, auth, body=b'0' * (10 * 1024 * 1024 + 1))
        assert resp.status_code == 422
        assert 'kilobytes' in resp.get_json()['error']['details'][0]['message']

    def test_get_missing(self, client, auth):
        resp = client.get('/api/v1/terms/12', headers=auth)
        assert resp.status_code == 404
        assert resp.get_json()['error']['message'] == 'Terms and conditions not found.'

    def test_partial_update(self, client, auth):
        terms_id = create_terms(client, auth).get_json()['data']['id']

        resp = client.patch(f'/api/v1/terms/{terms_id}', json={'title': 'Updated Terms'}, headers=auth)

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['title'] == 'Updated Terms'
        assert data['content'] == 'Payments are non-refundable.'
        assert data['is_active'] is True

    def test_update_replaces_pdf(self, app, client, auth):
        first = upload_terms(client, auth, filename='old.pdf').get_json()['data']
        old_path = os.path.join(app.config['UPLOAD_FOLDER'], first['pdf_file_path'])

        resp = client.post(
            f"/api/v1/terms/{first['id']}",
            data={'pdf_file': (io.BytesIO(PDF_BYTES), 'new.pdf')},
            content_type='multipart/form-data',
            headers=auth,
        )

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['pdf_file_name'] == 'new.pdf'
        assert data['title'] == 'Booking Terms'
        assert not os.path.exists(old_path)

    def test_same_name_pdf_replacement_stays_viewable(self, client, auth):
        with patch('app.utils.storage.time') as mock_time:
            mock_time.time.return_value = 1767225600
            first = upload_terms(client, auth, filename='terms.pdf').get_json()['data']
            resp = client.post(
                f"/api/v1/terms/{first['id']}",
                data={'pdf_file': (io.BytesIO(b'%PDF-1.4 revised'), 'terms.pdf')},
                content_type='multipart/form-data',
                headers=auth,
            )

        assert resp.status_code == 200
        assert resp.get_json()['data']['pdf_file_path'] == 'terms_conditions/1767225600_terms.pdf'

        pdf = client.get(f"/api/v1/terms/{first['id']}/pdf", headers=auth)
        assert pdf.status_code == 200
        assert pdf.data == b'%PDF-1.4 revised'
        pdf.close()

    def test_delete_removes_pdf(self, app, client, auth):
        data = upload_terms(client, auth).get_json()['data']
        path = os.path.join(app.config['UPLOAD_FOLDER'], data['pdf_file_path'])

        resp = client.delete(f"/api/v1/terms/{data['id']}", headers=auth)

        assert resp.status_code == 200
        assert db.session.get(TermsAndCondition, data['id']) is None
        assert not os.path.exists(path)

    def test_toggle_status(self, client, auth):
        terms_id = create_terms(client, auth).get_json()['data']['id']

        resp = client.patch(f'/api/v1/terms/{terms_id}/toggle-status', headers=auth)
        assert resp.get_json()['data'] == {'id': terms_id, 'is_active': False}

        resp = client.post(f'/api/v1/terms/{terms_id}/toggle-status', headers=auth)
        assert resp.get_json()['data'] == {'id': terms_id, 'is_active': True}


class TestTermsPdf:

    def test_view_pdf_inline(self, client, auth):
        terms_id = upload_terms(client, auth, filename='terms.pdf').get_json()['data']['id']

        resp = client.get(f'/api/v1/terms/{terms_id}/pdf', headers=auth)

        assert resp.status_code == 200
        assert resp.mimetype == 'application/pdf'
        assert resp.headers['Content-Disposition'].startswith('inline')
        assert resp.data == PDF_BYTES
        resp.close()

    def test_terms_without_pdf(self, client, auth):
        terms_id = create_terms(client, auth).get_json()['data']['id']
        resp = client.get(f'/api/v1/terms/{terms_id}/pdf', headers=auth)
        assert resp.status_code == 404
        assert resp.get_json()['error']['message'] == 'PDF file not found.'

    def test_pdf_missing_on_disk(self, app, client, auth):
        data = upload_terms(client, auth).get_json()['data']
        os.remove(os.path.join(app.config['UPLOAD_FOLDER'], data['pdf_file_path']))

        resp = client.get(f"/api/v1/terms/{data['id']}/pdf", headers=auth)
        assert resp.status_code == 404
        assert resp.get_json()['error']['message'] == 'PDF file not found on server.'


class TestTermsListAndBulk:

    def test_filters(self, client, auth):
        create_terms(client, auth, title='Booking Terms')
        create_terms(client, auth, title='Refund Policy', content='Refunds within 30 days.', is_active=False)

        def titles(query):
            resp = client.get(f'/api/v1/terms{query}', headers=auth)
            return sorted(t['title'] for t in resp.get_json()['data'])

        assert titles('') == ['Booking Terms', 'Refund Policy']
        assert titles('?status=active') == ['Booking Terms']
        assert titles('?status=inactive') == ['Refund Policy']
        assert titles('?search=30%20days') == ['Refund Policy']

    def test_sort_by_title(self, client, auth):
        for title in ('B', 'C', 'A'):
            create_terms(client, auth, title=title)
        resp = client.get('/api/v1/terms?sort_by=title&sort_order=asc', headers=auth)
        assert [t['title'] for t in resp.get_json()['data']] == ['A', 'B', 'C']

    def test_bulk_deactivate(self, client, auth):
        ids = [create_terms(client, auth, title=f'T{i}').get_json()['data']['id'] for i in range(3)]

        resp = client.post('/api/v1/terms/bulk', json={'action': 'deactivate', 'ids': ids[:2] + [999]}, headers=auth)

        assert resp.status_code == 200
        assert resp.get_json()['data'] == {'action': 'deactivate', 'processed': 2, 'total': 3}
        active = [t.id for t in TermsAndCondition.query.filter_by(is_active=True)]
        assert active == [ids[2]]

    def test_bulk_delete(self, client, auth):
        ids = [create_terms(client, auth, title=f'T{i}').get_json()['data']['id'] for i in range(2)]

        resp = client.post('/api/v1/terms/bulk', json={'action': 'delete', 'ids': ids}, headers=auth)

        assert resp.get_json()['message'] == 'Bulk delete completed successfully.'
        assert TermsAndCondition.query.count() == 0

    def test_bulk_unknown_ids(self, client, auth):
        resp = client.post('/api/v1/terms/bulk', json={'action': 'activate', 'ids': [5, 6]}, headers=auth)
        assert resp.status_code == 404

    def test_bulk_invalid_action(self, client, auth):
        resp = client.post('/api/v1/terms/bulk', json={'action': 'archive', 'ids': [1]}, headers=auth)
        assert resp.status_code == 422

    def test_bulk_requires_ids(self, client, auth):
        resp = client.post('/api/v1/terms/bulk', json={'action': 'activate', 'ids': []}, headers=auth)
        assert resp.status_code == 422
