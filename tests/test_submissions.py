"""
Tests for booking form submissions: companions, answers, archive flow,
filters and payment receipt uploads.
"""
import io
import os
from datetime import datetime

import pytest

from app.extensions import db
from app.models.submission import Submission, Companion, SubmissionAnswer, TermsQuestion


SUBMISSION = {
    'package_type': 'Coron Island Hopping',
    'email': 'juan@example.com',
    'lead_guest': 'Juan Dela Cruz',
    'fb_name': 'Juan DC',
    'contact_number': '09171234567',
    'payment_date': '2026-01-05',
    'payment_amount': '2500',
}


@pytest.fixture
def question(booking_package):
    row = TermsQuestion(
        package_id=booking_package.id,
        question_text='Do you agree to the cancellation policy?',
        yes_option='I agree',
        no_option='I do not agree',
        sort_order=1,
    )
    db.session.add(row)
    db.session.commit()
    return row


def make_submission(email, created_at, archived=False, package_type='Coron Island Hopping'):
    row = Submission(
        package_type=package_type,
        email=email,
        lead_guest=email.split('@')[0].title(),
        contact_number='0917',
        archived=archived,
        created_at=created_at,
    )
    db.session.add(row)
    db.session.commit()
    return row


class TestCreateSubmission:

    def test_create_with_companions_and_answers(self, client, auth, question):
        payload = dict(
            SUBMISSION,
            companions=['Maria Dela Cruz', '  ', ' Pedro Dela Cruz '],
            answers=[{'question_id': question.id, 'answer': 'I agree'}],
        )

        resp = client.post('/api/v1/submissions', json=payload, headers=auth)

        assert resp.status_code == 201
        data = resp.get_json()['data']
        assert data['companions'] == ['Maria Dela Cruz', 'Pedro Dela Cruz']
        assert data['answers'] == [{
            'question_id': question.id,
            'question': 'Do you agree to the cancellation policy?',
            'answer': 'I agree',
        }]
        assert data['payment_date'] == '2026-01-05'
        assert data['formatted_payment_date'] == 'Jan 05, 2026'
        assert data['payment_amount'] == 2500.0
        assert data['formatted_payment_amount'] == '2,500.00'
        assert data['has_payment_receipt'] is False
        assert data['archived'] is False
        assert data['receipts'] == []

    def test_required_fields(self, client, auth):
        resp = client.post('/api/v1/submissions', json={'email': 'not-an-email'}, headers=auth)
        assert resp.status_code == 422
        fields = {d['field'] for d in resp.get_json()['error']['details']}
        assert {'package_type', 'email', 'lead_guest', 'contact_number'} <= fields

    def test_unknown_question(self, client, auth):
        payload = dict(SUBMISSION, answers=[{'question_id': 321, 'answer': 'Yes'}])
        resp = client.post('/api/v1/submissions', json=payload, headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'answers'
        assert Submission.query.count() == 0

    def test_nested_answer_errors(self, client, auth):
        payload = dict(SUBMISSION, answers=[{'answer': 'Yes'}])
        resp = client.post('/api/v1/submissions', json=payload, headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'answers.0.question_id'

    def test_answer_too_long(self, client, auth, question):
        payload = dict(SUBMISSION, answers=[{'question_id': question.id, 'answer': 'x' * 256}])
        resp = client.post('/api/v1/submissions', json=payload, headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'answers.0.answer'

    def test_deleted_question_shows_as_unknown(self, client, auth, question):
        payload = dict(SUBMISSION, answers=[{'question_id': question.id, 'answer': 'I agree'}])
        submission_id = client.post('/api/v1/submissions', json=payload, headers=auth).get_json()['data']['id']

        resp = client.delete(f'/api/v1/terms-questions/{question.id}', headers=auth)
        assert resp.status_code == 200

        data = client.get(f'/api/v1/submissions/{submission_id}', headers=auth).get_json()['data']
        assert data['answers'] == [{'question_id': None, 'question': 'Unknown Question', 'answer': 'I agree'}]


class TestUpdateSubmission:

    def test_update_replaces_companions_and_answers(self, client, auth, question):
        payload = dict(SUBMISSION, companions=['Maria'], answers=[{'question_id': question.id, 'answer': 'I agree'}])
        submission_id = client.post('/api/v1/submissions', json=payload, headers=auth).get_json()['data']['id']

        resp = client.put(f'/api/v1/submissions/{submission_id}', json={
            'lead_guest': 'Juan Santos',
            'companions': ['Ana', 'Ben'],
            'answers': [{'question_id': question.id, 'answer': 'I do not agree'}],
        }, headers=auth)

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['lead_guest'] == 'Juan Santos'
        assert data['email'] == 'juan@example.com'
        assert data['companions'] == ['Ana', 'Ben']
        assert [a['answer'] for a in data['answers']] == ['I do not agree']
        assert Companion.query.count() == 2
        assert SubmissionAnswer.query.count() == 1

    def test_omitted_lists_are_kept(self, client, auth):
        payload = dict(SUBMISSION, companions=['Maria'])
        submission_id = client.post('/api/v1/submissions', json=payload, headers=auth).get_json()['data']['id']

        resp = client.patch(f'/api/v1/submissions/{submission_id}', json={'fb_name': None}, headers=auth)

        data = resp.get_json()['data']
        assert data['fb_name'] is None
        assert data['companions'] == ['Maria']

    def test_null_flags_are_ignored(self, client, auth):
        submission_id = client.post('/api/v1/submissions', json=SUBMISSION, headers=auth).get_json()['data']['id']
        resp = client.patch(f'/api/v1/submissions/{submission_id}', json={'archived': None}, headers=auth)
        assert resp.status_code == 200
        assert resp.get_json()['data']['archived'] is False

    def test_archive_and_restore(self, client, auth):
        submission_id = client.post('/api/v1/submissions', json=SUBMISSION, headers=auth).get_json()['data']['id']

        resp = client.post(f'/api/v1/submissions/{submission_id}/archive', headers=auth)
        assert resp.get_json()['data'] == {'id': submission_id, 'archived': True}
        assert db.session.get(Submission, submission_id).archived is True

        resp = client.patch(f'/api/v1/submissions/{submission_id}/restore', headers=auth)
        assert resp.get_json()['data'] == {'id': submission_id, 'archived': False}

    def test_delete_cascades(self, client, auth, question):
        payload = dict(SUBMISSION, companions=['Maria'], answers=[{'question_id': question.id, 'answer': 'I agree'}])
        submission_id = client.post('/api/v1/submissions', json=payload, headers=auth).get_json()['data']['id']

        resp = client.delete(f'/api/v1/submissions/{submission_id}', headers=auth)

        assert resp.status_code == 200
        assert Submission.query.count() == 0
        assert Companion.query.count() == 0
        assert SubmissionAnswer.query.count() == 0

    def test_missing_submission(self, client, auth):
        assert client.get('/api/v1/submissions/5', headers=auth).status_code == 404
        assert client.post('/api/v1/submissions/5/archive', headers=auth).status_code == 404


class TestListSubmissions:

    def test_hides_archived_by_default(self, client, auth):
        make_submission('active@example.com', datetime(2026, 1, 10, 9, 0))
        make_submission('old@example.com', datetime(2026, 1, 9, 9, 0), archived=True)

        def emails(query=''):
            resp = client.get(f'/api/v1/submissions{query}', headers=auth)
            return [s['email'] for s in resp.get_json()['data']]

        assert emails() == ['active@example.com']
        assert emails('?show_archived=1') == ['active@example.com', 'old@example.com']
        assert emails('?show_archived=2') == ['old@example.com']

    def test_date_range_is_inclusive(self, client, auth):
        make_submission('jan1@example.com', datetime(2026, 1, 1, 8, 0))
        make_submission('jan2@example.com', datetime(2026, 1, 2, 23, 59))
        make_submission('jan3@example.com', datetime(2026, 1, 3, 0, 0))

        resp = client.get('/api/v1/submissions?date_from=2026-01-02&date_to=2026-01-02', headers=auth)
        assert [s['email'] for s in resp.get_json()['data']] == ['jan2@example.com']

        resp = client.get('/api/v1/submissions?date_to=2026-01-02', headers=auth)
        assert [s['email'] for s in resp.get_json()['data']] == ['jan2@example.com', 'jan1@example.com']

    def test_invalid_date(self, client, auth):
        resp = client.get('/api/v1/submissions?date_from=02/01/2026', headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'date_from'

    def test_package_type_and_search(self, client, auth):
        make_submission('coron@example.com', datetime(2026, 1, 1))
        make_submission('siargao@example.com', datetime(2026, 1, 2), package_type='Siargao Surf Camp')

        resp = client.get('/api/v1/submissions?package_type=Siargao%20Surf%20Camp', headers=auth)
        assert [s['email'] for s in resp.get_json()['data']] == ['siargao@example.com']

        resp = client.get('/api/v1/submissions?search=CORON', headers=auth)
        assert [s['email'] for s in resp.get_json()['data']] == ['coron@example.com']


class TestReceipts:

    def test_upload_receipt(self, app, client, auth):
        submission_id = client.post('/api/v1/submissions', json=SUBMISSION, headers=auth).get_json()['data']['id']

        resp = client.post(
            f'/api/v1/submissions/{submission_id}/receipts',
            data={'receipt': (io.BytesIO(b'0123456789'), 'gcash receipt.png')},
            content_type='multipart/form-data',
            headers=auth,
        )

        assert resp.status_code == 201
        data = resp.get_json()['data']
        assert data['has_payment_receipt'] is True
        receipt = data['receipts'][0]
        assert receipt['file_name'] == 'gcash receipt.png'
        assert receipt['file_size'] == '10 B'
        assert receipt['mime_type'] == 'image/png'
        assert '/storage/payment_receipts/' in receipt['file_url']
        assert receipt['file_url'].endswith('_gcash_receipt.png')

        stored = os.listdir(os.path.join(app.config['UPLOAD_FOLDER'], 'payment_receipts'))
        assert len(stored) == 1

    def test_receipt_type_is_validated(self, client, auth):
        submission_id = client.post('/api/v1/submissions', json=SUBMISSION, headers=auth).get_json()['data']['id']

        resp = client.post(
            f'/api/v1/submissions/{submission_id}/receipts',
            data={'receipt': (io.BytesIO(b'GIF89a'), 'receipt.gif')},
            content_type='multipart/form-data',
            headers=auth,
        )
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'receipt'

    def test_receipt_required(self, client, auth):
        submission_id = client.post('/api/v1/submissions', json=SUBMISSION, headers=auth).get_json()['data']['id']
        resp = client.post(f'/api/v1/submissions/{submission_id}/receipts', data={}, headers=auth)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['message'] == 'No file provided.'

    def test_delete_removes_receipt_files(self, app, client, auth):
        submission_id = client.post('/api/v1/submissions', json=SUBMISSION, headers=auth).get_json()['data']['id']
        client.post(
            f'/api/v1/submissions/{submission_id}/receipts',
            data={'receipt': (io.BytesIO(b'%PDF'), 'receipt.pdf')},
            content_type='multipart/form-data',
            headers=auth,
        )
        folder = os.path.join(app.config['UPLOAD_FOLDER'], 'payment_receipts')
        assert len(os.listdir(folder)) == 1

        client.delete(f'/api/v1/submissions/{submission_id}', headers=auth)

        assert os.listdir(folder) == []
