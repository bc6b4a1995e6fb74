"""
Tests for booking form terms questions.
"""
from app.extensions import db
from app.models.submission import BookingPackage, TermsQuestion


def create_question(client, auth, package_id, **overrides):
    payload = {
        'package_id': package_id,
        'question_text': 'Do you agree to the cancellation policy?',
        'yes_option': 'I agree',
        'no_option': 'I do not agree',
    }
    payload.update(overrides)
    return client.post('/api/v1/terms-questions', json=payload, headers=auth)


class TestTermsQuestions:

    def test_create_assigns_next_sort_order(self, client, auth, booking_package):
        first = create_question(client, auth, booking_package.id)
        second = create_question(client, auth, booking_package.id, question_text='Do you have allergies?')

        assert first.status_code == 201
        assert first.get_json()['message'] == 'Question created successfully.'
        assert first.get_json()['data']['sort_order'] == 1
        assert second.get_json()['data']['sort_order'] == 2
        assert first.get_json()['data']['package_name'] == 'Coron Island Hopping'

    def test_sort_order_is_per_package(self, client, auth, booking_package):
        other = BookingPackage(name='Siargao Surf Camp')
        db.session.add(other)
        db.session.commit()

        create_question(client, auth, booking_package.id, sort_order=7)
        resp = create_question(client, auth, other.id)
        assert resp.get_json()['data']['sort_order'] == 1

        resp = create_question(client, auth, booking_package.id)
        assert resp.get_json()['data']['sort_order'] == 8

    def test_unknown_package(self, client, auth):
        resp = create_question(client, auth, 99)
        assert resp.status_code == 422
        assert resp.get_json()['error']['details'][0]['field'] == 'package_id'

    def test_required_fields(self, client, auth, booking_package):
        resp = client.post('/api/v1/terms-questions', json={'package_id': booking_package.id}, headers=auth)
        assert resp.status_code == 422
        fields = {d['field'] for d in resp.get_json()['error']['details']}
        assert fields == {'question_text', 'yes_option', 'no_option'}

    def test_list_by_package_ordered(self, client, auth, booking_package):
        other = BookingPackage(name='Siargao Surf Camp')
        db.session.add(other)
        db.session.commit()

        create_question(client, auth, booking_package.id, question_text='Second', sort_order=2)
        create_question(client, auth, booking_package.id, question_text='First', sort_order=1)
        create_question(client, auth, other.id, question_text='Elsewhere')

        body = client.get(f'/api/v1/terms-questions?package_id={booking_package.id}', headers=auth).get_json()
        assert [q['question_text'] for q in body['data']] == ['First', 'Second']
        assert body['meta']['per_page'] == 50

        body = client.get('/api/v1/terms-questions?search=elsewhere', headers=auth).get_json()
        assert [q['package_name'] for q in body['data']] == ['Siargao Surf Camp']

    def test_list_booking_packages(self, client, auth, booking_package):
        resp = client.get('/api/v1/terms-questions/packages', headers=auth)
        assert resp.get_json()['data'] == [{'id': booking_package.id, 'name': 'Coron Island Hopping'}]

    def test_partial_update(self, client, auth, booking_package):
        question_id = create_question(client, auth, booking_package.id).get_json()['data']['id']

        resp = client.patch(f'/api/v1/terms-questions/{question_id}', json={
            'yes_option': 'Yes, I agree',
            'sort_order': 5,
        }, headers=auth)

        assert resp.status_code == 200
        data = resp.get_json()['data']
        assert data['yes_option'] == 'Yes, I agree'
        assert data['no_option'] == 'I do not agree'
        assert data['sort_order'] == 5

    def test_update_to_unknown_package(self, client, auth, booking_package):
        question_id = create_question(client, auth, booking_package.id).get_json()['data']['id']
        resp = client.put(f'/api/v1/terms-questions/{question_id}', json={'package_id': 1234}, headers=auth)
        assert resp.status_code == 422

    def test_get_and_delete(self, client, auth, booking_package):
        question_id = create_question(client, auth, booking_package.id).get_json()['data']['id']

        assert client.get(f'/api/v1/terms-questions/{question_id}', headers=auth).status_code == 200
        resp = client.delete(f'/api/v1/terms-questions/{question_id}', headers=auth)
        assert resp.get_json()['message'] == 'Question deleted successfully.'
        assert db.session.get(TermsQuestion, question_id) is None

        resp = client.get(f'/api/v1/terms-questions/{question_id}', headers=auth)
        assert resp.status_code == 404
        assert resp.get_json()['error']['message'] == 'Question not found.'
