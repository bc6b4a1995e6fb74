"""
Tour operations ledgers — completed, cancelled, domestic and Luzon joiner tours.

All routes live under /tour-operations. The domestic and Luzon joiner tables
take ``max(id) + 1`` ids and store their flags as 'YES' / 'NO'.
"""
from flask import request, jsonify, current_app
from sqlalchemy.orm import joinedload

from app.blueprints.api import api_bp
from app.blueprints.api.decorators import token_required
from app.blueprints.api.helpers import (
    paginate_query, api_success, apply_sort, get_payload, get_or_404, search_filter,
)
from app.blueprints.api.schemas import (
    CompletedTourSchema, CompletedTourInputSchema, FollowupStatusSchema, TailEndSchema,
    CancelledTourSchema, CancelledTourInputSchema, RefundStatusSchema,
    DomesticTourSchema, DomesticTourInputSchema,
    LuzonJoinerSchema, LuzonJoinerInputSchema, StatusSchema,
)
from app.extensions import db
from app.models.tour_operations import CompletedTour, CancelledTour, DomesticTour, LuzonJoiner
from app.utils.formatting import YES, parse_bool

COMPLETED_SORT_COLUMNS = ('completion_date', 'travel_dates', 'destination', 'assigned_team')
CANCELLED_SORT_COLUMNS = ('cancellation_date', 'destination', 'refund_status', 'status')
LEDGER_SORT_COLUMNS = ('travel_dates', 'destination', 'status', 'payment_status')


def _filter_equal(query, model, *params):
    """Exact-match filters for each query param that is present."""
    for param in params:
        value = request.args.get(param)
        if value:
            query = query.filter(getattr(model, param) == value)
    return query


def _filter_destination(query, model):
    destination = request.args.get('destination')
    if destination:
        query = query.filter(model.destination.ilike(f'%{destination}%'))
    return query


def _filter_coordinator(query, model):
    """with_coordinator=true keeps 'With' rows, any other value keeps 'None' rows."""
    if 'with_coordinator' in request.args:
        wanted = 'With' if request.args.get('with_coordinator') == 'true' else 'None'
        query = query.filter(model.with_coordinator == wanted)
    return query


def _filter_flags(query, model, flags):
    """flags maps query params to YES/NO columns; only 'true' filters."""
    for param, column in flags.items():
        if request.args.get(param) == 'true':
            query = query.filter(getattr(model, column) == YES)
    return query


def _filter_search(query, *columns):
    search = request.args.get('search')
    if search:
        query = query.filter(search_filter(search, *columns))
    return query


def _apply_changes(row, data):
    for field, value in data.items():
        setattr(row, field, value)


# ── Completed tours ────────────────────────────────────────

@api_bp.route('/tour-operations/completed', methods=['GET'])
@token_required
def api_list_completed_tours():
    """List completed tours.

    Query params:
        assigned_team, followup_status, tail_end, destination (contains),
        tour_type, customer_assigned (bool), search (lead guest, destination,
        team, invoice no), sort_by (completion_date | travel_dates |
        destination | assigned_team), sort_order, page, per_page
    """
    query = CompletedTour.query.options(
        joinedload(CompletedTour.customer),
        joinedload(CompletedTour.invoice),
    )
    query = _filter_equal(query, CompletedTour, 'assigned_team', 'followup_status', 'tail_end', 'tour_type')
    query = _filter_destination(query, CompletedTour)

    customer_assigned = parse_bool(request.args.get('customer_assigned'))
    if customer_assigned is not None:
        query = query.filter(CompletedTour.customer_assigned.is_(customer_assigned))

    query = _filter_search(
        query,
        CompletedTour.lead_guest, CompletedTour.destination,
        CompletedTour.assigned_team, CompletedTour.invoice_no,
    )
    query = apply_sort(query, CompletedTour, COMPLETED_SORT_COLUMNS, 'completion_date')
    return jsonify(paginate_query(query, CompletedTourSchema(), default_per_page=15)), 200


@api_bp.route('/tour-operations/completed', methods=['POST'])
@token_required
def api_create_completed_tour():
    data = CompletedTourInputSchema().load(get_payload())
    tour = CompletedTour(**data)
    tour.customer_assigned = bool(tour.invoice_no)
    db.session.add(tour)
    db.session.commit()
    current_app.logger.info('Completed tour created: id=%s team=%s', tour.id, tour.assigned_team)
    return api_success(CompletedTourSchema().dump(tour), 201, 'Completed tour created successfully.')


@api_bp.route('/tour-operations/completed/<int:tour_id>', methods=['GET'])
@token_required
def api_get_completed_tour(tour_id):
    tour, error = get_or_404(CompletedTour, tour_id, 'Completed tour')
    if error:
        return error
    return api_success(CompletedTourSchema().dump(tour))


@api_bp.route('/tour-operations/completed/<int:tour_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_completed_tour(tour_id):
    tour, error = get_or_404(CompletedTour, tour_id, 'Completed tour')
    if error:
        return error
    data = CompletedTourInputSchema().load(get_payload(), partial=True)
    _apply_changes(tour, data)
    if 'invoice_no' in data:
        tour.customer_assigned = bool(tour.invoice_no)
    db.session.commit()
    return api_success(CompletedTourSchema().dump(tour), message='Completed tour updated successfully.')


@api_bp.route('/tour-operations/completed/<int:tour_id>', methods=['DELETE'])
@token_required
def api_delete_completed_tour(tour_id):
    tour, error = get_or_404(CompletedTour, tour_id, 'Completed tour')
    if error:
        return error
    db.session.delete(tour)
    db.session.commit()
    current_app.logger.info('Completed tour deleted: id=%s', tour_id)
    return api_success(None, message='Completed tour deleted successfully.')


@api_bp.route('/tour-operations/completed/<int:tour_id>/followup-status', methods=['PATCH', 'POST'])
@token_required
def api_update_followup_status(tour_id):
    tour, error = get_or_404(CompletedTour, tour_id, 'Completed tour')
    if error:
        return error
    data = FollowupStatusSchema().load(get_payload())
    tour.followup_status = data['followup_status']
    db.session.commit()
    return api_success(CompletedTourSchema().dump(tour), message='Follow-up status updated successfully.')


@api_bp.route('/tour-operations/completed/<int:tour_id>/tail-end', methods=['PATCH', 'POST'])
@token_required
def api_update_tail_end(tour_id):
    tour, error = get_or_404(CompletedTour, tour_id, 'Completed tour')
    if error:
        return error
    data = TailEndSchema().load(get_payload())
    tour.tail_end = data['tail_end']
    db.session.commit()
    return api_success(CompletedTourSchema().dump(tour), message='Tail end updated successfully.')


# ── Cancelled tours ────────────────────────────────────────

@api_bp.route('/tour-operations/cancelled', methods=['GET'])
@token_required
def api_list_cancelled_tours():
    """List cancelled tours.

    Query params:
        refund_status, status, payment_status, with_coordinator ('true'),
        destination (contains), assigned_team, search, sort_by
        (cancellation_date | destination | refund_status | status), sort_order
    """
    query = _filter_equal(CancelledTour.query, CancelledTour, 'refund_status', 'status', 'payment_status')
    query = _filter_coordinator(query, CancelledTour)
    query = _filter_destination(query, CancelledTour)
    query = _filter_equal(query, CancelledTour, 'assigned_team')
    query = _filter_search(
        query,
        CancelledTour.lead_guest, CancelledTour.destination,
        CancelledTour.contact, CancelledTour.assigned_team,
    )
    query = apply_sort(query, CancelledTour, CANCELLED_SORT_COLUMNS, 'cancellation_date')
    return jsonify(paginate_query(query, CancelledTourSchema(), default_per_page=15)), 200


@api_bp.route('/tour-operations/cancelled', methods=['POST'])
@token_required
def api_create_cancelled_tour():
    data = CancelledTourInputSchema().load(get_payload())
    tour = CancelledTour(**data)
    db.session.add(tour)
    db.session.commit()
    current_app.logger.info('Cancelled tour created: id=%s', tour.id)
    return api_success(CancelledTourSchema().dump(tour), 201, 'Cancelled tour created successfully.')


@api_bp.route('/tour-operations/cancelled/<int:tour_id>', methods=['GET'])
@token_required
def api_get_cancelled_tour(tour_id):
    tour, error = get_or_404(CancelledTour, tour_id, 'Cancelled tour')
    if error:
        return error
    return api_success(CancelledTourSchema().dump(tour))


@api_bp.route('/tour-operations/cancelled/<int:tour_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_cancelled_tour(tour_id):
    tour, error = get_or_404(CancelledTour, tour_id, 'Cancelled tour')
    if error:
        return error
    _apply_changes(tour, CancelledTourInputSchema().load(get_payload(), partial=True))
    db.session.commit()
    return api_success(CancelledTourSchema().dump(tour), message='Cancelled tour updated successfully.')


@api_bp.route('/tour-operations/cancelled/<int:tour_id>', methods=['DELETE'])
@token_required
def api_delete_cancelled_tour(tour_id):
    tour, error = get_or_404(CancelledTour, tour_id, 'Cancelled tour')
    if error:
        return error
    db.session.delete(tour)
    db.session.commit()
    current_app.logger.info('Cancelled tour deleted: id=%s', tour_id)
    return api_success(None, message='Cancelled tour deleted successfully.')


@api_bp.route('/tour-operations/cancelled/<int:tour_id>/refund-status', methods=['PATCH', 'POST'])
@token_required
def api_update_refund_status(tour_id):
    tour, error = get_or_404(CancelledTour, tour_id, 'Cancelled tour')
    if error:
        return error
    data = RefundStatusSchema().load(get_payload())
    tour.refund_status = data['refund_status']
    db.session.commit()
    return api_success(CancelledTourSchema().dump(tour), message='Refund status updated successfully.')


# ── Domestic tours ─────────────────────────────────────────

@api_bp.route('/tour-operations/domestic', methods=['GET'])
@token_required
def api_list_domestic_tours():
    """List domestic tours.

    Query params:
        destination (contains), status, payment_status, handled_by,
        accommodation_booked / coordinated_with_supplier /
        transfer_details_sent ('true'), search, sort_by
        (travel_dates | destination | status | payment_status), sort_order
    """
    query = _filter_destination(DomesticTour.query, DomesticTour)
    query = _filter_equal(query, DomesticTour, 'status', 'payment_status', 'handled_by')
    query = _filter_flags(query, DomesticTour, {
        'accommodation_booked': 'booked_accommodation',
        'coordinated_with_supplier': 'coordinated_with_supplier',
        'transfer_details_sent': 'transfer_details_sent',
    })
    query = _filter_search(
        query,
        DomesticTour.lead_guest, DomesticTour.destination,
        DomesticTour.contact, DomesticTour.handled_by,
    )
    query = apply_sort(query, DomesticTour, LEDGER_SORT_COLUMNS, 'travel_dates')
    return jsonify(paginate_query(query, DomesticTourSchema(), default_per_page=15)), 200


@api_bp.route('/tour-operations/domestic', methods=['POST'])
@token_required
def api_create_domestic_tour():
    data = DomesticTourInputSchema().load(get_payload())
    tour = DomesticTour(id=DomesticTour.next_id(), **data)
    db.session.add(tour)
    db.session.commit()
    current_app.logger.info('Domestic tour created: id=%s', tour.id)
    return api_success(DomesticTourSchema().dump(tour), 201, 'Domestic tour created successfully.')


@api_bp.route('/tour-operations/domestic/<int:tour_id>', methods=['GET'])
@token_required
def api_get_domestic_tour(tour_id):
    tour, error = get_or_404(DomesticTour, tour_id, 'Domestic tour')
    if error:
        return error
    return api_success(DomesticTourSchema().dump(tour))


@api_bp.route('/tour-operations/domestic/<int:tour_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_domestic_tour(tour_id):
    tour, error = get_or_404(DomesticTour, tour_id, 'Domestic tour')
    if error:
        return error
    _apply_changes(tour, DomesticTourInputSchema().load(get_payload(), partial=True))
    db.session.commit()
    return api_success(DomesticTourSchema().dump(tour), message='Domestic tour updated successfully.')


@api_bp.route('/tour-operations/domestic/<int:tour_id>', methods=['DELETE'])
@token_required
def api_delete_domestic_tour(tour_id):
    tour, error = get_or_404(DomesticTour, tour_id, 'Domestic tour')
    if error:
        return error
    db.session.delete(tour)
    db.session.commit()
    current_app.logger.info('Domestic tour deleted: id=%s', tour_id)
    return api_success(None, message='Domestic tour deleted successfully.')


@api_bp.route('/tour-operations/domestic/<int:tour_id>/status', methods=['PATCH', 'POST'])
@token_required
def api_update_domestic_status(tour_id):
    tour, error = get_or_404(DomesticTour, tour_id, 'Domestic tour')
    if error:
        return error
    tour.status = StatusSchema().load(get_payload())['status']
    db.session.commit()
    return api_success(DomesticTourSchema().dump(tour), message='Status updated successfully.')


# ── Luzon joiner tours ─────────────────────────────────────

@api_bp.route('/tour-operations/luzon-joiners', methods=['GET'])
@token_required
def api_list_luzon_joiners():
    """List Luzon joiner tours.

    Query params:
        destination (contains), status, payment_status, with_coordinator
        ('true'), assigned_team, accommodation_booked / van_details_sent
        ('true'), search, sort_by (travel_dates | destination | status |
        payment_status), sort_order
    """
    query = _filter_destination(LuzonJoiner.query, LuzonJoiner)
    query = _filter_equal(query, LuzonJoiner, 'status', 'payment_status')
    query = _filter_coordinator(query, LuzonJoiner)
    query = _filter_equal(query, LuzonJoiner, 'assigned_team')
    query = _filter_flags(query, LuzonJoiner, {
        'accommodation_booked': 'booked_accommodation',
        'van_details_sent': 'van_details_sent',
    })
    query = _filter_search(
        query,
        LuzonJoiner.lead_guest, LuzonJoiner.destination,
        LuzonJoiner.contact, LuzonJoiner.assigned_team,
    )
    query = apply_sort(query, LuzonJoiner, LEDGER_SORT_COLUMNS, 'travel_dates')
    return jsonify(paginate_query(query, LuzonJoinerSchema(), default_per_page=15)), 200


@api_bp.route('/tour-operations/luzon-joiners', methods=['POST'])
@token_required
def api_create_luzon_joiner():
    data = LuzonJoinerInputSchema().load(get_payload())
    tour = LuzonJoiner(id=LuzonJoiner.next_id(), **data)
    db.session.add(tour)
    db.session.commit()
    current_app.logger.info('Luzon joiner tour created: id=%s', tour.id)
    return api_success(LuzonJoinerSchema().dump(tour), 201, 'Luzon joiner tour created successfully.')


@api_bp.route('/tour-operations/luzon-joiners/<int:tour_id>', methods=['GET'])
@token_required
def api_get_luzon_joiner(tour_id):
    tour, error = get_or_404(LuzonJoiner, tour_id, 'Luzon joiner tour')
    if error:
        return error
    return api_success(LuzonJoinerSchema().dump(tour))


@api_bp.route('/tour-operations/luzon-joiners/<int:tour_id>', methods=['PUT', 'PATCH'])
@token_required
def api_update_luzon_joiner(tour_id):
    tour, error = get_or_404(LuzonJoiner, tour_id, 'Luzon joiner tour')
    if error:
        return error
    _apply_changes(tour, LuzonJoinerInputSchema().load(get_payload(), partial=True))
    db.session.commit()
    return api_success(LuzonJoinerSchema().dump(tour), message='Luzon joiner tour updated successfully.')


@api_bp.route('/tour-operations/luzon-joiners/<int:tour_id>', methods=['DELETE'])
@token_required
def api_delete_luzon_joiner(tour_id):
    tour, error = get_or_404(LuzonJoiner, tour_id, 'Luzon joiner tour')
    if error:
        return error
    db.session.delete(tour)
    db.session.commit()
    current_app.logger.info('Luzon joiner tour deleted: id=%s', tour_id)
    return api_success(None, message='Luzon joiner tour deleted successfully.')


@api_bp.route('/tour-operations/luzon-joiners/<int:tour_id>/status', methods=['PATCH', 'POST'])
@token_required
def api_update_luzon_joiner_status(tour_id):
    tour, error = get_or_404(LuzonJoiner, tour_id, 'Luzon joiner tour')
    if error:
        return error
    tour.status = StatusSchema().load(get_payload())['status']
    db.session.commit()
    return api_success(LuzonJoinerSchema().dump(tour), message='Status updated successfully.')
