"""
Marshmallow schemas for API serialization and input validation.
Dump schemas convert SQLAlchemy models to JSON-safe dictionaries; input
schemas validate request payloads (load with partial=True for PATCH-style updates).
"""
from datetime import datetime, time

from marshmallow import (
    Schema, fields, validate, validates_schema, pre_load, post_load,
    ValidationError, EXCLUDE,
)

from app.models.package import PACKAGE_TYPES
from app.models.tour_operations import (
    FOLLOWUP_STATUS_LABELS, TAIL_END_LABELS, REFUND_STATUSES,
    PAYMENT_STATUSES, COORDINATOR_CHOICES,
)
from app.utils.formatting import (
    format_date, format_datetime, number_format, format_file_size,
    humanize_tour_type, ucfirst, to_yes_no,
)
from app.utils.storage import storage_url


# ── Shared helpers ──────────────────────────────────────────

class BaseSchema(Schema):
    """Base schema with common config."""
    class Meta:
        ordered = True


class InputSchema(Schema):
    """Base for request payloads: unknown keys are ignored, '' means null."""
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def empty_strings_to_none(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return {
            key: (None if isinstance(value, str) and value.strip() == '' else value)
            for key, value in data.items()
        }


class FlexibleDateTime(fields.DateTime):
    """Accepts full ISO datetimes as well as plain 'YYYY-MM-DD' dates."""

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return super()._deserialize(value, attr, data, **kwargs)
        except ValidationError:
            return datetime.combine(fields.Date()._deserialize(value, attr, data, **kwargs), time.min)


def _string(max_length):
    return fields.Str(allow_none=True, validate=validate.Length(max=max_length))


def _required_string(max_length=None):
    return fields.Str(required=True, validate=[validate.Length(min=1, max=max_length)])


# ── Users & auth ────────────────────────────────────────────

class UserSchema(BaseSchema):
    """Profile representation (for /auth/me and admin listings)."""
    id = fields.Int(dump_only=True)
    name = fields.Str()
    email = fields.Email()
    is_admin = fields.Bool()
    is_approved = fields.Bool()
    email_verified_at = fields.DateTime(format='iso')
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')


class UserMinimalSchema(BaseSchema):
    """User block returned with a freshly issued token."""
    id = fields.Int(dump_only=True)
    name = fields.Str()
    email = fields.Email()
    is_admin = fields.Bool()


class UserDetailSchema(UserSchema):
    """Full employee record (for /user)."""
    emp_id = fields.Str()
    first_name = fields.Str()
    middle_name = fields.Str()
    last_name = fields.Str()
    gender = fields.Str()
    address = fields.Str()
    birthdate = fields.Date()
    age = fields.Int()
    contact = fields.Str()
    position = fields.Str()
    date_of_joining = fields.Date()
    type_of_contract = fields.Str()
    department_id = fields.Int()
    role_id = fields.Int()
    status = fields.Str()
    user_archived = fields.Bool()


class RegisterSchema(InputSchema):
    name = _required_string(255)
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=8))
    password_confirmation = fields.Str(required=True, load_only=True)

    @validates_schema
    def validate_password_confirmation(self, data, **kwargs):
        if data.get('password') != data.get('password_confirmation'):
            raise ValidationError('The password confirmation does not match.', 'password')

    @post_load
    def normalize_email(self, data, **kwargs):
        data['email'] = data['email'].strip().lower()
        data.pop('password_confirmation', None)
        return data


class LoginSchema(InputSchema):
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)
    device_name = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=255))


# ── Website packages ───────────────────────────────────────

class DestinationSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str()
    slug = fields.Str()
    category = fields.Str()
    description = fields.Str()
    active = fields.Bool()


class PackageSchema(BaseSchema):
    """Tour package with the display fields the back office renders."""
    id = fields.Int(dump_only=True)
    title = fields.Str()
    slug = fields.Str()
    duration = fields.Str()
    subtitle = fields.Str()
    description = fields.Str()
    inclusions = fields.Str()
    exclusions = fields.Str()
    destination_id = fields.Int()
    destination_name = fields.Method('get_destination_name')
    destination_slug = fields.Method('get_destination_slug')
    package_type = fields.Str()
    tour_type = fields.Str()
    tour_type_display = fields.Method('get_tour_type_display')
    frontend_category = fields.Str()
    image = fields.Str()
    image_url = fields.Method('get_image_url')
    image_alt = fields.Str()
    active = fields.Bool()
    featured = fields.Bool()
    display_order = fields.Int()
    combined_destinations = fields.Method('get_combined_destinations')
    combined_destination_ids = fields.Method('get_combined_destination_ids')
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')
    formatted_created_at = fields.Method('get_formatted_created_at')
    formatted_updated_at = fields.Method('get_formatted_updated_at')

    def get_destination_name(self, obj):
        return obj.destination.name if obj.destination else None

    def get_destination_slug(self, obj):
        return obj.destination.slug if obj.destination else None

    def get_tour_type_display(self, obj):
        return humanize_tour_type(obj.tour_type)

    def get_image_url(self, obj):
        return storage_url(obj.image)

    def get_combined_destinations(self, obj):
        return obj.combined_destinations_list

    def get_combined_destination_ids(self, obj):
        if not obj.is_combined:
            return []
        return [link.destination_id for link in obj.combined_destinations]

    def get_formatted_created_at(self, obj):
        return format_date(obj.created_at)

    def get_formatted_updated_at(self, obj):
        return format_datetime(obj.updated_at)


class PackageInputSchema(InputSchema):
    title = _required_string(255)
    slug = _string(255)
    duration = _string(50)
    subtitle = _string(255)
    description = fields.Str(allow_none=True)
    inclusions = fields.Str(allow_none=True)
    exclusions = fields.Str(allow_none=True)
    destination_id = fields.Int(allow_none=True)
    package_type = fields.Str(required=True, validate=validate.OneOf(PACKAGE_TYPES))
    tour_type = _string(100)
    frontend_category = _string(100)
    image_alt = _string(255)
    active = fields.Bool()
    featured = fields.Bool()
    display_order = fields.Int(validate=validate.Range(min=0))
    combined_destinations = fields.List(fields.Int(), allow_none=True)

    @validates_schema
    def validate_combined_destinations(self, data, partial=None, **kwargs):
        if data.get('package_type') == 'combined' and not partial and not data.get('combined_destinations'):
            raise ValidationError(
                'The combined destinations field is required when package type is combined.',
                'combined_destinations',
            )


# ── Invoicing ───────────────────────────────────────────────

class InvoicePackageSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    sku = fields.Str()
    quantity = fields.Int()
    category = fields.Str()
    items = fields.Str()
    item_full_details = fields.Str()
    price = fields.Float()
    created_at = fields.DateTime(format='iso')


class InvoicePackageInputSchema(InputSchema):
    sku = _string(255)
    items = fields.Str(allow_none=True)
    category = _string(255)
    quantity = fields.Int(allow_none=True, validate=validate.Range(min=1))
    item_full_details = fields.Str(allow_none=True)
    price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0, min_inclusive=False))

    @validates_schema
    def validate_sku_or_items(self, data, **kwargs):
        if not data.get('sku') and not data.get('items'):
            raise ValidationError('Either the SKU or the items must be provided.', 'sku')


class InvoicePackageUpdateSchema(InvoicePackageInputSchema):
    sku = _required_string(255)
    items = fields.Str(required=True, validate=validate.Length(min=1))
    category = _required_string(255)


class InvoiceTermSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    category = fields.Str()
    details = fields.Str()
    created_at = fields.DateTime(format='iso')


class InvoiceTermInputSchema(InputSchema):
    category = _required_string(255)
    details = fields.Str(required=True, validate=validate.Length(min=1))


class CategorySchema(BaseSchema):
    id = fields.Int(dump_only=True)
    category_name = fields.Str()
    description = fields.Str()


class CategoryInputSchema(InputSchema):
    category_name = _required_string(255)
    description = fields.Str(allow_none=True)

    @post_load
    def strip_name(self, data, **kwargs):
        data['category_name'] = data['category_name'].strip()
        return data


class ItinerarySchema(BaseSchema):
    """Sub-category joined with its category name."""
    id = fields.Int(dump_only=True)
    category_id = fields.Int()
    category_name = fields.Method('get_category_name')
    subcategory_name = fields.Str()
    details = fields.Str()

    def get_category_name(self, obj):
        return obj.category.category_name if obj.category else None


class ItineraryInputSchema(InputSchema):
    category_id = fields.Int(required=True)
    subcategory_name = _required_string(255)
    details = fields.Str(allow_none=True)

    @post_load
    def strip_values(self, data, **kwargs):
        if data.get('subcategory_name'):
            data['subcategory_name'] = data['subcategory_name'].strip()
        if data.get('details'):
            data['details'] = data['details'].strip()
        return data


# ── Terms and conditions ────────────────────────────────────

class TermsSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    title = fields.Str()
    content = fields.Str()
    is_active = fields.Bool()
    pdf_file_path = fields.Str()
    pdf_file_name = fields.Method('get_pdf_file_name')
    has_pdf = fields.Bool()
    pdf_url = fields.Method('get_pdf_url')
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')
    formatted_created_at = fields.Method('get_formatted_created_at')
    formatted_updated_at = fields.Method('get_formatted_updated_at')

    def get_pdf_file_name(self, obj):
        return obj.display_file_name

    def get_pdf_url(self, obj):
        return storage_url(obj.pdf_file_path)

    def get_formatted_created_at(self, obj):
        return format_date(obj.created_at)

    def get_formatted_updated_at(self, obj):
        return format_date(obj.updated_at)


class TermsInputSchema(InputSchema):
    title = _required_string(255)
    content = fields.Str(required=True, validate=validate.Length(min=1))
    is_active = fields.Bool(allow_none=True)


class BulkTermsActionSchema(InputSchema):
    action = fields.Str(required=True, validate=validate.OneOf(('activate', 'deactivate', 'delete')))
    ids = fields.List(fields.Int(), required=True, validate=validate.Length(min=1))


# ── Booking form: questions & submissions ──────────────────

class BookingPackageSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    name = fields.Str()


class TermsQuestionSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    package_id = fields.Int()
    package_name = fields.Str()
    question_text = fields.Str()
    yes_option = fields.Str()
    no_option = fields.Str()
    sort_order = fields.Int()
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')


class TermsQuestionInputSchema(InputSchema):
    package_id = fields.Int(required=True)
    question_text = fields.Str(required=True, validate=validate.Length(min=1))
    yes_option = _required_string(255)
    no_option = _required_string(255)
    sort_order = fields.Int(allow_none=True, validate=validate.Range(min=0))


class SubmissionSchema(BaseSchema):
    """Submission with companions, answers and receipts flattened for display."""
    id = fields.Int(dump_only=True)
    package_type = fields.Str()
    email = fields.Str()
    lead_guest = fields.Str()
    fb_name = fields.Str()
    contact_number = fields.Str()
    payment_date = fields.Date()
    formatted_payment_date = fields.Method('get_formatted_payment_date')
    payment_amount = fields.Float()
    formatted_payment_amount = fields.Method('get_formatted_payment_amount')
    has_payment_receipt = fields.Bool()
    archived = fields.Bool()
    created_at = fields.DateTime(format='iso')
    formatted_created_at = fields.Method('get_formatted_created_at')
    companions = fields.Method('get_companions')
    answers = fields.Method('get_answers')
    receipts = fields.Method('get_receipts')

    def get_formatted_payment_date(self, obj):
        return format_date(obj.payment_date)

    def get_formatted_payment_amount(self, obj):
        return number_format(obj.payment_amount)

    def get_formatted_created_at(self, obj):
        return format_date(obj.created_at)

    def get_companions(self, obj):
        return [companion.full_name for companion in obj.companions]

    def get_answers(self, obj):
        return [
            {
                'question_id': answer.question_id,
                'question': answer.question_text,
                'answer': answer.answer,
            }
            for answer in obj.answers
        ]

    def get_receipts(self, obj):
        return [
            {
                'id': receipt.id,
                'file_name': receipt.file_name,
                'file_url': storage_url(receipt.file_path),
                'file_size': format_file_size(receipt.file_size),
                'mime_type': receipt.mime_type,
            }
            for receipt in obj.receipts
        ]


class AnswerInputSchema(InputSchema):
    question_id = fields.Int(required=True)
    answer = fields.Str(required=True, validate=validate.Length(max=255))


class SubmissionInputSchema(InputSchema):
    package_type = _required_string(255)
    email = fields.Email(required=True, validate=validate.Length(max=255))
    lead_guest = _required_string(255)
    contact_number = _required_string(20)
    fb_name = _string(255)
    payment_date = fields.Date(allow_none=True)
    payment_amount = fields.Decimal(allow_none=True, places=2, validate=validate.Range(min=0))
    has_payment_receipt = fields.Bool(allow_none=True)
    archived = fields.Bool(allow_none=True)
    companions = fields.List(fields.Str(validate=validate.Length(max=255)), allow_none=True)
    answers = fields.List(fields.Nested(AnswerInputSchema), allow_none=True)


# ── Tour operations ────────────────────────────────────────

class CompletedTourSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    tour_id = fields.Int()
    assigned_team = fields.Str()
    followup_status = fields.Str()
    followup_status_display = fields.Str()
    tail_end = fields.Str()
    tail_end_display = fields.Str()
    completion_date = fields.DateTime(format='iso')
    formatted_completion_date = fields.Method('get_formatted_completion_date')
    notes = fields.Str()
    customer_assigned = fields.Bool()
    invoice_no = fields.Str()
    travel_dates = fields.Str()
    destination = fields.Str()
    tour_type = fields.Str()
    days = fields.Int()
    pax = fields.Int()
    lead_guest = fields.Str()
    customer = fields.Method('get_customer')
    invoice = fields.Method('get_invoice')
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')

    def get_formatted_completion_date(self, obj):
        return format_date(obj.completion_date)

    def get_customer(self, obj):
        if not obj.customer:
            return None
        return {'name': obj.customer.name, 'email': obj.customer.email}

    def get_invoice(self, obj):
        if not obj.invoice:
            return None
        return {
            'invoice_status': obj.invoice.invoice_status,
            'total_price': _as_float(obj.invoice.total_price),
            'amount_due': _as_float(obj.invoice.amount_due),
            'payment_received': _as_float(obj.invoice.payment_received),
        }


def _as_float(value):
    return float(value) if value is not None else None


class CompletedTourInputSchema(InputSchema):
    assigned_team = _required_string(255)
    travel_dates = _required_string(100)
    destination = _required_string(255)
    tour_type = _required_string(50)
    days = fields.Int(required=True, validate=validate.Range(min=1))
    pax = fields.Int(required=True, validate=validate.Range(min=1))
    lead_guest = _required_string(100)
    followup_status = fields.Str(allow_none=True, validate=validate.OneOf(list(FOLLOWUP_STATUS_LABELS)))
    tail_end = fields.Str(allow_none=True, validate=validate.OneOf(list(TAIL_END_LABELS)))
    completion_date = FlexibleDateTime(allow_none=True)
    notes = fields.Str(allow_none=True)
    invoice_no = _string(255)
    tour_id = fields.Int(allow_none=True)


class FollowupStatusSchema(InputSchema):
    followup_status = fields.Str(required=True, validate=validate.OneOf(list(FOLLOWUP_STATUS_LABELS)))


class TailEndSchema(InputSchema):
    tail_end = fields.Str(required=True, validate=validate.OneOf(list(TAIL_END_LABELS)))


class CancelledTourSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    tour_id = fields.Int()
    cancellation_person = fields.Str()
    cancellation_reason = fields.Str()
    refund_status = fields.Str()
    refund_status_display = fields.Str(attribute='refund_status', dump_only=True)
    cancellation_date = fields.DateTime(format='iso')
    formatted_cancellation_date = fields.Method('get_formatted_cancellation_date')
    days = fields.Int()
    pax = fields.Int()
    with_coordinator = fields.Str()
    with_coordinator_display = fields.Str()
    pickup_point = fields.Str()
    balance = fields.Float()
    formatted_balance = fields.Method('get_formatted_balance')
    payment_status = fields.Str()
    payment_status_display = fields.Str(attribute='payment_status', dump_only=True)
    accommodation = fields.Str()
    room_setup = fields.Str()
    booked_accommodation = fields.Bool()
    van_details_sent = fields.Bool()
    assigned_team = fields.Str()
    status = fields.Str()
    notes = fields.Str()
    lead_guest = fields.Str()
    contact = fields.Str()
    destination = fields.Str()
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')

    def get_formatted_cancellation_date(self, obj):
        return format_date(obj.cancellation_date)

    def get_formatted_balance(self, obj):
        return number_format(obj.balance)


class CancelledTourInputSchema(InputSchema):
    cancellation_person = _string(255)
    cancellation_reason = fields.Str(allow_none=True)
    refund_status = fields.Str(allow_none=True, validate=validate.OneOf(REFUND_STATUSES))
    cancellation_date = FlexibleDateTime(required=True)
    days = fields.Int(required=True, validate=validate.Range(min=1))
    pax = fields.Int(required=True, validate=validate.Range(min=1))
    with_coordinator = fields.Str(required=True, validate=validate.OneOf(COORDINATOR_CHOICES))
    pickup_point = _required_string(255)
    balance = fields.Decimal(allow_none=True, places=2, validate=validate.Range(min=0))
    payment_status = fields.Str(required=True, validate=validate.OneOf(PAYMENT_STATUSES))
    accommodation = _string(255)
    room_setup = _string(255)
    booked_accommodation = fields.Bool(allow_none=True)
    van_details_sent = fields.Bool(allow_none=True)
    assigned_team = _string(255)
    status = _required_string(50)
    notes = fields.Str(allow_none=True)
    lead_guest = _required_string(255)
    contact = _required_string(100)
    destination = _required_string(255)
    tour_id = fields.Int(allow_none=True)


class RefundStatusSchema(InputSchema):
    refund_status = fields.Str(required=True, validate=validate.OneOf(REFUND_STATUSES))


class LegacyFlagsMixin:
    """Stores boolean-ish flag inputs as the legacy 'YES' / 'NO' values."""
    flag_fields = ()

    @post_load
    def flags_to_yes_no(self, data, **kwargs):
        for field_name in self.flag_fields:
            if data.get(field_name) is not None:
                data[field_name] = to_yes_no(data[field_name])
        return data


class DomesticTourSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    travel_dates = fields.Str()
    destination = fields.Str()
    days = fields.Int()
    pax = fields.Int()
    lead_guest = fields.Str()
    contact = fields.Str()
    pickup_details = fields.Str()
    balance = fields.Float()
    formatted_balance = fields.Method('get_formatted_balance')
    payment_status = fields.Str()
    payment_status_display = fields.Str(attribute='payment_status', dump_only=True)
    accommodation = fields.Str()
    booked_accommodation = fields.Str()
    coordinated_with_supplier = fields.Str()
    coordinated_with_supplier_display = fields.Str()
    hotel_balance = fields.Str()
    formatted_hotel_balance = fields.Method('get_formatted_hotel_balance')
    transfer_details_sent = fields.Str()
    handled_by = fields.Str()
    status = fields.Str()
    status_display = fields.Method('get_status_display')
    notes = fields.Str()
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')

    def get_formatted_balance(self, obj):
        return number_format(obj.balance)

    def get_formatted_hotel_balance(self, obj):
        return number_format(obj.hotel_balance)

    def get_status_display(self, obj):
        return ucfirst(obj.status)


class DomesticTourInputSchema(LegacyFlagsMixin, InputSchema):
    flag_fields = ('booked_accommodation', 'coordinated_with_supplier', 'transfer_details_sent')

    travel_dates = _required_string(100)
    destination = _required_string(255)
    days = fields.Int(required=True, validate=validate.Range(min=1))
    pax = fields.Int(required=True, validate=validate.Range(min=1))
    lead_guest = _required_string(255)
    contact = _required_string(100)
    pickup_details = fields.Str(allow_none=True)
    balance = fields.Decimal(allow_none=True, places=2, validate=validate.Range(min=0))
    payment_status = fields.Str(required=True, validate=validate.OneOf(PAYMENT_STATUSES))
    accommodation = _string(255)
    booked_accommodation = fields.Raw(allow_none=True)
    coordinated_with_supplier = fields.Raw(allow_none=True)
    hotel_balance = _string(255)
    transfer_details_sent = fields.Raw(allow_none=True)
    handled_by = _string(255)
    status = _required_string(50)
    notes = fields.Str(allow_none=True)


class LuzonJoinerSchema(BaseSchema):
    id = fields.Int(dump_only=True)
    travel_dates = fields.Str()
    destination = fields.Str()
    days = fields.Int()
    pax = fields.Int()
    with_coordinator = fields.Str()
    with_coordinator_display = fields.Str()
    lead_guest = fields.Str()
    contact = fields.Str()
    pickup_point = fields.Str()
    balance = fields.Float()
    formatted_balance = fields.Method('get_formatted_balance')
    payment_status = fields.Str()
    payment_status_display = fields.Str(attribute='payment_status', dump_only=True)
    accommodation = fields.Str()
    room_setup = fields.Str()
    booked_accommodation = fields.Str()
    van_details_sent = fields.Str()
    assigned_team = fields.Str()
    status = fields.Str()
    status_display = fields.Method('get_status_display')
    notes = fields.Str()
    created_at = fields.DateTime(format='iso')
    updated_at = fields.DateTime(format='iso')

    def get_formatted_balance(self, obj):
        return number_format(obj.balance)

    def get_status_display(self, obj):
        return ucfirst(obj.status)


class LuzonJoinerInputSchema(LegacyFlagsMixin, InputSchema):
    flag_fields = ('booked_accommodation', 'van_details_sent')

    travel_dates = _required_string(100)
    destination = _required_string(255)
    days = fields.Int(required=True, validate=validate.Range(min=1))
    pax = fields.Int(required=True, validate=validate.Range(min=1))
    with_coordinator = fields.Str(required=True, validate=validate.OneOf(COORDINATOR_CHOICES))
    lead_guest = _required_string(255)
    contact = _required_string(100)
    pickup_point = _required_string(255)
    balance = fields.Decimal(allow_none=True, places=2, validate=validate.Range(min=0))
    payment_status = fields.Str(required=True, validate=validate.OneOf(PAYMENT_STATUSES))
    accommodation = _string(255)
    room_setup = _string(255)
    booked_accommodation = fields.Raw(allow_none=True)
    van_details_sent = fields.Raw(allow_none=True)
    assigned_team = _string(255)
    status = _required_string(50)
    notes = fields.Str(allow_none=True)


class StatusSchema(InputSchema):
    status = _required_string(50)
