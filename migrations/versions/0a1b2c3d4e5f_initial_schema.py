"""initial_schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0a1b2c3d4e5f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade(engine_name):
    globals()["upgrade_%s" % engine_name]()


def downgrade(engine_name):
    globals()["downgrade_%s" % engine_name]()


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


# ── Website database ───────────────────────────────────────

def upgrade_():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('emp_id', sa.String(length=50), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('middle_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('email_verified_at', sa.DateTime(), nullable=True),
        sa.Column('verification_token', sa.String(length=100), nullable=True),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('contact', sa.String(length=50), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('date_of_joining', sa.Date(), nullable=True),
        sa.Column('type_of_contract', sa.String(length=100), nullable=True),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('role_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('user_delete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_verification_token', 'users', ['verification_token'], unique=True)

    op.create_table(
        'api_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('jti', sa.String(length=64), nullable=False),
        sa.Column('abilities', sa.JSON(), nullable=True),
        sa.Column('last_used_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_api_tokens_user_id', 'api_tokens', ['user_id'])
    op.create_index('ix_api_tokens_jti', 'api_tokens', ['jti'], unique=True)

    op.create_table(
        'destinations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_destinations_slug', 'destinations', ['slug'])

    op.create_table(
        'packages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('duration', sa.String(length=50), nullable=True),
        sa.Column('subtitle', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('inclusions', sa.Text(), nullable=True),
        sa.Column('exclusions', sa.Text(), nullable=True),
        sa.Column('destination_id', sa.Integer(), nullable=True),
        sa.Column('package_type', sa.String(length=20), nullable=False, server_default='single'),
        sa.Column('tour_type', sa.String(length=100), nullable=True),
        sa.Column('frontend_category', sa.String(length=100), nullable=True),
        sa.Column('image', sa.String(length=255), nullable=True),
        sa.Column('image_alt', sa.String(length=255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['destination_id'], ['destinations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_packages_slug', 'packages', ['slug'], unique=True)
    op.create_index('ix_packages_destination_id', 'packages', ['destination_id'])

    op.create_table(
        'package_destinations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('package_id', sa.Integer(), nullable=False),
        sa.Column('destination_id', sa.Integer(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['destination_id'], ['destinations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_package_destinations_package_id', 'package_destinations', ['package_id'])


def downgrade_():
    op.drop_index('ix_package_destinations_package_id', table_name='package_destinations')
    op.drop_table('package_destinations')
    op.drop_index('ix_packages_destination_id', table_name='packages')
    op.drop_index('ix_packages_slug', table_name='packages')
    op.drop_table('packages')
    op.drop_index('ix_destinations_slug', table_name='destinations')
    op.drop_table('destinations')
    op.drop_index('ix_api_tokens_jti', table_name='api_tokens')
    op.drop_index('ix_api_tokens_user_id', table_name='api_tokens')
    op.drop_table('api_tokens')
    op.drop_index('ix_users_verification_token', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')


# ── Invoicing database ─────────────────────────────────────

def upgrade_invoice():
    op.create_table(
        'invoice_package',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sku', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('category', sa.String(length=255), nullable=True),
        sa.Column('items', sa.Text(), nullable=True),
        sa.Column('item_full_details', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'terms',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=255), nullable=False),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'subcategories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('subcategory_name', sa.String(length=255), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_subcategories_category_id', 'subcategories', ['category_id'])

    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_no', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customers_invoice_no', 'customers', ['invoice_no'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invoice_no', sa.String(length=255), nullable=True),
        sa.Column('invoice_status', sa.String(length=50), nullable=True),
        sa.Column('total_price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('amount_due', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('payment_received', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invoices_invoice_no', 'invoices', ['invoice_no'], unique=True)

    op.create_table(
        'terms_and_conditions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('pdf_file_path', sa.String(length=500), nullable=True),
        sa.Column('pdf_file_name', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'completed_tours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tour_id', sa.Integer(), nullable=True),
        sa.Column('assigned_team', sa.String(length=255), nullable=True),
        sa.Column('followup_status', sa.String(length=255), nullable=True),
        sa.Column('tail_end', sa.String(length=255), nullable=True),
        sa.Column('completion_date', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('customer_assigned', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('invoice_no', sa.String(length=255), nullable=True),
        sa.Column('travel_dates', sa.String(length=100), nullable=True),
        sa.Column('destination', sa.String(length=255), nullable=True),
        sa.Column('tour_type', sa.String(length=50), nullable=True),
        sa.Column('days', sa.Integer(), nullable=True),
        sa.Column('pax', sa.Integer(), nullable=True),
        sa.Column('lead_guest', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_completed_tours_invoice_no', 'completed_tours', ['invoice_no'])

    op.create_table(
        'cancelled_tours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tour_id', sa.Integer(), nullable=True),
        sa.Column('cancellation_person', sa.String(length=255), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('refund_status', sa.String(length=50), nullable=True),
        sa.Column('cancellation_date', sa.DateTime(), nullable=True),
        sa.Column('days', sa.Integer(), nullable=True),
        sa.Column('pax', sa.Integer(), nullable=True),
        sa.Column('with_coordinator', sa.String(length=10), nullable=True),
        sa.Column('pickup_point', sa.String(length=255), nullable=True),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('payment_status', sa.String(length=50), nullable=True),
        sa.Column('accommodation', sa.String(length=255), nullable=True),
        sa.Column('room_setup', sa.String(length=255), nullable=True),
        sa.Column('booked_accommodation', sa.Boolean(), nullable=True),
        sa.Column('van_details_sent', sa.Boolean(), nullable=True),
        sa.Column('assigned_team', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('lead_guest', sa.String(length=255), nullable=True),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('destination', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    # Legacy tables: ids are assigned as max(id) + 1, flags hold 'YES' / 'NO'
    op.create_table(
        'domestic_tours',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('travel_dates', sa.String(length=100), nullable=True),
        sa.Column('destination', sa.String(length=255), nullable=True),
        sa.Column('days', sa.Integer(), nullable=True),
        sa.Column('pax', sa.Integer(), nullable=True),
        sa.Column('lead_guest', sa.String(length=255), nullable=True),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('pickup_details', sa.Text(), nullable=True),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('payment_status', sa.String(length=50), nullable=True),
        sa.Column('accommodation', sa.String(length=255), nullable=True),
        sa.Column('booked_accommodation', sa.String(length=3), nullable=True),
        sa.Column('coordinated_with_supplier', sa.String(length=3), nullable=True),
        sa.Column('hotel_balance', sa.String(length=255), nullable=True),
        sa.Column('transfer_details_sent', sa.String(length=3), nullable=True),
        sa.Column('handled_by', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'luzon_exclusive',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('travel_dates', sa.String(length=100), nullable=True),
        sa.Column('destination', sa.String(length=255), nullable=True),
        sa.Column('days', sa.Integer(), nullable=True),
        sa.Column('pax', sa.Integer(), nullable=True),
        sa.Column('with_coordinator', sa.String(length=10), nullable=True),
        sa.Column('lead_guest', sa.String(length=255), nullable=True),
        sa.Column('contact', sa.String(length=100), nullable=True),
        sa.Column('pickup_point', sa.String(length=255), nullable=True),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('payment_status', sa.String(length=50), nullable=True),
        sa.Column('accommodation', sa.String(length=255), nullable=True),
        sa.Column('room_setup', sa.String(length=255), nullable=True),
        sa.Column('booked_accommodation', sa.String(length=3), nullable=True),
        sa.Column('van_details_sent', sa.String(length=3), nullable=True),
        sa.Column('assigned_team', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade_invoice():
    op.drop_table('luzon_exclusive')
    op.drop_table('domestic_tours')
    op.drop_table('cancelled_tours')
    op.drop_index('ix_completed_tours_invoice_no', table_name='completed_tours')
    op.drop_table('completed_tours')
    op.drop_table('terms_and_conditions')
    op.drop_index('ix_invoices_invoice_no', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('ix_customers_invoice_no', table_name='customers')
    op.drop_table('customers')
    op.drop_index('ix_subcategories_category_id', table_name='subcategories')
    op.drop_table('subcategories')
    op.drop_table('categories')
    op.drop_table('terms')
    op.drop_table('invoice_package')


# ── Booking form (terms) database ──────────────────────────

def upgrade_tnc():
    op.create_table(
        'packages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'terms_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('package_id', sa.Integer(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('yes_option', sa.String(length=255), nullable=False),
        sa.Column('no_option', sa.String(length=255), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['package_id'], ['packages.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_terms_questions_package_id', 'terms_questions', ['package_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('package_type', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('lead_guest', sa.String(length=255), nullable=False),
        sa.Column('fb_name', sa.String(length=255), nullable=True),
        sa.Column('contact_number', sa.String(length=20), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('payment_amount', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('has_payment_receipt', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_submissions_email', 'submissions', ['email'])
    op.create_index('ix_submissions_archived', 'submissions', ['archived'])
    op.create_index('ix_submissions_created_at', 'submissions', ['created_at'])

    op.create_table(
        'companions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('submission_id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(['submission_id'], ['submissions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_companions_submission_id', 'companions', ['submission_id'])

    op.create_table(
        'submission_answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('submission_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=True),
        sa.Column('answer', sa.String(length=255), nullable=False),
        sa.ForeignKeyConstraint(['submission_id'], ['submissions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['terms_questions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_submission_answers_submission_id', 'submission_answers', ['submission_id'])

    op.create_table(
        'payment_receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('submission_id', sa.Integer(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['submission_id'], ['submissions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payment_receipts_submission_id', 'payment_receipts', ['submission_id'])


def downgrade_tnc():
    op.drop_index('ix_payment_receipts_submission_id', table_name='payment_receipts')
    op.drop_table('payment_receipts')
    op.drop_index('ix_submission_answers_submission_id', table_name='submission_answers')
    op.drop_table('submission_answers')
    op.drop_index('ix_companions_submission_id', table_name='companions')
    op.drop_table('companions')
    op.drop_index('ix_submissions_created_at', table_name='submissions')
    op.drop_index('ix_submissions_archived', table_name='submissions')
    op.drop_index('ix_submissions_email', table_name='submissions')
    op.drop_table('submissions')
    op.drop_index('ix_terms_questions_package_id', table_name='terms_questions')
    op.drop_table('terms_questions')
    op.drop_table('packages')
