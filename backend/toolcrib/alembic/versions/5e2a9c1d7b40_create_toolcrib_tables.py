"""create toolcrib tables

Revision ID: 5e2a9c1d7b40
Revises:
Create Date: 2026-10-18 09:12:41.204118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5e2a9c1d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('classification', sa.String(length=128), nullable=False),
        sa.Column('subclassification', sa.String(length=128), nullable=True),
        sa.Column('shelf_location', sa.String(length=32), nullable=True),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_products_id'), 'products', ['id'], unique=False)
    op.create_index(op.f('ix_products_code'), 'products', ['code'], unique=True)
    op.create_index('ix_products_name', 'products', ['name'], unique=False)
    op.create_index('ix_products_classification', 'products', ['classification', 'subclassification'], unique=False)
    op.create_index('ix_products_shelf_location', 'products', ['shelf_location'], unique=False)

    op.create_table(
        'workers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workers_id'), 'workers', ['id'], unique=False)
    op.create_index(op.f('ix_workers_code'), 'workers', ['code'], unique=True)
    op.create_index('ix_workers_name', 'workers', ['name'], unique=False)
    op.create_index('ix_workers_is_active', 'workers', ['is_active'], unique=False)

    op.create_table(
        'loans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('worker_id', sa.Integer(), nullable=False),
        sa.Column('delivered_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('returned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            'status',
            sa.Enum(
                'pendiente', 'en_progreso', 'completado', 'atrasado',
                name='loan_status_enum', native_enum=False, length=16,
            ),
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['worker_id'], ['workers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_loans_id'), 'loans', ['id'], unique=False)
    op.create_index('ix_loans_worker', 'loans', ['worker_id'], unique=False)
    op.create_index('ix_loans_status', 'loans', ['status'], unique=False)
    op.create_index('ix_loans_delivered_at', 'loans', ['delivered_at'], unique=False)

    op.create_table(
        'loan_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('loan_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('quantity_lent', sa.Integer(), nullable=False),
        sa.Column('quantity_returned', sa.Integer(), nullable=False),
        sa.Column('detail', sa.Text(), nullable=False),
        sa.CheckConstraint('quantity_lent >= 1', name='ck_loan_items_quantity_lent_positive'),
        sa.CheckConstraint(
            'quantity_returned >= 0 AND quantity_returned <= quantity_lent',
            name='ck_loan_items_quantity_returned_range',
        ),
        sa.ForeignKeyConstraint(['loan_id'], ['loans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_loan_items_id'), 'loan_items', ['id'], unique=False)
    op.create_index('ix_loan_items_loan', 'loan_items', ['loan_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_loan_items_loan', table_name='loan_items')
    op.drop_index(op.f('ix_loan_items_id'), table_name='loan_items')
    op.drop_table('loan_items')

    op.drop_index('ix_loans_delivered_at', table_name='loans')
    op.drop_index('ix_loans_status', table_name='loans')
    op.drop_index('ix_loans_worker', table_name='loans')
    op.drop_index(op.f('ix_loans_id'), table_name='loans')
    op.drop_table('loans')

    op.drop_index('ix_workers_is_active', table_name='workers')
    op.drop_index('ix_workers_name', table_name='workers')
    op.drop_index(op.f('ix_workers_code'), table_name='workers')
    op.drop_index(op.f('ix_workers_id'), table_name='workers')
    op.drop_table('workers')

    op.drop_index('ix_products_shelf_location', table_name='products')
    op.drop_index('ix_products_classification', table_name='products')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_index(op.f('ix_products_code'), table_name='products')
    op.drop_index(op.f('ix_products_id'), table_name='products')
    op.drop_table('products')
