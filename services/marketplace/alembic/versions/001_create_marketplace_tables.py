"""create users, products, product images and conversations tables

Revision ID: 001
Revises: 
Create Date: 2025-03-26 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.Text(), nullable=False, unique=True),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text()),
        sa.Column('is_seller', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_collector', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('password_hash', sa.Text()),
        sa.Column('auth_provider', sa.String(20), nullable=False, server_default='local'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_users_username', 'users', ['username'])

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('seller_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('price_cents', sa.BigInteger(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('condition', sa.String(20), nullable=False),
        sa.Column('location', sa.Text()),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint('price_cents > 0', name='positive_price'),
        sa.CheckConstraint("status IN ('active', 'sold', 'inactive', 'deleted')", name='status_valid'),
    )
    op.create_index('idx_seller_status', 'products', ['seller_id', 'status'])
    op.create_index('idx_category', 'products', ['category'])

    op.create_table(
        'product_images',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('is_main', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_product_images_product', 'product_images', ['product_id'])

    op.create_table(
        'conversations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('product_id', sa.Uuid(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('buyer_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('seller_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('product_id', 'buyer_id', name='uq_conversation_product_buyer'),
    )
    op.create_index('idx_conversations_seller', 'conversations', ['seller_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('conversation_id', sa.Uuid(), sa.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.String(64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_messages_conversation', 'messages', ['conversation_id'])


def downgrade() -> None:
    op.drop_table('messages')
    op.drop_table('conversations')
    op.drop_table('product_images')
    op.drop_table('products')
    op.drop_table('users')
