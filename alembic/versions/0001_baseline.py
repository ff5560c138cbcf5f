"""Baseline migration - Users, properties and appointments

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-17

Creates the tables appointment scheduling reads and writes, including the
partial unique index that keeps two active appointments out of one slot.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, properties and appointments tables."""

    # ==========================================================================
    # Enable required extensions
    # ==========================================================================
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')  # For gen_random_uuid()

    # ==========================================================================
    # Users
    # ==========================================================================
    op.execute('''
        CREATE TABLE users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(255) NOT NULL,
            email VARCHAR(255) UNIQUE NOT NULL,
            phone VARCHAR(32),
            role VARCHAR(20) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_users_role ON users(role)')

    # ==========================================================================
    # Properties
    # ==========================================================================
    op.execute('''
        CREATE TABLE properties (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            title VARCHAR(255) NOT NULL,
            location VARCHAR(255) NOT NULL,
            image_url VARCHAR(500),
            price NUMERIC(14, 2) NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT true,
            agent_id UUID REFERENCES users(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_properties_agent ON properties(agent_id)')

    # ==========================================================================
    # Appointments
    # ==========================================================================
    op.execute('''
        CREATE TABLE appointments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            property_id UUID NOT NULL REFERENCES properties(id) ON DELETE CASCADE,
            client_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            agent_id UUID REFERENCES users(id) ON DELETE SET NULL,
            date DATE NOT NULL,
            start_time VARCHAR(5) NOT NULL,
            end_time VARCHAR(5) NOT NULL,
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            notes TEXT,
            client_notes TEXT,
            agent_notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    ''')
    op.execute('CREATE INDEX idx_appointments_property_date ON appointments(property_id, date)')
    op.execute('CREATE INDEX idx_appointments_client ON appointments(client_id)')
    op.execute('CREATE INDEX idx_appointments_agent ON appointments(agent_id)')
    op.execute('CREATE INDEX idx_appointments_status ON appointments(status)')
    op.execute('''
        CREATE UNIQUE INDEX uq_appointments_active_slot
        ON appointments(property_id, date, start_time)
        WHERE status IN ('pending', 'confirmed')
    ''')


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.execute('DROP INDEX IF EXISTS uq_appointments_active_slot')
    op.execute('DROP INDEX IF EXISTS idx_appointments_status')
    op.execute('DROP INDEX IF EXISTS idx_appointments_agent')
    op.execute('DROP INDEX IF EXISTS idx_appointments_client')
    op.execute('DROP INDEX IF EXISTS idx_appointments_property_date')
    op.execute('DROP TABLE IF EXISTS appointments')

    op.execute('DROP INDEX IF EXISTS idx_properties_agent')
    op.execute('DROP TABLE IF EXISTS properties')

    op.execute('DROP INDEX IF EXISTS idx_users_role')
    op.execute('DROP TABLE IF EXISTS users')
