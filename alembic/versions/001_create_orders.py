"""001: create orders table

Revision ID: 001
Revises: 
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE orders (
            sn                          INT             PRIMARY KEY,
            part_number                 VARCHAR(64)     NOT NULL,
            description                 VARCHAR(255)    NOT NULL,
            qty                         NUMERIC(12, 2)  NOT NULL,
            po_date                     DATE            NOT NULL,
            term                        VARCHAR(10)     NOT NULL,
            customer                    VARCHAR(100)    NOT NULL,
            cust_po                     VARCHAR(64)     NOT NULL,
            status                      VARCHAR(40)     NOT NULL,
            remarks                     VARCHAR(500)    NOT NULL DEFAULT '',
            currency                    VARCHAR(3)      NOT NULL,
            po_value                    NUMERIC(14, 2)  NOT NULL,
            costs                       NUMERIC(14, 2)  NOT NULL,
            customs_duty                NUMERIC(14, 2),
            freight_cost                NUMERIC(14, 2),
            gross_profit                NUMERIC(14, 2),
            net_profit                  NUMERIC(14, 2),
            profit_percent              NUMERIC(9, 2),
            profit_percent_after_cost   NUMERIC(9, 2),
            payment_received            VARCHAR(3)      NOT NULL,
            investor_paid               VARCHAR(3)      NOT NULL,
            target_date                 DATE,
            dispatch_date               DATE,
            supplier                    VARCHAR(100)    NOT NULL,
            supplier_po                 VARCHAR(64)     NOT NULL,
            supplier_po_date            DATE            NOT NULL,
            awb_to_uae                  VARCHAR(64)     NOT NULL DEFAULT '',
            stability                   SMALLINT        NOT NULL DEFAULT 10,
            last_edited                 TIMESTAMPTZ,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_sn_positive        CHECK (sn > 0),
            CONSTRAINT ck_orders_qty                CHECK (qty > 0),
            CONSTRAINT ck_orders_term               CHECK (term IN ('PREPAY', 'NET 7', 'NET 30')),
            CONSTRAINT ck_orders_currency           CHECK (currency IN ('USD', 'EUR', 'AED', 'INR')),
            CONSTRAINT ck_orders_po_value           CHECK (po_value >= 0),
            CONSTRAINT ck_orders_costs              CHECK (costs >= 0),
            CONSTRAINT ck_orders_customs_duty       CHECK (customs_duty IS NULL OR customs_duty >= 0),
            CONSTRAINT ck_orders_freight_cost       CHECK (freight_cost IS NULL OR freight_cost >= 0),
            CONSTRAINT ck_orders_payment_received   CHECK (payment_received IN ('Yes', 'No')),
            CONSTRAINT ck_orders_investor_paid      CHECK (investor_paid IN ('Yes', 'No')),
            CONSTRAINT ck_orders_stability          CHECK (stability BETWEEN 0 AND 10),
            CONSTRAINT ck_orders_status             CHECK (
                status IN (
                    'Order yet to be processed', 'Order processed', 'Cancelled',
                    'Payment pending to Supplier', 'Supplier Paid',
                    'Long LT - Awaiting ESD', 'Long LT - ESD Provided',
                    'Awaiting Collection Details', 'Ready for Collection from Supplier',
                    'Awaiting AWB from FF', 'AWB Shared to Supplier', 'Transit to UAE',
                    'Need to Collect', 'Received in UAE', 'Hold', 'Issue',
                    'Ready for Dispatch', 'Delivered'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_created_at ON orders (created_at, sn);")
    op.execute("CREATE INDEX idx_orders_status ON orders (status);")
    op.execute("CREATE INDEX idx_orders_customer ON orders (customer, po_date);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
