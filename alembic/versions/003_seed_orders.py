"""003: seed demo orders and customers

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 100 random orders; profit columns use the same formulas as the service
    op.execute("""
        WITH raw AS (
            SELECT
                n AS sn,
                (100 + floor(random() * 10000))::numeric AS po_value,
                random() AS cost_ratio,
                random() AS duty_roll,
                random() AS freight_roll,
                random() AS dispatch_roll,
                DATE '2024-01-01' + floor(random() * 730)::int AS po_date,
                DATE '2024-01-01' + floor(random() * 730)::int AS target_date,
                DATE '2024-01-01' + floor(random() * 730)::int AS dispatch_date,
                DATE '2024-01-01' + floor(random() * 730)::int AS supplier_po_date
            FROM generate_series(1, 100) AS n
        ),
        priced AS (
            SELECT
                raw.*,
                floor(po_value * (0.6 + cost_ratio * 0.3)) AS costs
            FROM raw
        ),
        charged AS (
            SELECT
                priced.*,
                CASE WHEN duty_roll > 0.5 THEN floor(costs * 0.05) END AS customs_duty,
                CASE WHEN freight_roll > 0.5 THEN floor(random() * 500) END AS freight_cost
            FROM priced
        )
        INSERT INTO orders (
            sn, part_number, description, qty, po_date, term, customer, cust_po,
            status, remarks, currency, po_value, costs, customs_duty, freight_cost,
            gross_profit, net_profit, profit_percent, profit_percent_after_cost,
            payment_received, investor_paid, target_date, dispatch_date,
            supplier, supplier_po, supplier_po_date, awb_to_uae, stability, last_edited
        )
        SELECT
            sn,
            (ARRAY['C20207000', 'P199753', 'A45892', 'B78321', 'D12456', 'E98765', 'F34567', 'G87654'])[1 + floor(random() * 8)::int],
            (ARRAY['HUBCAP', 'FILTER', 'BEARING', 'GASKET', 'VALVE', 'CONNECTOR', 'SEAL', 'BRACKET'])[1 + floor(random() * 8)::int],
            1 + floor(random() * 20),
            po_date,
            (ARRAY['PREPAY', 'NET 7', 'NET 30'])[1 + floor(random() * 3)::int],
            (ARRAY['TTK', 'AAL', 'EK', 'QR', 'SV'])[1 + floor(random() * 5)::int],
            'PO ' || (9000 + sn),
            (ARRAY[
                'Order yet to be processed', 'Order processed', 'Supplier Paid',
                'Transit to UAE', 'Received in UAE', 'Ready for Dispatch', 'Delivered'
            ])[1 + floor(random() * 7)::int],
            CASE WHEN random() > 0.7 THEN 'Urgent delivery required' ELSE '' END,
            (ARRAY['USD', 'EUR', 'AED'])[1 + floor(random() * 3)::int],
            po_value,
            costs,
            customs_duty,
            freight_cost,
            ROUND(po_value - costs, 2),
            ROUND(po_value - (costs + COALESCE(freight_cost, 0) + COALESCE(customs_duty, 0)), 2),
            ROUND((po_value - costs) / po_value * 100, 2),
            ROUND((po_value - (costs + COALESCE(freight_cost, 0) + COALESCE(customs_duty, 0))) / po_value * 100, 2),
            (ARRAY['Yes', 'No'])[1 + floor(random() * 2)::int],
            (ARRAY['Yes', 'No'])[1 + floor(random() * 2)::int],
            target_date,
            CASE WHEN dispatch_roll > 0.5 THEN dispatch_date END,
            (ARRAY[
                'GMF AeroAsia Tbk', 'Air Industries France, Inc', 'Honeywell Aerospace',
                'Collins Aerospace', 'Parker Hannifin'
            ])[1 + floor(random() * 5)::int],
            'PO24' || LPAD(sn::text, 4, '0'),
            supplier_po_date,
            CASE WHEN random() > 0.3 THEN (1000000000 + floor(random() * 9000000000))::bigint::text ELSE '' END,
            1 + floor(random() * 10),
            NOW()
        FROM charged;
    """)
    op.execute("""
        INSERT INTO customers (name)
        SELECT DISTINCT customer FROM orders
        ON CONFLICT DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DELETE FROM customers;")
    op.execute("DELETE FROM orders;")
