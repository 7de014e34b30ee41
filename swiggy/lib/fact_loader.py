"""
fact_loader.py

Resolve surrogate keys for every deduplicated order and emit fact_orders.

Resolution is an inner join on natural-key equality against each dimension.
An order whose key misses any dimension (a join miss, usually a NULL order date
or location component) produces no fact row; misses are counted and logged,
never raised.
"""

import pandas as pd
from loguru import logger
from swiggy.lib.duckdb_utils import run_query

FACT_COLUMNS = [
    "order_id", "date_id", "price", "rating", "rating_count",
    "location_id", "restaurant_id", "category_id", "dish_id",
]

FACT_SQL = """
    SELECT
        ROW_NUMBER() OVER (ORDER BY o.ingest_seq) AS order_id,
        dd.date_id,
        o.price,
        o.rating,
        o.rating_count,
        dl.location_id,
        dr.restaurant_id,
        dc.category_id,
        dsh.dish_id
    FROM orders o
    JOIN dim_date dd
        ON CAST(dd.full_date AS DATE) = CAST(o.order_date AS DATE)
    JOIN dim_location dl
        ON dl.state = o.state
        AND dl.city = o.city
        AND dl.location = o.location
    JOIN dim_restaurant dr
        ON dr.restaurant_name = o.restaurant_name
    JOIN dim_category dc
        ON dc.category = o.category
    JOIN dim_dish dsh
        ON dsh.dish_name = o.dish_name
    ORDER BY order_id
"""


def load_fact_orders(orders: pd.DataFrame, dimensions: dict):
    """
    Build fact_orders from deduplicated orders and the built dimensions.

    Args:
        orders (DataFrame): deduplicated staged orders
        dimensions (dict): table name -> DataFrame from build_dimensions()

    Returns:
        tuple: (fact DataFrame, number of orders dropped by join misses)
    """
    fact = run_query(
        FACT_SQL,
        orders=orders,
        dim_date=dimensions["dim_date"],
        dim_location=dimensions["dim_location"],
        dim_restaurant=dimensions["dim_restaurant"],
        dim_category=dimensions["dim_category"],
        dim_dish=dimensions["dim_dish"],
    )

    join_misses = len(orders) - len(fact)
    if join_misses:
        logger.warning(f"⚠️ {join_misses:,} orders did not resolve against every dimension and were excluded")
    logger.info(f"✅ fact_orders: {len(fact):,} rows loaded")
    return fact, join_misses
