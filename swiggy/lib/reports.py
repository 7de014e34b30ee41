"""
reports.py

Fixed catalog of analytical queries over a built warehouse snapshot.

Every report is a read-only DuckDB query against the snapshot's fact and
dimension frames and returns a DataFrame of labelled columns. Formatting
(units, thousands separators) is left to the caller.

Ordering rules:
- trends follow calendar order; the weekday report runs Monday..Sunday (ISO)
- rankings order by count descending, ties broken by ascending label
- top_restaurants_per_city uses ROW_NUMBER (distinct positions, rn <= 3)
- top_dishes_per_category uses DENSE_RANK (ties share a rank, rnk <= 5)
"""

from concurrent.futures import ThreadPoolExecutor
import pandas as pd
from loguru import logger
from swiggy.lib.duckdb_utils import run_query

TOP_N = 10
TOP_RESTAURANTS_PER_CITY = 3
TOP_DISHES_PER_CATEGORY = 5


class ReportError(RuntimeError):
    """A report could not be run (no warehouse built yet, or unknown report)."""
    pass


PRICE_RANGE_CASE = """
    CASE
        WHEN CAST(price AS DOUBLE) < 100 THEN 'Under 100'
        WHEN CAST(price AS DOUBLE) BETWEEN 100 AND 199 THEN '100 - 199'
        WHEN CAST(price AS DOUBLE) BETWEEN 200 AND 299 THEN '200 - 299'
        WHEN CAST(price AS DOUBLE) BETWEEN 300 AND 399 THEN '300 - 399'
        ELSE '500+'
    END
"""

REPORT_SQL = {
    "kpi_summary": """
        SELECT
            COUNT(*) AS total_orders,
            COALESCE(SUM(CAST(price AS DOUBLE)), 0) AS total_revenue,
            AVG(CAST(price AS DOUBLE)) AS avg_dish_price,
            AVG(CAST(rating AS DOUBLE)) AS avg_rating
        FROM fact_orders
    """,

    "yearly_trend": """
        SELECT d.year, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_date d ON f.date_id = d.date_id
        GROUP BY d.year
        ORDER BY d.year
    """,

    "quarterly_trend": """
        SELECT d.year, d.quarter, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_date d ON f.date_id = d.date_id
        GROUP BY d.year, d.quarter
        ORDER BY d.year, d.quarter
    """,

    "monthly_trend": """
        SELECT d.year, d.month, d.month_name, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_date d ON f.date_id = d.date_id
        GROUP BY d.year, d.month, d.month_name
        ORDER BY d.year, d.month
    """,

    "weekday_trend": """
        SELECT dayname(d.full_date) AS day_name, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_date d ON f.date_id = d.date_id
        GROUP BY dayname(d.full_date), isodow(d.full_date)
        ORDER BY isodow(d.full_date)
    """,

    "top_cities": f"""
        SELECT l.city, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_location l ON l.location_id = f.location_id
        GROUP BY l.city
        ORDER BY total_orders DESC, l.city
        LIMIT {TOP_N}
    """,

    "revenue_by_state": """
        SELECT l.state, SUM(CAST(f.price AS DOUBLE)) AS total_revenue
        FROM fact_orders f
        JOIN dim_location l ON l.location_id = f.location_id
        GROUP BY l.state
        ORDER BY total_revenue DESC, l.state
    """,

    "top_restaurants": f"""
        SELECT r.restaurant_name, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_restaurant r ON r.restaurant_id = f.restaurant_id
        GROUP BY r.restaurant_name
        ORDER BY total_orders DESC, r.restaurant_name
        LIMIT {TOP_N}
    """,

    "top_categories": """
        SELECT c.category, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_category c ON c.category_id = f.category_id
        GROUP BY c.category
        ORDER BY total_orders DESC, c.category
    """,

    "top_dishes": f"""
        SELECT di.dish_name, COUNT(*) AS total_orders
        FROM fact_orders f
        JOIN dim_dish di ON di.dish_id = f.dish_id
        GROUP BY di.dish_name
        ORDER BY total_orders DESC, di.dish_name
        LIMIT {TOP_N}
    """,

    "category_performance": """
        SELECT
            c.category,
            COUNT(*) AS total_orders,
            AVG(CAST(f.rating AS DOUBLE)) AS avg_rating
        FROM fact_orders f
        JOIN dim_category c ON c.category_id = f.category_id
        GROUP BY c.category
        ORDER BY total_orders DESC, c.category
    """,

    "price_range_distribution": f"""
        SELECT {PRICE_RANGE_CASE} AS price_range, COUNT(*) AS total_orders
        FROM fact_orders
        GROUP BY price_range
        ORDER BY total_orders DESC, price_range
    """,

    "rating_distribution": """
        SELECT rating, COUNT(*) AS total_orders
        FROM fact_orders
        GROUP BY rating
        ORDER BY total_orders DESC, rating
    """,

    "top_restaurants_per_city": f"""
        WITH city_restaurant AS (
            SELECT l.city, r.restaurant_name, COUNT(*) AS total_orders
            FROM fact_orders f
            JOIN dim_location l ON l.location_id = f.location_id
            JOIN dim_restaurant r ON r.restaurant_id = f.restaurant_id
            GROUP BY l.city, r.restaurant_name
        ),
        ranked AS (
            SELECT *,
                ROW_NUMBER() OVER (
                    PARTITION BY city
                    ORDER BY total_orders DESC, restaurant_name
                ) AS rn
            FROM city_restaurant
        )
        SELECT city, restaurant_name, total_orders, rn
        FROM ranked
        WHERE rn <= {TOP_RESTAURANTS_PER_CITY}
        ORDER BY city, rn
    """,

    "top_dishes_per_category": f"""
        WITH dish_perf AS (
            SELECT c.category, di.dish_name, COUNT(*) AS total_orders
            FROM fact_orders f
            JOIN dim_category c ON c.category_id = f.category_id
            JOIN dim_dish di ON di.dish_id = f.dish_id
            GROUP BY c.category, di.dish_name
        ),
        ranked AS (
            SELECT *,
                DENSE_RANK() OVER (
                    PARTITION BY category
                    ORDER BY total_orders DESC
                ) AS rnk
            FROM dish_perf
        )
        SELECT category, dish_name, total_orders, rnk
        FROM ranked
        WHERE rnk <= {TOP_DISHES_PER_CATEGORY}
        ORDER BY category, rnk, dish_name
    """,

    "running_revenue": """
        WITH monthly_revenue AS (
            SELECT
                d.year,
                d.month,
                d.month_name,
                SUM(CAST(f.price AS DOUBLE)) AS total_revenue
            FROM fact_orders f
            JOIN dim_date d ON d.date_id = f.date_id
            GROUP BY d.year, d.month, d.month_name
        )
        SELECT *,
            SUM(total_revenue) OVER (
                ORDER BY year, month
                ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW
            ) AS running_total_revenue
        FROM monthly_revenue
        ORDER BY year, month
    """,
}

REPORT_NAMES = list(REPORT_SQL)


def run_report(snapshot, name: str) -> pd.DataFrame:
    """
    Run one named report against a warehouse snapshot.

    Raises:
        ReportError: if no snapshot has been built or the name is unknown
    """
    if snapshot is None:
        raise ReportError(f"Cannot run '{name}': the warehouse has not been built")
    if name not in REPORT_SQL:
        raise ReportError(f"Unknown report '{name}'. Available: {', '.join(REPORT_NAMES)}")

    result = run_query(REPORT_SQL[name], **snapshot.tables)
    logger.debug(f"📊 {name} (generation {snapshot.generation}): {len(result):,} rows")
    return result


def kpis(snapshot) -> dict:
    """Headline KPIs as a plain dict."""
    row = run_report(snapshot, "kpi_summary").iloc[0]
    return {
        "total_orders": int(row["total_orders"]),
        "total_revenue": float(row["total_revenue"]),
        "avg_dish_price": None if pd.isna(row["avg_dish_price"]) else float(row["avg_dish_price"]),
        "avg_rating": None if pd.isna(row["avg_rating"]) else float(row["avg_rating"]),
    }


def run_reports(snapshot, names=None, max_workers: int = 4) -> dict:
    """
    Run several reports concurrently against the same snapshot.

    A failing report does not stop the others; its entry holds a ReportError.
    Query errors (DuckDB, pandas) are wrapped, with the original as __cause__.

    Returns:
        dict: report name -> DataFrame or ReportError
    """
    names = list(names) if names is not None else REPORT_NAMES
    results = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = {name: pool.submit(run_report, snapshot, name) for name in names}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except ReportError as e:
                logger.error(f"❌ Report {name} failed: {e}")
                results[name] = e
            except Exception as e:
                logger.error(f"❌ Report {name} failed: {e}")
                error = ReportError(f"Report '{name}' failed: {e}")
                error.__cause__ = e
                results[name] = error

    return results
