import pandas as pd
import pytest
from swiggy.lib import reports
from swiggy.lib.reports import run_report, run_reports, kpis, ReportError, REPORT_NAMES
from swiggy.lib.warehouse import build_snapshot


@pytest.fixture
def ranking_snapshot(ranking_orders):
    return build_snapshot(ranking_orders)


def test_kpis_for_duplicated_single_order(make_orders, make_order):
    snapshot = build_snapshot(make_orders(make_order(), make_order()))
    result = kpis(snapshot)
    assert result["total_orders"] == 1
    assert result["total_revenue"] == pytest.approx(200.00)
    assert result["avg_dish_price"] == pytest.approx(200.00)
    assert result["avg_rating"] == pytest.approx(4.5)


def test_kpis_on_empty_model(make_orders):
    result = kpis(build_snapshot(make_orders()))
    assert result["total_orders"] == 0
    assert result["total_revenue"] == 0.0
    assert result["avg_dish_price"] is None
    assert result["avg_rating"] is None


def test_report_without_snapshot_fails():
    with pytest.raises(ReportError, match="not been built"):
        run_report(None, "kpi_summary")


def test_unknown_report(ranking_snapshot):
    with pytest.raises(ReportError, match="Unknown report"):
        run_report(ranking_snapshot, "top_customers")


def test_top_restaurants_per_city_uses_positional_rank(ranking_snapshot):
    result = run_report(ranking_snapshot, "top_restaurants_per_city")
    austin = result[result["city"] == "Austin"]
    assert list(austin["restaurant_name"]) == ["Pizza Palace", "Burger Barn", "Curry House"]
    assert list(austin["total_orders"]) == [3, 2, 2]
    assert list(austin["rn"]) == [1, 2, 3]

    for _, group in result.groupby("city"):
        assert len(group) <= 3
        assert group["rn"].is_unique
        assert group["total_orders"].is_monotonic_decreasing
    assert list(result[result["city"] == "Dallas"]["rn"]) == [1]


def test_top_dishes_per_category_uses_dense_rank(ranking_snapshot):
    result = run_report(ranking_snapshot, "top_dishes_per_category")
    pizza = result[result["category"] == "Pizza"]
    assert list(pizza["dish_name"]) == ["Margherita", "Pepperoni", "Veggie", "Hawaiian"]
    assert list(pizza["rnk"]) == [1, 2, 2, 3]
    assert list(result["category"].unique()) == ["Grill", "Pizza"]


def test_dense_rank_keeps_at_most_five_distinct_ranks(make_orders, make_order):
    rows = []
    seq = 0
    for dish, count in [("A", 6), ("B", 5), ("C", 4), ("D", 4), ("E", 3), ("F", 2), ("G", 1)]:
        for _ in range(count):
            seq += 1
            rows.append(make_order(dish_name=dish, rating_count=seq))
    result = run_report(build_snapshot(make_orders(*rows)), "top_dishes_per_category")
    assert list(result["dish_name"]) == ["A", "B", "C", "D", "E", "F"]
    assert list(result["rnk"]) == [1, 2, 3, 3, 4, 5]


def test_top_n_reports(ranking_snapshot):
    cities = run_report(ranking_snapshot, "top_cities")
    assert list(cities["city"]) == ["Austin", "Dallas"]
    assert list(cities["total_orders"]) == [8, 1]

    restaurants = run_report(ranking_snapshot, "top_restaurants")
    assert list(restaurants["restaurant_name"]) == [
        "Pizza Palace", "Burger Barn", "Curry House", "Lone Star Grill", "Taco Stop",
    ]

    dishes = run_report(ranking_snapshot, "top_dishes")
    assert dishes.iloc[0]["dish_name"] == "Margherita"


def test_top_cities_is_limited_to_ten(make_orders, make_order):
    frame = make_orders(*[make_order(city=f"City {i:02d}") for i in range(12)])
    result = run_report(build_snapshot(frame), "top_cities")
    assert len(result) == 10
    assert list(result["city"]) == [f"City {i:02d}" for i in range(10)]


def test_categories_are_not_limited(make_orders, make_order):
    frame = make_orders(*[make_order(category=f"Cat {i:02d}") for i in range(12)])
    assert len(run_report(build_snapshot(frame), "top_categories")) == 12


def test_category_performance(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(category="Pizza", rating=4.0),
        make_order(category="Pizza", rating=5.0),
        make_order(category="Biryani", rating=3.0),
    ))
    result = run_report(snapshot, "category_performance")
    assert list(result["category"]) == ["Pizza", "Biryani"]
    assert result.iloc[0]["avg_rating"] == pytest.approx(4.5)


def test_revenue_by_state(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(state="Texas", price=100),
        make_order(state="Ohio", price=500),
        make_order(state="Texas", price=150),
    ))
    result = run_report(snapshot, "revenue_by_state")
    assert list(result["state"]) == ["Ohio", "Texas"]
    assert list(result["total_revenue"]) == pytest.approx([500.0, 250.0])


def test_price_range_buckets(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(price=50), make_order(price=150), make_order(price=450),
    ))
    result = run_report(snapshot, "price_range_distribution")
    assert dict(zip(result["price_range"], result["total_orders"])) == {
        "Under 100": 1, "100 - 199": 1, "500+": 1,
    }


@pytest.mark.parametrize("price, bucket", [
    (99.99, "Under 100"),
    (100, "100 - 199"),
    (199, "100 - 199"),
    (199.5, "500+"),
    (200, "200 - 299"),
    (399, "300 - 399"),
    (400, "500+"),
    (750, "500+"),
])
def test_price_range_boundaries(make_orders, make_order, price, bucket):
    result = run_report(build_snapshot(make_orders(make_order(price=price))), "price_range_distribution")
    assert list(result["price_range"]) == [bucket]


def test_rating_distribution(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(rating=4.0), make_order(rating=4.5), make_order(rating=4.5, price=1),
    ))
    result = run_report(snapshot, "rating_distribution")
    assert list(result["rating"]) == pytest.approx([4.5, 4.0])
    assert list(result["total_orders"]) == [2, 1]


def test_calendar_trends_follow_chronological_order(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(order_date="2024-11-05"),
        make_order(order_date="2023-02-10"),
        make_order(order_date="2024-02-01"),
        make_order(order_date="2024-02-20"),
    ))
    yearly = run_report(snapshot, "yearly_trend")
    assert list(yearly["year"]) == [2023, 2024]
    assert list(yearly["total_orders"]) == [1, 3]

    quarterly = run_report(snapshot, "quarterly_trend")
    assert list(zip(quarterly["year"], quarterly["quarter"])) == [(2023, 1), (2024, 1), (2024, 4)]

    monthly = run_report(snapshot, "monthly_trend")
    assert list(monthly["month_name"]) == ["February", "February", "November"]
    assert list(monthly["total_orders"]) == [1, 2, 1]


def test_weekday_trend_runs_monday_to_sunday(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(order_date="2024-01-07"),  # Sunday
        make_order(order_date="2024-01-03"),  # Wednesday
        make_order(order_date="2024-01-01"),  # Monday
        make_order(order_date="2024-01-08"),  # Monday
    ))
    result = run_report(snapshot, "weekday_trend")
    assert list(result["day_name"]) == ["Monday", "Wednesday", "Sunday"]
    assert list(result["total_orders"]) == [2, 1, 1]


def test_running_revenue(make_orders, make_order):
    snapshot = build_snapshot(make_orders(
        make_order(order_date="2024-01-05", price=200),
        make_order(order_date="2024-02-03", price=50),
        make_order(order_date="2023-12-31", price=25),
        make_order(order_date="2024-01-20", price=100),
    ))
    result = run_report(snapshot, "running_revenue")
    assert list(zip(result["year"], result["month"])) == [(2023, 12), (2024, 1), (2024, 2)]
    assert list(result["total_revenue"]) == pytest.approx([25.0, 300.0, 50.0])
    assert list(result["running_total_revenue"]) == pytest.approx([25.0, 325.0, 375.0])


def test_running_total_ends_at_total_revenue(ranking_snapshot):
    result = run_report(ranking_snapshot, "running_revenue")
    assert result["running_total_revenue"].is_monotonic_increasing
    assert result["running_total_revenue"].iloc[-1] == pytest.approx(kpis(ranking_snapshot)["total_revenue"])


def test_run_reports_covers_the_catalog(ranking_snapshot):
    results = run_reports(ranking_snapshot, max_workers=4)
    assert list(results) == REPORT_NAMES
    assert all(isinstance(frame, pd.DataFrame) for frame in results.values())


def test_run_reports_isolates_failures(ranking_snapshot):
    results = run_reports(ranking_snapshot, ["top_cities", "no_such_report"])
    assert isinstance(results["top_cities"], pd.DataFrame)
    assert isinstance(results["no_such_report"], ReportError)


def test_run_reports_wraps_query_errors(ranking_snapshot, monkeypatch):
    monkeypatch.setitem(reports.REPORT_SQL, "broken_report", "SELECT * FROM no_such_table")
    results = run_reports(ranking_snapshot, ["top_cities", "broken_report"])

    assert isinstance(results["top_cities"], pd.DataFrame)
    assert isinstance(results["broken_report"], ReportError)
    assert "broken_report" in str(results["broken_report"])
    assert results["broken_report"].__cause__ is not None
