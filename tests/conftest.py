import pandas as pd
import pytest
from swiggy.lib.raw_orders import RAW_COLUMNS


def _order(**overrides):
    order = {
        "state": "Texas",
        "city": "Austin",
        "location": "Downtown",
        "restaurant_name": "Pizza Palace",
        "category": "Pizza",
        "dish_name": "Margherita",
        "order_date": "2024-01-01",
        "price": 200,
        "rating": 4.5,
        "rating_count": 10,
    }
    order.update(overrides)
    return order


@pytest.fixture
def make_order():
    return _order


@pytest.fixture
def make_orders():
    def build(*orders):
        return pd.DataFrame(list(orders), columns=RAW_COLUMNS)
    return build


@pytest.fixture
def ranking_orders(make_orders):
    """
    Austin restaurants: Pizza Palace x3, Burger Barn x2, Curry House x2, Taco Stop x1
    Pizza dishes: Margherita x3, Pepperoni x2, Veggie x2, Hawaiian x1
    Dallas has a single restaurant with one order.
    """
    rows = []
    seq = iter(range(1, 100))

    def add(count, **kw):
        for _ in range(count):
            rows.append(_order(rating_count=next(seq), **kw))

    add(3, restaurant_name="Pizza Palace", category="Pizza", dish_name="Margherita")
    add(2, restaurant_name="Burger Barn", category="Pizza", dish_name="Pepperoni")
    add(2, restaurant_name="Curry House", category="Pizza", dish_name="Veggie")
    add(1, restaurant_name="Taco Stop", category="Pizza", dish_name="Hawaiian")
    add(1, city="Dallas", location="Uptown", restaurant_name="Lone Star Grill",
        category="Grill", dish_name="Brisket")
    return make_orders(*rows)
