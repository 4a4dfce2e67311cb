"""Cart and checkout load test scenarios.

ShopperJourney walks one shopper through register -> login -> add/remove
-> total -> checkout and checks that the order total matches the cart
total read just before checkout.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import account_data, payment_type, product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


def ensure_products(client, count: int = 5) -> list[int]:
    """Return the catalogue's product ids, creating some when it is empty."""
    response = client.get("/product/catalog", name="GET /product/catalog")
    product_ids = [product["id"] for product in response.json()] if response.status_code == 200 else []
    while len(product_ids) < count:
        created = client.post("/product/new", json=product_data(), name="POST /product/new")
        if created.status_code != 201:
            break
        product_ids.append(created.json()["id"])
    return product_ids


def register_and_login(client) -> str | None:
    payload = account_data()
    created = client.post("/user/new", json=payload, name="POST /user/new")
    if created.status_code != 201:
        return None
    login = client.post(
        "/user/login",
        json={"username": payload["username"], "password": payload["password"]},
        name="POST /user/login",
    )
    return payload["username"] if login.status_code == 200 else None


class ShopperJourney(SequentialTaskSet):
    def on_start(self):
        self.state = ShopperState()
        self.product_ids = ensure_products(self.client)
        self.state.username = register_and_login(self.client)
        if self.state.username is None:
            self.interrupt()

    @task
    def fill_cart(self):
        for product_id in random.sample(self.product_ids, k=min(3, len(self.product_ids))):
            for _ in range(random.randint(1, 3)):
                with self.client.post(
                    "/cart/add",
                    json={"productId": product_id},
                    catch_response=True,
                    name="POST /cart/add",
                ) as resp:
                    if resp.status_code == 200:
                        self.state.added(product_id)
                    else:
                        resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def remove_one(self):
        if not self.state.expected_lines:
            return
        product_id = random.choice(list(self.state.expected_lines))
        with self.client.post(
            "/cart/remove",
            json={"productId": product_id},
            catch_response=True,
            name="POST /cart/remove",
        ) as resp:
            if resp.status_code == 200:
                self.state.removed(product_id)
            else:
                resp.failure(f"Remove from cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def verify_cart(self):
        with self.client.get("/cart/items", catch_response=True, name="GET /cart/items") as resp:
            if resp.status_code != 200:
                resp.failure(f"List cart failed: {resp.status_code} — {extract_error_detail(resp)}")
                return
            actual = {item["product"]["id"]: item["quantity"] for item in resp.json()}
            if actual != self.state.expected_lines:
                resp.failure(f"Cart drifted: expected {self.state.expected_lines}, got {actual}")

    @task
    def checkout(self):
        total = self.client.get("/cart/total", name="GET /cart/total").json()
        with self.client.post(
            "/transaction/checkout",
            json={"paymentType": payment_type()},
            catch_response=True,
            name="POST /transaction/checkout",
        ) as resp:
            if resp.status_code == 200:
                self.state.expected_lines.clear()
                self.state.orders_placed += 1
                if abs(resp.json()["total"] - total) > 0.001:
                    resp.failure(f"Order total {resp.json()['total']} != cart total {total}")
            elif resp.status_code != 404:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    tasks = [ShopperJourney]
    wait_time = between(0.5, 2)
