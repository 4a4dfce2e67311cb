"""Contention scenario: many concurrent requests against one account's cart.

Every ContendedCartUser logs into the same shared account, so add-to-cart
and checkout requests race on the same cart rows. Run with several users
and watch for 5xx responses; 503s mean lock waits exceeded lock_timeout.
"""

import random

from locust import HttpUser, constant_pacing, task

from loadtests.data_generators import account_data, payment_type
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.ordering import ensure_products

SHARED_ACCOUNT = account_data()


class ContendedCartUser(HttpUser):
    wait_time = constant_pacing(0.1)

    def on_start(self):
        self.product_ids = ensure_products(self.client)
        # Only the first user succeeds at registering; the rest just log in
        self.client.post("/user/new", json=SHARED_ACCOUNT, name="[STRESS] POST /user/new")
        self.client.post(
            "/user/login",
            json={"username": SHARED_ACCOUNT["username"], "password": SHARED_ACCOUNT["password"]},
            name="[STRESS] POST /user/login",
        )

    @task(10)
    def add_item(self):
        with self.client.post(
            "/cart/add",
            json={"productId": random.choice(self.product_ids)},
            catch_response=True,
            name="[STRESS] POST /cart/add",
        ) as resp:
            if resp.status_code >= 500:
                resp.failure(f"{resp.status_code} — {extract_error_detail(resp)}")

    @task(1)
    def checkout(self):
        with self.client.post(
            "/transaction/checkout",
            json={"paymentType": payment_type()},
            catch_response=True,
            name="[STRESS] POST /transaction/checkout",
        ) as resp:
            if resp.status_code == 404:
                resp.success()
            elif resp.status_code >= 500:
                resp.failure(f"{resp.status_code} — {extract_error_detail(resp)}")
