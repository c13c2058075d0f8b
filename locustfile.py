from locust import HttpUser, task, between
import random

class ShopperUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register a shopper for this simulated client
        email = f"shopper_{random.randint(1, 1_000_000)}@example.com"
        r = self.client.post("/auth/register", json={"email": email, "password": "secret123"})
        self.email = email if r.status_code == 201 else None

    @task(3)
    def browse_catalog(self):
        self.client.get("/products", params={"sort": random.choice(["name", "price_low", "price_high", "newest"])})

    @task(2)
    def view_product(self):
        r = self.client.get("/products")
        if r.status_code == 200 and r.json():
            product = random.choice(r.json())
            self.client.get(f"/products/{product['id']}", name="/products/[id]")
            self.client.get(f"/products/{product['id']}/checkout", name="/products/[id]/checkout")

    @task(1)
    def dashboard(self):
        if not getattr(self, "email", None):
            return
        self.client.get("/orders")
