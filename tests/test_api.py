from refashion.dependencies import get_mailer
from refashion.errors import RemoteUnavailable


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


# --- Auth ---

def test_signup_sets_session_then_rejects_duplicate(client):
    payload = {"action": "signup", "name": "Asha", "email": "asha@example.com", "password": "x"}

    r = client.post("/api/auth", json=payload)
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["name"] == "Asha"
    assert user["email"] == "asha@example.com"
    assert "session" in r.cookies

    r = client.post("/api/auth", json=payload)
    assert r.status_code == 409
    assert r.json() == {"error": "Account already exists"}


def test_session_is_read_back_from_cookie(signed_in):
    r = signed_in.get("/api/auth")
    assert r.json()["user"]["email"] == "asha@example.com"


def test_anonymous_session_is_null(client):
    assert client.get("/api/auth").json() == {"user": None}


def test_malformed_cookie_means_signed_out(client):
    client.cookies.set("session", "not-json")
    assert client.get("/api/auth").json() == {"user": None}


def test_login_and_logout(signed_in):
    r = signed_in.post("/api/auth", json={"action": "logout"})
    assert r.json() == {"ok": True}
    assert signed_in.get("/api/auth").json() == {"user": None}

    r = signed_in.post("/api/auth", json={"action": "login", "email": "asha@example.com", "password": "wrong"})
    assert r.status_code == 401

    r = signed_in.post("/api/auth", json={"action": "login", "email": "asha@example.com", "password": "x"})
    assert r.status_code == 200
    assert signed_in.get("/api/auth").json()["user"]["name"] == "Asha"


def test_logout_without_session_is_fine(client):
    assert client.post("/api/auth", json={"action": "logout"}).json() == {"ok": True}


def test_set_session_from_client_identity(client):
    r = client.post("/api/auth", json={"action": "setSession", "user": {"uid": "fb1", "email": "ravi@example.com"}})
    assert r.json()["user"] == {"uid": "fb1", "name": "ravi", "email": "ravi@example.com"}

    r = client.post("/api/auth", json={"action": "setSession", "user": {"email": "ravi@example.com"}})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid user data"}


def test_auth_input_errors(client):
    assert client.post("/api/auth", json={"action": "signup", "email": "a@b.c"}).status_code == 400
    r = client.post("/api/auth", json={"action": "dance"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid action"}


# --- Products ---

def test_list_products_starts_with_defaults(client):
    products = client.get("/api/products").json()["products"]
    assert [p["id"] for p in products] == ["1", "2", "3", "4", "5", "6"]


def test_create_product_requires_session(client):
    r = client.post("/api/products", json={"name": "x", "artisan": "y", "price": 10, "description": "z"})
    assert r.status_code == 401
    assert r.json() == {"error": "Sign in required"}


def test_create_and_delete_product(signed_in):
    r = signed_in.post("/api/products", json={
        "name": "Patchwork Pouch",
        "artisan": "Fatima Begum",
        "price": 450,
        "description": "Scraps, stitched.",
        "tag": "",
        "images": ["1.jpg", "2.jpg", "3.jpg", "4.jpg", "5.jpg"],
    })
    assert r.status_code == 200
    product = r.json()["product"]
    assert len(product["images"]) == 4
    assert product["tag"] is None

    listed = signed_in.get("/api/products").json()["products"]
    assert listed[0]["id"] == product["id"]

    r = signed_in.delete("/api/products", params={"id": product["id"]})
    assert r.json() == {"ok": True}
    r = signed_in.delete("/api/products", params={"id": product["id"]})
    assert r.status_code == 404
    assert r.json() == {"error": "Product not found"}


def test_create_product_validation(signed_in):
    r = signed_in.post("/api/products", json={"name": "x", "artisan": "y", "price": 0, "description": "z"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_delete_requires_session(client):
    r = client.delete("/api/products", params={"id": "1"})
    assert r.status_code == 401


def test_migrate_endpoint(signed_in):
    r = signed_in.post("/api/products/migrate")
    assert r.json() == {"status": "migrated", "uploaded": 6, "failed": 0}
    r = signed_in.post("/api/products/migrate")
    assert r.json()["status"] == "already_migrated"


# --- Cart & checkout ---

def test_cart_flow(client):
    assert client.get("/api/cart").json() == {"items": [], "total": 0, "count": 0}

    client.post("/api/cart/items", json={"product_id": "2"})
    r = client.post("/api/cart/items", json={"product_id": "2"})
    cart = r.json()
    assert cart["count"] == 2
    assert cart["total"] == 899 * 2
    assert len(cart["items"]) == 1

    r = client.patch("/api/cart/items/2", json={"quantity": 5})
    assert r.json()["count"] == 5

    r = client.patch("/api/cart/items/2", json={"quantity": 0})
    assert r.json() == {"items": [], "total": 0, "count": 0}


def test_cart_survives_sign_in(client):
    client.post("/api/cart/items", json={"product_id": "1"})
    client.post("/api/auth", json={"action": "signup", "name": "Asha", "email": "asha@example.com", "password": "x"})
    client.post("/api/auth", json={"action": "logout"})
    assert client.get("/api/cart").json()["count"] == 1


def test_add_unknown_product_to_cart(client):
    r = client.post("/api/cart/items", json={"product_id": "missing"})
    assert r.status_code == 404


def test_remove_and_clear(client):
    client.post("/api/cart/items", json={"product_id": "1"})
    client.post("/api/cart/items", json={"product_id": "3"})
    assert client.delete("/api/cart/items/1").json()["count"] == 1
    assert client.delete("/api/cart").json()["count"] == 0


def test_checkout_clears_cart(client):
    client.post("/api/cart/items", json={"product_id": "5"})
    client.post("/api/cart/items", json={"product_id": "6"})

    r = client.post("/api/checkout", json={"method": "upi", "name": "Asha", "email": "asha@example.com"})

    assert r.status_code == 200
    order = r.json()
    assert order["status"] == "paid"
    assert order["total"] == 599 + 1299
    assert order["count"] == 2
    assert client.get("/api/cart").json()["count"] == 0


def test_checkout_with_empty_cart(client):
    r = client.post("/api/checkout", json={"method": "card", "name": "Asha", "email": "asha@example.com"})
    assert r.status_code == 400
    assert r.json() == {"error": "Cart is empty"}


# --- Contact ---

class RecordingMailer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def send(self, subject, text):
        if self.error:
            raise self.error
        self.sent.append((subject, text))


def test_contact_contribute(client):
    mailer = RecordingMailer()
    client.app.dependency_overrides[get_mailer] = lambda: mailer

    r = client.post("/api/contact", json={
        "type": "contribute",
        "name": "Asha",
        "location": "Pune",
        "mobile": "+91 98765 43210",
        "email": "asha@example.com",
        "clothesType": "Denim jackets",
    })

    assert r.json() == {"success": True}
    subject, text = mailer.sent[0]
    assert subject == "[Dorodango] New Contribution from Asha"
    assert "Type of Clothes: Denim jackets" in text


def test_contact_collaborate_defaults(client):
    mailer = RecordingMailer()
    client.app.dependency_overrides[get_mailer] = lambda: mailer

    client.post("/api/contact", json={
        "type": "collaborate",
        "name": "Ravi",
        "artForms": ["Block printing", "Embroidery"],
        "experience": "5 years",
    })

    text = mailer.sent[0][1]
    assert "Art Forms: Block printing, Embroidery" in text
    assert "Social Media: Not provided" in text
    assert "Suggestions: None" in text


def test_contact_invalid_type(client):
    r = client.post("/api/contact", json={"type": "spam", "name": "x"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid type"}


def test_contact_without_relay_key(client):
    r = client.post("/api/contact", json={"type": "contribute", "name": "Asha"})
    assert r.status_code == 500
    assert "RESEND_API_KEY" in r.json()["error"]


def test_contact_relay_failure(client):
    client.app.dependency_overrides[get_mailer] = lambda: RecordingMailer(RemoteUnavailable("Failed to send message"))
    r = client.post("/api/contact", json={"type": "contribute", "name": "Asha"})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to send message"}


def test_set_session_rejects_non_string_identity(client):
    for user in ({"uid": 1, "email": "a@b.c"}, {"uid": "u", "email": 5}):
        r = client.post("/api/auth", json={"action": "setSession", "user": user})
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid user data"}
