from datetime import datetime, timezone

import httpx
from pydantic import ValidationError as PydanticValidationError

from refashion.errors import AuthError, ConflictError, RemoteUnavailable, ValidationError
from refashion.logger import get_logger
from refashion.services.remote_store import RemoteStore
from refashion.models.schemas import MAX_IMAGES, Product, Session

logger = get_logger(__name__)

IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1"
FIRESTORE_URL = "https://firestore.googleapis.com/v1"

BAD_CREDENTIALS = {"EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_LOGIN_CREDENTIALS", "USER_DISABLED"}


class FirebaseClient(RemoteStore):
    def __init__(self, project_id: str, api_key: str, client: httpx.AsyncClient | None = None):
        self.api_key = api_key
        self.documents_url = f"{FIRESTORE_URL}/projects/{project_id}/databases/(default)/documents"
        self._client = client or httpx.AsyncClient(timeout=15.0)

    # -- Low-level helpers --

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, turning transport failures into RemoteUnavailable."""
        params = {"key": self.api_key, **kwargs.pop("params", {})}
        try:
            return await self._client.request(method, url, params=params, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"Firebase request failed: {e}") from e

    def _check(self, response: httpx.Response) -> dict:
        if response.status_code >= 400:
            raise RemoteUnavailable(
                f"Firebase API error {response.status_code}: {response.text[:200]}"
            )
        return response.json() if response.content else {}

    async def _identity_call(self, endpoint: str, payload: dict) -> dict:
        """Call an Identity Toolkit endpoint. Returns the body or the error code."""
        response = await self._request(
            "POST",
            f"{IDENTITY_URL}/accounts:{endpoint}",
            json={**payload, "returnSecureToken": True},
        )
        if response.status_code == 400:
            message = response.json().get("error", {}).get("message", "")
            # Codes look like "INVALID_PASSWORD" or "WEAK_PASSWORD : Password should be..."
            return {"error": message.split(" ")[0]}
        return self._check(response)

    # -- Product methods --

    async def list_products(self) -> list[Product]:
        """Read the whole products collection, following page tokens."""
        products = []
        page_token = None
        while True:
            params = {"pageSize": 300}
            if page_token:
                params["pageToken"] = page_token
            data = self._check(
                await self._request("GET", f"{self.documents_url}/products", params=params)
            )
            for doc in data.get("documents", []):
                product = self._parse_product(doc)
                if product is not None:
                    products.append(product)
            page_token = data.get("nextPageToken")
            if not page_token:
                return products

    async def create_product(self, product: Product) -> Product:
        fields = product.model_dump(exclude={"id"})
        self._check(
            await self._request(
                "POST",
                f"{self.documents_url}/products",
                params={"documentId": product.id},
                json={"fields": {k: self._encode(v) for k, v in fields.items()}},
            )
        )
        return product

    async def delete_product(self, product_id: str) -> None:
        response = await self._request("DELETE", f"{self.documents_url}/products/{product_id}")
        if response.status_code != 404:
            self._check(response)

    # -- Account methods --

    async def register(self, name: str, email: str, password: str) -> Session:
        data = await self._identity_call("signUp", {"email": email, "password": password})
        if data.get("error") == "EMAIL_EXISTS":
            raise ConflictError("Account already exists")
        if "error" in data:
            # WEAK_PASSWORD, INVALID_EMAIL, MISSING_PASSWORD and friends
            raise ValidationError(f"Sign up failed: {data['error']}")
        session = Session(uid=data["localId"], name=name, email=data.get("email", email))
        try:
            await self.set_profile(session.uid, name, session.email)
        except RemoteUnavailable as e:
            # The account exists either way; the profile is rebuilt on next login
            logger.warning("Profile write for %s failed: %s", session.uid, e)
        return session

    async def login(self, email: str, password: str) -> Session:
        data = await self._identity_call("signInWithPassword", {"email": email, "password": password})
        if data.get("error") in BAD_CREDENTIALS:
            raise AuthError("Invalid email or password")
        if "error" in data:
            raise AuthError(f"Sign in failed: {data['error']}")
        uid = data["localId"]
        email = data.get("email", email)
        try:
            profile = await self.get_profile(uid)
        except RemoteUnavailable as e:
            logger.warning("Profile read for %s failed: %s", uid, e)
            profile = None
        name = profile.name if profile else data.get("displayName") or email.split("@")[0]
        return Session(uid=uid, name=name, email=email)

    async def set_profile(self, uid: str, name: str, email: str) -> None:
        """Merge name/email into users/{uid}; other fields on the document are kept."""
        now = datetime.now(timezone.utc).isoformat()
        fields = {"name": name, "email": email, "updatedAt": now}
        existing = await self._request("GET", f"{self.documents_url}/users/{uid}")
        if existing.status_code == 404:
            fields["createdAt"] = now
        self._check(
            await self._request(
                "PATCH",
                f"{self.documents_url}/users/{uid}",
                params={"updateMask.fieldPaths": list(fields)},
                json={"fields": {k: self._encode(v) for k, v in fields.items()}},
            )
        )

    async def get_profile(self, uid: str) -> Session | None:
        response = await self._request("GET", f"{self.documents_url}/users/{uid}")
        if response.status_code == 404:
            return None
        fields = self._decode_fields(self._check(response).get("fields", {}))
        return Session(uid=uid, name=fields.get("name", ""), email=fields.get("email", ""))

    # -- Helpers to translate Firestore typed values --

    def _encode(self, value) -> dict:
        if value is None:
            return {"nullValue": None}
        if isinstance(value, bool):
            return {"booleanValue": value}
        if isinstance(value, int):
            return {"integerValue": str(value)}
        if isinstance(value, float):
            return {"doubleValue": value}
        if isinstance(value, list):
            return {"arrayValue": {"values": [self._encode(v) for v in value]}}
        return {"stringValue": str(value)}

    def _decode(self, value: dict):
        if "stringValue" in value:
            return value["stringValue"]
        if "integerValue" in value:
            return int(value["integerValue"])
        if "doubleValue" in value:
            return float(value["doubleValue"])
        if "booleanValue" in value:
            return value["booleanValue"]
        if "arrayValue" in value:
            return [self._decode(v) for v in value["arrayValue"].get("values", [])]
        return None

    def _decode_fields(self, fields: dict) -> dict:
        return {k: self._decode(v) for k, v in fields.items()}

    def _parse_product(self, doc: dict) -> Product | None:
        """Turn a raw Firestore document into a Product. Returns None for unusable documents."""
        fields = self._decode_fields(doc.get("fields", {}))
        fields["id"] = doc.get("name", "").rsplit("/", 1)[-1]
        fields["images"] = (fields.get("images") or [])[:MAX_IMAGES]
        try:
            return Product(**fields)
        except PydanticValidationError as e:
            logger.warning("Skipping malformed product document %s: %s", doc.get("name"), e.error_count())
            return None

    async def close(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()
