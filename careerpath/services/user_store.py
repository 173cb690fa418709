import hashlib
import logging
from typing import Optional, Protocol

from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter
from firebase_admin import firestore

from careerpath.errors import ConflictError
from careerpath.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore(Protocol):
    def find_by_email(self, email: str) -> Optional[User]: ...

    def create(self, username: str, email: str, password_hash: str) -> User: ...


class FirestoreUserStore:
    """
    Users live in `<collection>/<auto id>`. Each email is also claimed in
    `<collection>_emails/<sha256(email)>`, written in the same batch with
    create() so two signups for one email cannot both succeed.
    """

    def __init__(self, client, collection: str = "users"):
        self.client = client
        self.collection = collection

    @classmethod
    def from_app(cls, app, collection: str = "users") -> "FirestoreUserStore":
        return cls(firestore.client(app), collection)

    def _claim_ref(self, email: str):
        key = hashlib.sha256(email.encode("utf-8")).hexdigest()
        return self.client.collection(f"{self.collection}_emails").document(key)

    def find_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        query = (
            self.client.collection(self.collection)
            .where(filter=FieldFilter("email", "==", email))
            .limit(1)
        )
        for doc in query.stream():
            data = doc.to_dict()
            return User(
                id=doc.id,
                username=data.get("username", ""),
                email=data["email"],
                # the field keeps its historical name; it only ever holds the hash
                password_hash=data["password"],
                created_at=data.get("createdAt"),
            )
        return None

    def create(self, username: str, email: str, password_hash: str) -> User:
        """
        Insert a user if the email is free.
        Raises: ConflictError when the email is already claimed.
        """
        email = normalize_email(email)
        user_ref = self.client.collection(self.collection).document()

        batch = self.client.batch()
        batch.create(self._claim_ref(email), {"userId": user_ref.id})
        batch.create(user_ref, {
            "username": username,
            "email": email,
            "password": password_hash,
            "createdAt": firestore.SERVER_TIMESTAMP,
        })
        try:
            batch.commit()
        except AlreadyExists:
            logger.info("Signup rejected, email already claimed")
            raise ConflictError("Email already exists")

        return User(id=user_ref.id, username=username, email=email, password_hash=password_hash)
