"""
verification_service.py — Email verification codes
Issues short-lived 6-digit codes with a per-email resend cooldown and checks
them once. Storage is pluggable: in-memory, JSON file or database table.
"""

import json
import logging
import os
import secrets
import threading
import time
from abc import ABC, abstractmethod

from errors import CooldownActive, DeliveryFailure, Expired, Mismatch, NotFound
from models.verification_code import VerificationCode

logger = logging.getLogger(__name__)

COOLDOWN_SECONDS = 60
EXPIRY_SECONDS = 10 * 60


class VerificationStore(ABC):
    """email → {"code": str, "issued_at": float}"""

    @abstractmethod
    def get(self, email: str) -> dict | None:
        ...

    @abstractmethod
    def set(self, email: str, entry: dict):
        ...

    @abstractmethod
    def delete(self, email: str):
        ...


class MemoryVerificationStore(VerificationStore):
    """Process-local store. Codes are lost on restart."""

    def __init__(self):
        self._codes: dict[str, dict] = {}
        self._lock = threading.Lock()

    def get(self, email: str) -> dict | None:
        with self._lock:
            entry = self._codes.get(email)
            return dict(entry) if entry else None

    def set(self, email: str, entry: dict):
        with self._lock:
            self._codes[email] = dict(entry)

    def delete(self, email: str):
        with self._lock:
            self._codes.pop(email, None)


class FileVerificationStore(VerificationStore):
    """JSON file store. Survives restarts of a single process."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(path):
            self._write({})

    def _read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read verification file {self.path}: {e}")
            return {}

    def _write(self, codes: dict):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(codes, f, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, email: str) -> dict | None:
        with self._lock:
            return self._read().get(email)

    def set(self, email: str, entry: dict):
        with self._lock:
            codes = self._read()
            codes[email] = entry
            self._write(codes)

    def delete(self, email: str):
        with self._lock:
            codes = self._read()
            if codes.pop(email, None) is not None:
                self._write(codes)


class DatabaseVerificationStore(VerificationStore):
    """Stores codes in the verification_codes table; shared by all processes."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get(self, email: str) -> dict | None:
        db = self.session_factory()
        try:
            row = db.query(VerificationCode).filter_by(email=email).first()
            if not row:
                return None
            return {"code": row.code, "issued_at": row.issued_at}
        finally:
            db.close()

    def set(self, email: str, entry: dict):
        db = self.session_factory()
        try:
            db.merge(VerificationCode(email=email, code=entry["code"], issued_at=entry["issued_at"]))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, email: str):
        db = self.session_factory()
        try:
            db.query(VerificationCode).filter_by(email=email).delete()
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def build_store(backend: str, file_path: str | None = None, session_factory=None) -> VerificationStore:
    """Pick the storage backend named in configuration."""
    if backend == "memory":
        return MemoryVerificationStore()
    if backend == "file":
        return FileVerificationStore(file_path)
    if backend == "database":
        return DatabaseVerificationStore(session_factory)
    raise ValueError(f"Unknown verification backend: {backend}")


def _verification_email(code: str) -> str:
    return (
        "<h1>Email Verification</h1>"
        f"<p>Your verification code is: <strong>{code}</strong></p>"
        f"<p>This code will expire in {EXPIRY_SECONDS // 60} minutes.</p>"
        "<p>If you didn't request this verification, please ignore this email.</p>"
    )


class VerificationService:
    def __init__(self, store: VerificationStore, sender, clock=time.time):
        self.store = store
        self.sender = sender
        self.clock = clock

    @staticmethod
    def generate_code() -> str:
        return str(100000 + secrets.randbelow(900000))

    def issue(self, email: str) -> None:
        """Store a fresh code for the email and send it out."""
        now = self.clock()
        existing = self.store.get(email)
        if existing:
            age = now - existing["issued_at"]
            if age < COOLDOWN_SECONDS:
                raise CooldownActive(int(COOLDOWN_SECONDS - age + 0.999))

        code = self.generate_code()
        self.store.set(email, {"code": code, "issued_at": now})
        try:
            self.sender.send(email, "Verify your email for LeetDesign", _verification_email(code))
        except DeliveryFailure:
            self.store.delete(email)
            raise
        logger.info(f"Verification code issued for {email}")

    def verify(self, email: str, code: str) -> None:
        """Consume the code for the email. Raises NotFound, Expired or Mismatch."""
        entry = self.store.get(email)
        if not entry:
            raise NotFound("No verification code found for this email")

        if self.clock() - entry["issued_at"] > EXPIRY_SECONDS:
            self.store.delete(email)
            raise Expired()

        if entry["code"] != code:
            raise Mismatch()

        self.store.delete(email)
