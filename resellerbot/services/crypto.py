from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from resellerbot.models import SharedCredential


class CredentialCipherError(Exception):
    pass


class CryptoService:
    def __init__(self, app_secret: str) -> None:
        digest = hashlib.sha256(app_secret.encode("utf-8")).digest()
        key = base64.urlsafe_b64encode(digest)
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str | None) -> str | None:
        if not plaintext:
            return None
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str | None) -> str | None:
        if not ciphertext:
            return None
        try:
            return self._fernet.decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise CredentialCipherError("Stored credential cannot be decrypted with APP_SECRET") from exc

    def reveal(self, credential: SharedCredential) -> SharedCredential:
        return SharedCredential(
            login=self.decrypt(credential.login),
            password=self.decrypt(credential.password),
        )
