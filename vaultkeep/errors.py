class VaultError(Exception):
    """Base class for every failure the vault reports."""


class NotInitialized(VaultError):
    def __init__(self):
        super().__init__("Vault not initialized. Run 'vaultkeep init' first.")


class AlreadyExists(VaultError):
    def __init__(self):
        super().__init__("Vault already exists. Use --force to reinitialize.")


class WrongPassword(VaultError):
    # Deliberately one message for a bad password and a corrupted ciphertext.
    def __init__(self):
        super().__init__("Wrong master password")


class VaultLocked(WrongPassword):
    def __init__(self):
        VaultError.__init__(self, "Vault is locked. Unlock it first.")


class SecretNotFound(VaultError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Secret not found: {name}")


class DuplicateName(VaultError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate secret name: {name}")


class VaultIOError(VaultError):
    pass


class SerializationError(VaultError):
    pass


class UnsupportedVersion(SerializationError):
    def __init__(self, version):
        self.version = version
        super().__init__(f"Unsupported vault file version: {version}")


class EncryptionError(VaultError):
    pass


class CipherError(EncryptionError):
    pass


class KdfError(VaultError):
    pass
