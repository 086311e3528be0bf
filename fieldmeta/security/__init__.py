from .nonce import NonceManager

__all__ = ["NonceManager"]
