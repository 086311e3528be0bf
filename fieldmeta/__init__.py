# ==============================================
# fieldmeta — Field Persistence Framework
# ==============================================
#
# Package Structure:
#
# fieldmeta/
# ├── context/     # Load / save a field tree (nonce, walk, presave)
# ├── fields/      # Field and Group definitions
# ├── storage/     # Key/value meta stores (memory, JSON, MySQL, MongoDB)
# ├── security/    # Anti-forgery nonces
# ├── errors.py    # Exception types
# ├── config.py    # Configuration management
# └── cli.py       # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
