# ==============================================
# CONTEXT (load / save a field tree)
# ==============================================
#
# Modules:
# --------
# - context.py → Context: nonce check, render, recursive load / save
#
# ==============================================

from .context import Context

__all__ = ["Context"]
