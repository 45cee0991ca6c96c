from .auth_service import sign_in, sign_out, sign_up, restore_session
from .user_service import ensure_demo_accounts

# Import the page-level services directly where needed.

__all__ = ["sign_in", "sign_out", "sign_up", "restore_session", "ensure_demo_accounts"]
