"""
auth — User authentication module.

Provides:
  • JWT access / refresh token issuance & verification
  • Password hashing (bcrypt)
  • Google ID-token verification
  • Register / Login / Google / Refresh / Logout / Verify / Me API routes
  • ``get_current_user_id`` FastAPI dependency
"""
