"""
client — async session client for the auth API.

Provides:
  • SessionManager — signals + durable storage of the signed-in user
  • AuthRepository — envelope-aware HTTP calls with classified errors
  • AuthInterceptor — bearer attachment and forced logout on 401
  • AuthGuard / GuestGuard / RoleGuard — navigation gates
  • ``create_auth_client`` — wires all of the above
"""
