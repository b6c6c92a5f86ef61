# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/bullion/routes/auth.py
"""
Authentication API routes

- POST /api/auth/login issues a bearer token scoped to (tenant, user, role)
- POST /api/auth/logout revokes it
- GET  /api/auth/me returns the identity behind the token

Self-registration does not exist: users are created by operators
(flask users create).
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import bearer_token, require_auth
from ..permissions import describe_permissions
from ..services import auth_service, permission_service, session_service
from ..time_utils import to_utc_z
from . import json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Returns the token and the user's identity. The token must be sent as
    "Authorization: Bearer <token>" on every other route.

    SECURITY: failed attempts are recorded as LOGIN_FAILED security events.
    """
    try:
        data = json_body()
        username = str(data.get("username") or "").strip()
        password = data.get("password")

        if not username or not password:
            return jsonify({"error": "username and password required"}), 400

        user = auth_service.authenticate(username, str(password))

        if not user:
            permission_service.log_security_event(
                user_id=None,
                event_type="LOGIN_FAILED",
                success=False,
                resource=request.path,
                action="LOGIN",
                reason=f"Invalid credentials for {username}",
                ip_address=request.remote_addr,
                user_agent=request.headers.get("User-Agent"),
            )
            return jsonify({"error": "Invalid credentials"}), 400

        session, token = session_service.create_session(user.id)

        return jsonify({
            "token": token,
            "user": {
                "id": user.id,
                "username": user.username,
                "role": user.role,
                "tenantId": user.tenant_id,
                "tenantName": user.tenant.name if user.tenant else None,
            },
            "permissions": sorted(permission_service.get_role_permissions(user.role)),
            "expiresAt": to_utc_z(session.expires_at),
            "message": "Login successful"
        }), 200

    except ValueError as e:
        # Inactive tenant
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    Expects Authorization header: Bearer <token>
    """
    try:
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authorization header required"}), 401

        if not session_service.revoke_session(token, reason="User logout"):
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    codes = permission_service.get_role_permissions(g.role)
    return jsonify({
        "user": user.to_dict(),
        "tenantId": g.tenant_id,
        "role": g.role,
        "permissions": sorted(codes),
        "capabilities": describe_permissions(codes),
    }), 200
