"""
Role and permission checks.

Every function here is pure: it takes an already-resolved user (anything with
`id` and `role` attributes, or None for an anonymous caller) and answers a
yes/no question. Nothing is cached; the permission table is static.
"""

from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Resource(str, Enum):
    TRANSACTIONS_READ = "transactions:read"
    TRANSACTIONS_WRITE = "transactions:write"
    TRANSACTIONS_DELETE = "transactions:delete"
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    REPORTS_READ = "reports:read"
    ADMIN_ACCESS = "admin:access"


ROLE_PERMISSIONS = {
    Role.USER: frozenset({Resource.TRANSACTIONS_READ}),
    Role.ADMIN: frozenset(Resource),
}

PUBLIC_PAGES = ("/", "/auth/signin", "/api-docs")
AUTHENTICATED_PAGES = ("/profile", "/transactions", "/dashboard")
ADMIN_PAGE_PREFIXES = ("/admin/users", "/admin/reports")


class AccessDeniedError(Exception):
    status_code = 403


class NotAuthenticatedError(AccessDeniedError):
    status_code = 401

    def __init__(self, message="Not authenticated"):
        super().__init__(message)


class ForbiddenError(AccessDeniedError):
    status_code = 403

    def __init__(self, resource=None):
        self.resource = resource
        if resource is None:
            message = "Access denied"
        else:
            message = f"Access denied: permission required for {getattr(resource, 'value', resource)}"
        super().__init__(message)


def _role_of(user):
    role = getattr(user, "role", None)
    try:
        return Role(role)
    except ValueError:
        return None


def has_role(user, role):
    """True when the user carries exactly `role`. No inheritance between roles."""
    if user is None:
        return False
    if not getattr(user, "role", None):
        return False
    return _role_of(user) == role


def is_admin(user):
    return has_role(user, Role.ADMIN)


def is_authenticated(user):
    if user is None:
        return False
    user_id = getattr(user, "id", None)
    return isinstance(user_id, str) and len(user_id) > 0


def can_access_resource(user, resource):
    if not is_authenticated(user):
        return False
    role = _role_of(user)
    if role is None:
        return False
    return resource in ROLE_PERMISSIONS[role]


def can_view_transaction(user, owner_id):
    """Admins see every row; everyone else only their own."""
    if not is_authenticated(user):
        return False
    if is_admin(user):
        return True
    return user.id == owner_id


def can_modify_transaction(user, owner_id):
    # Ownership does not matter: regular users never modify, not even their own rows.
    if not is_authenticated(user):
        return False
    return is_admin(user)


def get_user_permissions(user):
    if not is_authenticated(user):
        return []
    return [resource for resource in Resource if can_access_resource(user, resource)]


def require_access(user, resource):
    """
    Raise unless the user holds `resource`.

    NotAuthenticatedError means there is no usable user at all;
    ForbiddenError means the user is known but lacks the permission.
    """
    if can_access_resource(user, resource):
        return
    if not is_authenticated(user):
        raise NotAuthenticatedError()
    raise ForbiddenError(resource)


def can_access_page(user, path):
    if path in PUBLIC_PAGES:
        return True

    if path in AUTHENTICATED_PAGES:
        return is_authenticated(user)

    if any(path.startswith(prefix) for prefix in ADMIN_PAGE_PREFIXES):
        return is_admin(user)

    # anything unlisted needs a login
    return is_authenticated(user)
