# ecommerce_admin/constants.py
# Symbolic result codes and the seeded role/permission catalogue.
import enum


class StatusCode(enum.IntEnum):
    """
    Business-level result codes carried in every response envelope.
    They double as translation keys: the catalogue entry for str(code.value)
    replaces the default message when present.

    1000s success, 2000s generic errors, 3000s users,
    4000s roles and permissions, 5000s catalogue.
    """
    # --- Success ---
    OK = 1000
    LOGIN_SUCCESS = 1001
    LOGIN_SUCCESS_NO_TOKEN = 1002
    LOGOUT_SUCCESS = 1003
    CREATED = 1004
    ACCEPTED = 1005
    NO_CONTENT = 1006
    UPDATED = 1007
    DELETED = 1008
    RESTORED = 1009
    HEALTH_OK = 1010

    # --- Generic errors ---
    BAD_REQUEST = 2000
    UNAUTHORIZED = 2001
    FORBIDDEN = 2002
    NOT_FOUND = 2003
    VALIDATION_ERROR = 2004
    LOGIN_INVALID_CREDENTIALS = 2005
    SERVER_ERROR = 2006
    CONFLICT = 2007
    WRITE_CONFLICT = 2008
    DELETE_BLOCKED = 2009
    METHOD_NOT_ALLOWED = 2010
    TOO_MANY_REQUESTS = 2011
    TOKEN_EXPIRED = 2012
    TOKEN_REVOKED = 2013

    # --- Users ---
    CREATED_USER_SUCCESSFULLY = 3000
    CREATED_USER_UNSUCCESSFULLY = 3001
    GET_USER_SUCCESSFULLY = 3002
    GET_USER_UNSUCCESSFULLY = 3003
    USER_NOT_FOUND = 3004
    UPDATE_USER_SUCCESSFULLY = 3005
    UPDATE_USER_UNSUCCESSFULLY = 3006
    DELETE_USER_SUCCESSFULLY = 3007
    DELETE_USER_UNSUCCESSFULLY = 3008
    RESTORE_USER_SUCCESSFULLY = 3009
    USER_NOT_DELETED = 3010
    CANNOT_DELETE_SELF = 3011
    USER_ROLES_UPDATED = 3012

    # --- Roles & permissions ---
    ROLE_PROTECTED = 4000
    ROLE_PERMISSIONS_SYNCED = 4001
    PERMISSION_IN_USE = 4002

    # --- Catalogue ---
    CATEGORY_SELF_PARENT = 5000
    CATEGORY_HAS_CHILDREN = 5001
    BRAND_HAS_PRODUCTS = 5002
    COLOR_HAS_VARIANTS = 5003
    SIZE_HAS_VARIANTS = 5004


SUPER_ADMIN_ROLE = 'Super Admin'

PERMISSION_GROUPS = {
    'users': ['view users', 'create users', 'edit users', 'delete users', 'restore users', 'assign roles'],
    'products': ['view products', 'create products', 'edit products', 'delete products', 'restore products'],
    'brands': ['view brands', 'create brands', 'edit brands', 'delete brands'],
    'categories': ['view categories', 'create categories', 'edit categories', 'delete categories'],
    'colors': ['view colors', 'create colors', 'edit colors', 'delete colors'],
    'sizes': ['view sizes', 'create sizes', 'edit sizes', 'delete sizes'],
    'orders': ['view orders', 'create orders', 'edit orders', 'delete orders', 'process orders', 'cancel orders'],
    'customers': ['view customers', 'create customers', 'edit customers', 'delete customers'],
    'roles': ['view roles', 'create roles', 'edit roles', 'delete roles', 'assign permissions'],
    'permissions': ['view permissions', 'create permissions', 'edit permissions', 'delete permissions'],
    'system': ['view system settings', 'edit system settings', 'view logs', 'run maintenance'],
}

ALL_PERMISSIONS = [name for group in PERMISSION_GROUPS.values() for name in group]

_CATALOGUE_GROUPS = ('products', 'brands', 'categories', 'colors', 'sizes')

ROLE_DEFINITIONS = {
    SUPER_ADMIN_ROLE: ALL_PERMISSIONS,
    'Admin': [p for p in ALL_PERMISSIONS if p not in ('run maintenance', 'delete permissions', 'delete roles')],
    'Manager': [p for g in _CATALOGUE_GROUPS + ('orders', 'customers') for p in PERMISSION_GROUPS[g]] + ['view users'],
    'Sales': ['view products', 'view brands', 'view categories', 'view colors', 'view sizes']
             + PERMISSION_GROUPS['orders'] + PERMISSION_GROUPS['customers'],
    'Support': ['view orders', 'edit orders', 'process orders', 'view customers'],
}
