# ecommerce_admin/admin_api/__init__.py
from flask import Blueprint

admin_api_bp = Blueprint('admin_api_bp', __name__, url_prefix='/api/v1')

# Import all the route modules to register their routes with the blueprint
from . import health_routes  # noqa: E402,F401
from . import profile_routes  # noqa: E402,F401
from . import user_routes  # noqa: E402,F401
from . import role_routes  # noqa: E402,F401
from . import permission_routes  # noqa: E402,F401
from . import brand_routes  # noqa: E402,F401
from . import category_routes  # noqa: E402,F401
from . import product_routes  # noqa: E402,F401
from . import variant_routes  # noqa: E402,F401
from . import color_routes  # noqa: E402,F401
from . import size_routes  # noqa: E402,F401
