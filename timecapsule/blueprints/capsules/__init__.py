from flask import Blueprint

capsules_bp = Blueprint("capsules", __name__)

# Import route modules to register their endpoints
from . import routes  # noqa: E402,F401
