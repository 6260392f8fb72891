from flask import Blueprint

errors_bp = Blueprint("errors", __name__)

# Import route modules to register their handlers
from . import routes  # noqa: E402,F401
