from .user import User
from .capsule import Capsule
from .media import Media
