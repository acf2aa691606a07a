from .admin import router as admin
from .pages import router as pages
from .public import router as public
