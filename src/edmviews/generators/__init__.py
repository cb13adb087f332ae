"""View generators."""

from .base import BaseViewGenerator  # noqa: F401
from .views import MappingViewGenerator  # noqa: F401
