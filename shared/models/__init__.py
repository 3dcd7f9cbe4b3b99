from shared.models.user import CurrentUser
from shared.models.pagination import Page, PageParams

__all__ = ["CurrentUser", "Page", "PageParams"]
