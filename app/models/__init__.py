from app.models.tenant import Tenant
from app.models.client import Client
from app.models.user import User
from app.models.membership import Membership
from app.models.refresh_token import RefreshToken

__all__ = ["Tenant", "Client", "User", "Membership", "RefreshToken"]
