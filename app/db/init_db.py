# app/db/init_db.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.tenant import Tenant
from app.models.client import Client
from app.models.membership import Membership
from app.models.user import User, ROLE_ADMIN
from app.core.security_password import hash_password

DEMO_TENANT_ID = "00000000-0000-0000-0000-000000000001"
DEMO_CLIENT_ID = "00000000-0000-0000-0000-000000000002"
DEMO_ADMIN_ID = "00000000-0000-0000-0000-000000000003"
DEMO_ADMIN_EMAIL = "admin@demo.com"
DEMO_ADMIN_PASSWORD = "admin123"

def init_db(db: Session) -> None:
    tenant = db.get(Tenant, DEMO_TENANT_ID)
    if not tenant:
        tenant = Tenant(id=DEMO_TENANT_ID, name="Demo Tenant")
        db.add(tenant); db.flush()

    client = db.get(Client, DEMO_CLIENT_ID)
    if not client:
        client = Client(id=DEMO_CLIENT_ID, tenant_id=tenant.id, name="Demo Brand")
        db.add(client); db.flush()

    admin = db.scalar(select(User).where(User.email == DEMO_ADMIN_EMAIL))
    if not admin:
        admin = User(
            id=DEMO_ADMIN_ID,
            tenant_id=tenant.id,
            email=DEMO_ADMIN_EMAIL,
            password_hash=hash_password(DEMO_ADMIN_PASSWORD),
            name="Admin User",
            role=ROLE_ADMIN,
        )
        db.add(admin); db.flush()

    membership = db.scalar(
        select(Membership).where(Membership.user_id == admin.id, Membership.client_id == client.id)
    )
    if not membership:
        db.add(Membership(user_id=admin.id, client_id=client.id, role=ROLE_ADMIN))

    db.commit()
