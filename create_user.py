import getpass
import sys

from pixelgym import create_app
from pixelgym.domain.users.services import SUPER_ADMIN_NAME, find_user_by_name, new_profile
from pixelgym.errors import IdentityError
from pixelgym.services import get_identity_service, get_record_store

app = create_app()

with app.app_context():
    # Create the permanent administrator account
    store = get_record_store()
    if find_user_by_name(store.get_by_prefix("user:"), SUPER_ADMIN_NAME):
        print(f"⚠️ User '{SUPER_ADMIN_NAME}' already exists.")
        sys.exit(0)

    email = f"{SUPER_ADMIN_NAME}@{app.config['EMAIL_DOMAIN']}"
    password = getpass.getpass(f"Password for {SUPER_ADMIN_NAME}: ")
    try:
        identity = get_identity_service().sign_up(
            email, password, metadata={"name": SUPER_ADMIN_NAME, "role": "coach"}
        )
    except IdentityError as e:
        print(f"❌ {e.message}")
        sys.exit(1)

    store.set(f"user:{identity.id}", new_profile(identity.id, SUPER_ADMIN_NAME, "coach"))
    print("✅ Administrator created successfully!")
    print(f"📧 Email: {email}")
