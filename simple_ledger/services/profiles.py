from simple_ledger.accounting_db import db
from simple_ledger.errors import ConflictError, ValidationError
from simple_ledger.models.profile import Profile
import simple_ledger.common as common


def get_profile(user_id):
    """
    Return the user's Profile, or None before onboarding.
    """
    return db.session.get(Profile, user_id)


def create_profile(user_id, company_name):
    company_name = (company_name or "").strip()
    if not company_name:
        raise ValidationError("Company name is required")
    if get_profile(user_id):
        raise ConflictError("Profile already exists")

    profile = Profile(id=user_id, company_name=company_name)
    db.session.add(profile)
    db.session.commit()
    common.logger.info(f"Profile created for user {user_id}: {company_name!r}")
    return profile
