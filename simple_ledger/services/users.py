from simple_ledger.accounting_db import db
from simple_ledger.models.user import User
import simple_ledger.common as common


def get_user(user_id):
    return db.session.get(User, user_id)


def find_or_create_user_by_phone(phone):
    user = db.session.query(User).filter(User.phone == phone).one_or_none()
    if user:
        return user

    user = User(phone=phone, name=phone)
    db.session.add(user)
    db.session.commit()
    common.logger.info(f"Created user {user.id} for phone {phone}")
    return user


def find_or_create_user_by_subject(subject, email=None, name=None):
    """Find the user for an OAuth subject, linking an existing email match."""
    user = db.session.query(User).filter(User.provider_subject == subject).one_or_none()
    if user:
        return user

    if email:
        user = db.session.query(User).filter(User.email == email).one_or_none()

    if user:
        user.provider_subject = subject
    else:
        user = User(provider_subject=subject, email=email, name=name)
        db.session.add(user)
        common.logger.info(f"Created user for OAuth subject {subject}")

    db.session.commit()
    return user
