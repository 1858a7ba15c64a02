from accounts.models import User


def make_applicant(email="student@example.com", full_name="", **extra):
    user = User.objects.create_user(email=email, password="unused-pass-123", **extra)
    if full_name:
        user.profile.full_name = full_name
        user.profile.save()
    return user


def make_staff(email="staff@example.com", **extra):
    return User.objects.create_user(email=email, password="unused-pass-123", role=User.ROLE_STAFF, **extra)
