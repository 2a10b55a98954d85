"""
Custom authentication backend for multi-field login.

Allows officers to authenticate using any one of:
``username``, ``national_id``, ``phone_number``, or ``email``
together with their ``password``.  Blocked accounts never authenticate.

Registered in ``settings.AUTHENTICATION_BACKENDS`` so that Django's
``authenticate()`` call dispatches to it.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

from .models import UserStatus

User = get_user_model()


def identifier_lookup(identifier: str) -> Q:
    """``Q`` matching a user by any of the four unique login fields."""
    return (
        Q(username=identifier)
        | Q(national_id=identifier)
        | Q(phone_number=identifier)
        | Q(email__iexact=identifier)
    )


class MultiFieldAuthBackend(ModelBackend):
    """
    Authenticate against username, national_id, phone_number, or email.

    ``django.contrib.auth.authenticate(identifier=..., password=...)``
    resolves the user from the ``identifier`` keyword argument.
    """

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if identifier is None or password is None:
            return None

        try:
            user = User.objects.get(identifier_lookup(identifier))
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None
        except User.MultipleObjectsReturned:
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    def user_can_authenticate(self, user) -> bool:
        if getattr(user, "status", None) == UserStatus.BLOCKED:
            return False
        return super().user_can_authenticate(user)
