from datetime import datetime

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.http import HttpResponse
from django.test import Client, TestCase

from access_expiration.models import UserMeta
from access_expiration.policy import ExpirationSettings
from access_expiration.utilities import localize

User = get_user_model()


class AccessExpirationTestCaseMixin:
    """
    Utilities shared by the access expiration test cases: user creation, logins and metadata assertions.
    """

    def login_as(self, user):
        login_as(self.client, user)

    def login_as_admin(self):
        return login_as_admin(self.client)

    def login_as_user(self):
        return login_as_user(self.client)

    def login_as_user_with_permissions(self, permissions):
        return login_as_user_with_permissions(self.client, permissions)

    def assert_meta(self, user, key, value):
        assert_meta(self, user, key, value)

    def assert_response_is_login_page(self, response: HttpResponse):
        response_is_login_page(self, response)


def local_datetime(*args) -> datetime:
    return localize(datetime(*args))


def expiration_settings(**kwargs) -> ExpirationSettings:
    values = {
        "duration_days": 30,
        "denied_message": "To gain access please contact us.",
        "expiry_notice_days": 15,
        "expiry_subject": "Your subscription is going to expire!",
        "expiry_message": "Hello {{ user.first_name }}, your access expires on {{ expire_at|date:'Y-m-d' }}",
        "welcome_enabled": True,
        "welcome_after_days": 7,
        "welcome_grace_days": 4,
        "welcome_subject": "Welcome {{ user.first_name }}!",
        "welcome_message": "Thank you for registering on {{ registered_at|date:'Y-m-d' }}",
    }
    values.update(kwargs)
    return ExpirationSettings(**values)


def create_user(username=None, date_joined=None, email=None, is_superuser=False, password=None):
    count = User.objects.count()
    username = username or f"test{count}"
    user = User(
        username=username,
        first_name="Testy",
        last_name="McTester",
        email=email if email is not None else f"{username}@example.com",
        is_superuser=is_superuser,
        is_staff=is_superuser,
    )
    if date_joined:
        user.date_joined = date_joined
    if password:
        user.set_password(password)
    user.save()
    return user


def login_as(client: Client, user):
    client.force_login(user)


def login_as_admin(client: Client):
    admin, created = User.objects.get_or_create(
        username="test_admin", first_name="Test", last_name="Admin", is_staff=True, is_superuser=True
    )
    login_as(client, admin)
    return admin


def login_as_user(client: Client):
    user, created = User.objects.get_or_create(username="test_user", first_name="Testy", last_name="McTester")
    login_as(client, user)
    return user


def login_as_user_with_permissions(client: Client, permissions):
    user, created = User.objects.get_or_create(username="test_user", first_name="Testy", last_name="McTester")
    for permission in Permission.objects.filter(codename__in=permissions):
        user.user_permissions.add(permission)
    login_as(client, user)
    return user


def assert_meta(test_case: TestCase, user, key, value):
    test_case.assertEqual(UserMeta.objects.get(user=user, key=key).value, value)


def response_is_login_page(test_case: TestCase, response: HttpResponse):
    test_case.assertEqual(response.status_code, 302)
    test_case.assertIn("/login/", response["Location"])
