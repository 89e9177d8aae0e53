import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from scheduling.data.models import Card, Deck

User = get_user_model()


@pytest.mark.django_db
class TestMockLoginMiddleware:
    def setup_method(self):
        self.client = APIClient()
        self.url = reverse("daily-stats")
        self.test_username = "testuser"
        self.user = User.objects.create_user(username=self.test_username)

    def test_user_resolved_from_header(self):
        """Test that user can authenticate via X-User-NAME header"""
        response = self.client.get(self.url, HTTP_X_USER_NAME=self.test_username)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["cards_to_learn"] == 0

    def test_non_existent_user_header(self):
        """Test that non-existent user in header returns 401"""
        response = self.client.get(self.url, HTTP_X_USER_NAME="nonexistentuser")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_inactive_user_header(self):
        self.user.is_active = False
        self.user.save()

        response = self.client.get(self.url, HTTP_X_USER_NAME=self.test_username)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_without_authentication(self):
        """Test that unauthenticated request returns 401"""
        response = self.client.get(self.url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response["WWW-Authenticate"] == "X-User-NAME"


@pytest.mark.django_db
def test_init_data_resets_and_loads_demo_learner():
    User.objects.create_user(username="leftover")

    call_command("init_data", "--decks", "2", "--cards", "5", "--username", "demo")

    assert list(User.objects.values_list("username", flat=True)) == ["demo"]
    assert Deck.objects.filter(user__username="demo").count() == 2
    assert Card.objects.filter(deck__user__username="demo", learning_status="new").count() == 10
