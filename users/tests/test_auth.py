from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase


class AuthFlowTests(APITestCase):
    def setUp(self):
        self.User = get_user_model()
        self.password = "StrongPass123!"
        self.user = self.User.objects.create_user(
            username="jdoe",
            email="JDoe@Example.com ",
            password=self.password,
            phone="+6281234567890",
        )

    def _signin(self, identifier):
        return self.client.post(
            "/api/v1/auth/signin/",
            {"identifier": identifier, "password": self.password},
            format="json",
        )

    def test_email_is_normalized_and_display_name_defaults(self):
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, "jdoe@example.com")
        self.assertEqual(self.user.display_name, "jdoe")
        self.assertEqual(self.user.role, self.User.ROLE_VIEWER)

    def test_signin_with_email_is_case_insensitive(self):
        resp = self._signin("JDOE@example.com")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)

    def test_signin_with_phone(self):
        resp = self._signin("+6281234567890")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_signin_rejects_wrong_password(self):
        resp = self.client.post(
            "/api/v1/auth/signin/",
            {"identifier": "jdoe@example.com", "password": "nope"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_signin_rejects_inactive_user(self):
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])
        resp = self._signin("jdoe@example.com")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_profile_requires_auth(self):
        resp = self.client.get("/api/v1/account/profile/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile_with_access_token(self):
        access = self._signin("jdoe@example.com").data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        resp = self.client.get("/api/v1/account/profile/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["email"], "jdoe@example.com")
        self.assertEqual(resp.data["whatsapp_url"], "https://wa.me/6281234567890")

    def test_profile_patch_updates_contact_fields_only(self):
        self.client.force_authenticate(user=self.user)
        resp = self.client.patch(
            "/api/v1/account/profile/",
            {"display_name": "John", "phone": "+14155552671", "role": "admin"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.display_name, "John")
        self.assertEqual(self.user.phone, "+14155552671")
        # role is read-only on the profile
        self.assertEqual(self.user.role, self.User.ROLE_VIEWER)

    def test_profile_patch_rejects_malformed_phone(self):
        self.client.force_authenticate(user=self.user)
        resp = self.client.patch("/api/v1/account/profile/", {"phone": "12-ab"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_signout_blacklists_refresh(self):
        refresh = self._signin("jdoe@example.com").data["refresh"]
        resp = self.client.post("/api/v1/auth/signout/", {"refresh": refresh}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_205_RESET_CONTENT)
        resp2 = self.client.post("/api/v1/auth/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(resp2.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_signout_requires_refresh(self):
        resp = self.client.post("/api/v1/auth/signout/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_whatsapp_url_empty_without_phone(self):
        user = self.User.objects.create_user(username="nophone", email="nophone@example.com", password="x")
        self.assertEqual(user.whatsapp_url, "")
