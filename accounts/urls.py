# accounts/urls.py

from django.contrib.auth import views as auth_views
from django.urls import path
from . import views

# 🏷️ 'accounts:route_name'
app_name = "accounts"

urlpatterns = [
    path("signup/", views.signup, name="signup"),

    path(
        "login/",
        auth_views.LoginView.as_view(template_name="registration/login.html"),
        name="login",
    ),

    # ✅ Logout is POST-only and lands back on the login page
    path("logout/", views.logout_view, name="logout"),

    # 🙋 Display name
    path("account/", views.account, name="account"),
]
