# fintrack/urls.py
# 🗺️ Root URL map: admin, accounts, finance pages and the JSON API.

from django.contrib import admin                      # 🛠️ store administration (the only delete path)
from django.urls import include, path                 # 🔗 route helpers
from django.views.generic import RedirectView         # ↪️ "/" → dashboard

urlpatterns = [
    path("", RedirectView.as_view(pattern_name="finance:dashboard", permanent=False), name="root"),
    path("admin/", admin.site.urls),
    path("accounts/", include("accounts.urls")),
    path("api/", include("finance.api_urls")),
    path("", include("finance.urls")),
]

handler404 = "fintrack.views.page_not_found_view"     # 🚫 custom 404 page
