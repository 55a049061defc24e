from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("memberships/", include("memberships.urls")),
]

handler404 = "marketplace.views.error_404_view"
handler500 = "marketplace.views.error_500_view"
