"""
URL configuration for testing photo_blog.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("photo_blog.urls")),
]
