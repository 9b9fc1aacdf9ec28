"""
URL configuration for photo_blog.

Include in your project urls.py:

    path('api/', include('photo_blog.urls')),
"""
from django.urls import path

from . import views
from .store import PostStore

app_name = "photo_blog"

# One store shared by every post view.
store = PostStore()

urlpatterns = [
    # Posts
    path("posts/", views.PostListView.as_view(store=store), name="post_list"),
    path("posts/<str:key>/", views.PostDetailView.as_view(store=store), name="post_detail"),

    # Admin session
    path("login/", views.LoginView.as_view(), name="login"),
    path("logout/", views.LogoutView.as_view(), name="logout"),
    path("auth/user/", views.CurrentUserView.as_view(), name="current_user"),
]
