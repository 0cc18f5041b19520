# users/urls.py

from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import RegisterView, UserViewSet

router = SimpleRouter()
router.register(r'', UserViewSet, basename='user')

urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('', include(router.urls)),
]
