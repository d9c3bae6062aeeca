from django.urls import path
from .views import KeyLoginView, KeyRequestView

urlpatterns = [
    path("login/", KeyLoginView.as_view(), name="key-login"),
    path("key/", KeyRequestView.as_view(), name="key-request"),
]
