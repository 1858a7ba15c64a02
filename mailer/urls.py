from django.urls import path

from . import views

app_name = "mailer"

urlpatterns = [
    path("notifications/unsubscribe/", views.unsubscribe, name="unsubscribe"),
]
