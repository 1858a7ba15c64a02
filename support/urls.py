from django.urls import path

from . import api, views

app_name = "support"

urlpatterns = [
    path("", views.index, name="index"),
    path("tickets/", views.staff_list, name="staff_list"),
    path("tickets/<int:pk>/", views.detail, name="detail"),
    path("tickets/<int:pk>/messages/", views.post_message, name="post_message"),
    path("tickets/<int:pk>/status/", views.update_status, name="update_status"),
    path("tickets/<int:pk>/assign/", views.assign, name="assign"),
    path("api/tickets/<int:pk>/feed/", api.ticket_feed, name="ticket_feed"),
]
