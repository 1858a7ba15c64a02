from django.urls import path

from . import api, views

app_name = "applications"

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    path("new/", views.create, name="create"),
    path("<int:pk>/", views.detail, name="detail"),
    path("<int:pk>/documents/", views.upload_document, name="upload_document"),
    path("<int:pk>/submit/", views.submit, name="submit"),
    path("<int:pk>/documents/<int:document_pk>/file/", views.document_file, name="document_file"),
    path("staff/", views.staff_dashboard, name="staff_dashboard"),
    path("staff/all/", views.staff_list, name="staff_list"),
    path("staff/<int:pk>/", views.review, name="review"),
    path("staff/<int:pk>/documents/<int:document_pk>/", views.review_document, name="review_document"),
    path("api/status/", api.status_feed, name="status_feed"),
]
