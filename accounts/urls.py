from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    path("profile/", views.profile, name="profile"),
    path("preferences/", views.preferences, name="preferences"),
    path("applicants/", views.applicant_list, name="applicant_list"),
    path("applicants/<int:pk>/", views.applicant_detail, name="applicant_detail"),
]
