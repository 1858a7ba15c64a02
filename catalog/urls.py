from django.urls import path
from . import views

app_name = "catalog"

urlpatterns = [
    path("", views.browse, name="browse"),
    path("universities/", views.university_list, name="university_list"),
    path("universities/new/", views.university_edit, name="university_create"),
    path("universities/<int:pk>/edit/", views.university_edit, name="university_edit"),
    path("universities/<int:pk>/delete/", views.university_delete, name="university_delete"),
    path("universities/<int:university_pk>/programs/new/", views.program_edit, name="program_create"),
    path("universities/<int:university_pk>/programs/<int:pk>/edit/", views.program_edit, name="program_edit"),
    path("universities/<int:university_pk>/programs/<int:pk>/delete/", views.program_delete, name="program_delete"),
    path("document-types/", views.document_type_list, name="document_type_list"),
    path("document-types/new/", views.document_type_edit, name="document_type_create"),
    path("document-types/<int:pk>/edit/", views.document_type_edit, name="document_type_edit"),
    path("document-types/<int:pk>/delete/", views.document_type_delete, name="document_type_delete"),
    path("document-types/request/", views.document_request, name="document_request"),
]
