from django.contrib import admin
from django.urls import include, path
from accounts import views as accounts_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("django-rq/", include("django_rq.urls")),
    path("webhooks/email/", include("anymail.urls")),
    path("accounts/", include("allauth.urls")),
    path("", accounts_views.home, name="home"),
    # portal sections
    path("me/", include("accounts.urls")),
    path("catalog/", include("catalog.urls")),
    path("applications/", include("applications.urls")),
    path("support/", include("support.urls")),
    # unsubscribe route
    path("", include("mailer.urls")),
]
